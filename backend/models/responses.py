from typing import Any

from pydantic import BaseModel

from models.schemas.batch import BatchExtractionResult, ExtractionStats, ValidationResult


class DomainExtractionResponse(BaseModel):
    domain: str
    data: Any


class UploadExtractionResponse(BaseModel):
    filename: str
    text_length: int = 0
    result: BatchExtractionResult


class ValidationResponse(BaseModel):
    validation: ValidationResult
    stats: ExtractionStats
