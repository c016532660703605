"""Aggregate result of a full five-domain extraction run."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.basic_info import BasicInfo
from models.schemas.education import Education
from models.schemas.experience import Experience
from models.schemas.extraction_result import ExtractionResult
from models.schemas.project import Project
from models.schemas.skills import Skills

ExtractionMethod = Literal["rule-based", "ai-assisted", "hybrid"]

# Domain keys in the order they are reported and persisted.
DOMAINS: tuple[str, ...] = ("basic_info", "education", "work_experience", "projects", "skills")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExtractionMetadata(BaseModel):
    method: ExtractionMethod = "rule-based"
    ai_model: str | None = None
    confidence_score: float = 0.0
    processing_time_ms: float = 0.0
    warnings: list[str] = []
    errors: list[str] = []
    fields_extracted: list[str] = []
    fields_missing: list[str] = []
    timestamp: datetime = Field(default_factory=_utcnow)


class BatchExtractionResult(BaseModel):
    basic_info: ExtractionResult[BasicInfo]
    education: ExtractionResult[list[Education]]
    work_experience: ExtractionResult[list[Experience]]
    projects: ExtractionResult[list[Project]]
    skills: ExtractionResult[Skills]
    metadata: ExtractionMetadata = ExtractionMetadata()


class AIExtractionBatch(BaseModel):
    """Per-domain output of the AI pass. ``None`` means that domain failed."""
    basic_info: BasicInfo | None = None
    education: list[Education] | None = None
    work_experience: list[Experience] | None = None
    projects: list[Project] | None = None
    skills: Skills | None = None

    def has_data(self) -> bool:
        return any(getattr(self, d) is not None for d in DOMAINS)


class ValidationIssue(BaseModel):
    field: str
    message: str
    code: str | None = None
    suggestion: str | None = None


class ValidationResult(BaseModel):
    is_valid: bool = True
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []


class ExtractionStats(BaseModel):
    total_fields: int = len(DOMAINS)
    extracted_fields: int = 0
    success_rate: float = 0.0
    average_confidence: float = 0.0
    processing_time_ms: float = 0.0
    ai_calls: int = 0
    estimated_cost: float = 0.0


class ServiceStatus(BaseModel):
    rule_extractors: list[str] = []
    ai_enabled: bool = False
    ai_available: bool = False
    ai_model: str | None = None
    extraction_mode: str = "default"
