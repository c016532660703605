"""Confidence envelope returned by every extractor call."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ResultMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str = "regex"  # regex | hybrid
    processing_time_ms: float = 0.0
    degraded: bool = False


class ExtractionResult(BaseModel, Generic[T]):
    """One domain's extracted data with its confidence and warnings.

    Frozen: merge and rescoring build a new envelope instead of editing one.
    """

    model_config = ConfigDict(frozen=True)

    data: T
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    warnings: list[str] = []
    metadata: ResultMetadata = ResultMetadata()
