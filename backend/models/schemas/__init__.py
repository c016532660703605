"""Pydantic contracts for extracted resume data."""

from models.schemas.basic_info import BasicInfo
from models.schemas.batch import (
    AIExtractionBatch,
    BatchExtractionResult,
    ExtractionMetadata,
    ExtractionStats,
    ServiceStatus,
    ValidationIssue,
    ValidationResult,
)
from models.schemas.education import Education
from models.schemas.experience import Experience
from models.schemas.extraction_result import ExtractionResult, ResultMetadata
from models.schemas.extractor_config import ExtractorConfig, PatternBundle, SkillCategory
from models.schemas.project import Project, STARElements
from models.schemas.skills import Certification, Language, SkillItem, Skills, TechnicalSkill

__all__ = [
    "AIExtractionBatch",
    "BasicInfo",
    "BatchExtractionResult",
    "Certification",
    "Education",
    "Experience",
    "ExtractionMetadata",
    "ExtractionResult",
    "ExtractionStats",
    "ExtractorConfig",
    "Language",
    "PatternBundle",
    "Project",
    "ResultMetadata",
    "STARElements",
    "ServiceStatus",
    "SkillCategory",
    "SkillItem",
    "Skills",
    "TechnicalSkill",
    "ValidationIssue",
    "ValidationResult",
]
