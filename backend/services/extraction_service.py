"""Orchestrator: five-domain resume extraction with optional AI assistance.

Pipeline:

    text ──┬── BasicInfo ─┐
           ├── Education  │  rule extractors, concurrent,
           ├── Experience ├─ each under its own deadline
           ├── Projects   │
           ├── Skills ────┘
           │                        ┌─ merge per domain (rules win)
           └── AI batch (optional) ─┴─ rescore merged domains
                                        │
                         metadata ──────┴── repository.update (optional)

Extraction never fails the call. Only the final persistence step may raise.
"""

import asyncio
import logging
import time
from typing import Any

from pydantic import BaseModel

from config import get_extractor_config, settings
from models.schemas.basic_info import BasicInfo
from models.schemas.batch import (
    DOMAINS,
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
from models.schemas.extraction_result import ExtractionResult
from models.schemas.extractor_config import ExtractorConfig
from models.schemas.project import Project
from models.schemas.skills import Skills
from services.ai_extractor import AIAssistantExtractor
from services.extractors.base import BaseExtractor, preprocess
from services.extractors.basic_info import BasicInfoExtractor
from services.extractors.education import EducationExtractor
from services.extractors.experience import ExperienceExtractor
from services.extractors.projects import ProjectExtractor
from services.extractors.skills import SkillsExtractor
from services.hybrid_merge import HybridExtractionStrategy
from services.repository import InMemoryResumeRepository, PersistenceError, ResumeRepository

logger = logging.getLogger(__name__)

AI_CALLS_PER_RUN = 5


def has_content(data: Any) -> bool:
    if isinstance(data, Skills):
        return not data.is_empty()
    if isinstance(data, BaseModel):
        return any(v not in (None, "", [], False) for v in data.model_dump().values())
    return bool(data)


class ExtractionService:
    def __init__(
        self,
        config: ExtractorConfig | None = None,
        ai_extractor: AIAssistantExtractor | None = None,
        repository: ResumeRepository | None = None,
    ):
        self.config = config or get_extractor_config()
        self.extractors: dict[str, BaseExtractor] = {
            "basic_info": BasicInfoExtractor(self.config),
            "education": EducationExtractor(self.config),
            "work_experience": ExperienceExtractor(self.config),
            "projects": ProjectExtractor(self.config),
            "skills": SkillsExtractor(self.config),
        }
        if ai_extractor is None and self.config.enable_ai_assistance:
            ai_extractor = AIAssistantExtractor(self.config)
        self.ai_extractor = ai_extractor
        self.merger = HybridExtractionStrategy(self.config.project_similarity_threshold)
        self.repository = repository or InMemoryResumeRepository()

    @property
    def ai_enabled(self) -> bool:
        return self.config.enable_ai_assistance and self.ai_extractor is not None

    # -- full run -----------------------------------------------------------

    async def extract_all(self, text: str, resume_id: str | None = None) -> BatchExtractionResult:
        started = time.perf_counter()
        errors: list[str] = []

        rule_results, ai_batch = await asyncio.gather(
            self._run_rules(text),
            self._run_ai(text, errors),
        )

        processed = preprocess(text or "")
        results: dict[str, ExtractionResult] = {}
        ai_contributed = False
        for domain in DOMAINS:
            ai_data = getattr(ai_batch, domain) if ai_batch else None
            results[domain], used = self._merge_domain(domain, rule_results[domain], ai_data, processed)
            ai_contributed = ai_contributed or used

        metadata = self._build_metadata(
            results,
            errors,
            ai_contributed,
            (time.perf_counter() - started) * 1000,
        )
        batch = BatchExtractionResult(**results, metadata=metadata)
        logger.info(
            "Extraction finished: method=%s confidence=%.2f extracted=%d/%d in %.0fms",
            metadata.method,
            metadata.confidence_score,
            len(metadata.fields_extracted),
            len(DOMAINS),
            metadata.processing_time_ms,
        )

        if resume_id:
            self._persist(resume_id, batch)
        return batch

    async def _run_rules(self, text: str) -> dict[str, ExtractionResult]:
        results = await asyncio.gather(*(self.extractors[d].extract(text) for d in DOMAINS))
        return dict(zip(DOMAINS, results))

    async def _run_ai(self, text: str, errors: list[str]) -> AIExtractionBatch | None:
        if not self.ai_enabled:
            return None
        try:
            batch = await self.ai_extractor.extract_all(text)
        except Exception as e:
            logger.error("AI extraction batch failed, using rule-based results: %s", e)
            errors.append(f"AI辅助提取失败: {e}")
            return None
        if not batch.has_data():
            logger.warning("AI pass returned no usable data, using rule-based results")
        return batch

    # -- merge --------------------------------------------------------------

    def _merge_domain(
        self,
        domain: str,
        rule: ExtractionResult,
        ai_data: Any,
        processed_text: str,
    ) -> tuple[ExtractionResult, bool]:
        """Merged envelope for one domain, and whether AI data was used."""
        ai_data = self._usable_ai_data(domain, ai_data)
        if ai_data is None or not has_content(ai_data):
            return rule, False

        extractor = self.extractors[domain]
        merged = self._merge_data(domain, rule.data, ai_data)
        ai_score = 1.0 if extractor.validate_result(ai_data) else 0.0
        # A degraded rule run keeps its timeout/failure warning.
        carried = rule.warnings if rule.metadata.degraded else None
        return extractor.create_result(
            merged,
            processed_text,
            rule.metadata.processing_time_ms,
            method="hybrid",
            ai_score=ai_score,
            extra_warnings=carried,
        ), True

    def _merge_data(self, domain: str, rule_data: Any, ai_data: Any) -> Any:
        if domain == "basic_info":
            return self.merger.merge_basic_info(rule_data, ai_data)
        if domain == "education":
            return self.merger.merge_education(rule_data, ai_data)
        if domain == "work_experience":
            return self.merger.merge_experience(rule_data, ai_data)
        if domain == "projects":
            return self.merger.merge_projects(rule_data, ai_data)
        return self.merger.merge_skills(rule_data, ai_data)

    def _usable_ai_data(self, domain: str, ai_data: Any) -> Any:
        """Drop AI records that would break the per-record validity rules."""
        if ai_data is None:
            return None
        ext = self.extractors[domain]
        if domain == "education":
            return [r for r in ai_data if ext.is_valid_school(r.school) and ext.is_valid_major(r.major)]
        if domain == "work_experience":
            return [r for r in ai_data if ext.is_valid_company(r.company) and ext.is_valid_position(r.position)]
        if domain == "projects":
            return [r for r in ai_data if ext.is_valid_name(r.name) and ext.is_valid_description(r.description)]
        return ai_data

    # -- metadata and persistence -------------------------------------------

    def _build_metadata(
        self,
        results: dict[str, ExtractionResult],
        errors: list[str],
        ai_contributed: bool,
        elapsed_ms: float,
    ) -> ExtractionMetadata:
        extracted = [d for d in DOMAINS if has_content(results[d].data)]
        warnings = [w for d in DOMAINS for w in results[d].warnings]
        for d in DOMAINS:
            if results[d].metadata.degraded:
                errors.extend(results[d].warnings)
        confidence = sum(r.confidence for r in results.values()) / len(DOMAINS)
        return ExtractionMetadata(
            method="hybrid" if ai_contributed else "rule-based",
            ai_model=self.config.ai_model if self.ai_enabled else None,
            confidence_score=round(confidence, 4),
            processing_time_ms=round(elapsed_ms, 2),
            warnings=list(dict.fromkeys(warnings)),
            errors=list(dict.fromkeys(errors)),
            fields_extracted=extracted,
            fields_missing=[d for d in DOMAINS if d not in extracted],
        )

    def _persist(self, resume_id: str, batch: BatchExtractionResult) -> None:
        metadata = batch.metadata
        payload = {
            domain: getattr(batch, domain).model_dump(mode="json")["data"] for domain in DOMAINS
        }
        payload["parsed_data"] = {
            "extracted_sections": {d: d in metadata.fields_extracted for d in DOMAINS},
            "parsing_metadata": {
                "method": metadata.method,
                "confidence": metadata.confidence_score,
                "timestamp": metadata.timestamp.isoformat(),
                "warnings": metadata.warnings,
            },
        }
        try:
            self.repository.update(resume_id, payload)
        except Exception as e:
            logger.error("Failed to save extraction result for resume %s: %s", resume_id, e)
            raise PersistenceError(f"Failed to save extraction result for resume {resume_id}") from e
        logger.info(
            "Extraction result saved for resume %s (%d sections)",
            resume_id, len(metadata.fields_extracted),
        )

    # -- single-domain entry points -----------------------------------------

    async def _extract_domain(self, domain: str, text: str) -> Any:
        rule = await self.extractors[domain].extract(text)
        if not self.ai_enabled:
            return rule.data
        ai_calls = {
            "basic_info": self.ai_extractor.extract_basic_info,
            "education": self.ai_extractor.extract_education,
            "work_experience": self.ai_extractor.extract_experience,
            "projects": self.ai_extractor.extract_projects,
            "skills": self.ai_extractor.extract_skills,
        }
        try:
            ai_data = await ai_calls[domain](text)
        except Exception as e:
            logger.error("AI %s extraction failed: %s", domain, e)
            ai_data = None
        ai_data = self._usable_ai_data(domain, ai_data)
        if ai_data is None:
            return rule.data
        return self._merge_data(domain, rule.data, ai_data)

    async def extract_basic_info(self, text: str) -> BasicInfo:
        return await self._extract_domain("basic_info", text)

    async def extract_education(self, text: str) -> list[Education]:
        return await self._extract_domain("education", text)

    async def extract_experience(self, text: str) -> list[Experience]:
        return await self._extract_domain("work_experience", text)

    async def extract_projects(self, text: str) -> list[Project]:
        return await self._extract_domain("projects", text)

    async def extract_skills(self, text: str) -> Skills:
        return await self._extract_domain("skills", text)

    # -- reporting ----------------------------------------------------------

    def validate_extraction_results(self, batch: BatchExtractionResult) -> ValidationResult:
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        info = batch.basic_info.data
        if not (info.name or info.phone or info.email):
            errors.append(ValidationIssue(
                field="basic_info",
                message="未能提取到基本联系信息（姓名、电话或邮箱）",
                code="MISSING_CONTACT_INFO",
            ))
        if not batch.education.data:
            warnings.append(ValidationIssue(
                field="education",
                message="未能提取到教育背景信息",
                suggestion="检查简历中是否包含教育经历章节",
            ))
        if not batch.work_experience.data:
            warnings.append(ValidationIssue(
                field="work_experience",
                message="未能提取到工作经历信息",
                suggestion="检查简历中是否包含工作经验章节",
            ))
        if batch.metadata.confidence_score < self.config.confidence_threshold:
            warnings.append(ValidationIssue(
                field="overall",
                message="提取结果置信度较低",
                suggestion="建议人工校验提取结果",
            ))
        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def get_extraction_stats(self, batch: BatchExtractionResult, text: str | None = None) -> ExtractionStats:
        metadata = batch.metadata
        ai_ran = metadata.ai_model is not None and self.ai_extractor is not None
        extracted = len(metadata.fields_extracted)
        return ExtractionStats(
            total_fields=len(DOMAINS),
            extracted_fields=extracted,
            success_rate=round(extracted / len(DOMAINS), 4),
            average_confidence=metadata.confidence_score,
            processing_time_ms=metadata.processing_time_ms,
            ai_calls=AI_CALLS_PER_RUN if ai_ran else 0,
            estimated_cost=self.ai_extractor.estimate_cost(text) if ai_ran and text else 0.0,
        )

    async def get_service_status(self) -> ServiceStatus:
        ai_available = False
        if self.ai_extractor is not None:
            try:
                ai_available = await self.ai_extractor.check_availability()
            except Exception as e:
                logger.warning("AI availability check failed: %s", e)
        return ServiceStatus(
            rule_extractors=list(self.extractors),
            ai_enabled=self.ai_enabled,
            ai_available=ai_available,
            ai_model=self.config.ai_model if self.ai_enabled else None,
            extraction_mode=settings.extraction_mode,
        )
