"""Extraction contract shared by all domain extractors.

Every extractor:
    - preprocesses raw text (line endings, whitespace runs, trim)
    - runs its rules in a worker thread, raced against ``timeout_ms``
    - scores the result as a weighted mean of independent signals
    - never raises: timeouts and internal errors yield a degraded result
"""

import asyncio
import logging
import re
import time
from abc import ABC, abstractmethod
from contextvars import ContextVar
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from config import get_extractor_config
from models.schemas.extraction_result import ExtractionResult, ResultMetadata
from models.schemas.extractor_config import ExtractorConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Confidence signal weights
W_REGEX_MATCH = 0.3
W_CONTEXT_RELEVANCE = 0.25
W_DATA_COMPLETENESS = 0.25
W_FORMAT_VALIDITY = 0.2
W_AI_CONFIDENCE = 0.3

_deadline: ContextVar[float | None] = ContextVar("extraction_deadline", default=None)


class ExtractionTimeout(Exception):
    """Raised inside a worker thread once its extraction deadline has passed."""


def checkpoint() -> None:
    """Abort the running extraction if its deadline has passed.

    Called from the line loops so a timed-out worker thread stops on its own
    instead of running to completion after the caller has moved on.
    """
    deadline = _deadline.get()
    if deadline is not None and time.monotonic() > deadline:
        raise ExtractionTimeout()


_INLINE_SPACE_RE = re.compile(r"[^\S\n]+")


def preprocess(text: str) -> str:
    """Normalize line endings, collapse whitespace runs within lines, trim."""
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("　", " ")
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def _string_values(value: Any) -> list[str]:
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, dict):
        return [s for v in value.values() for s in _string_values(v)]
    if isinstance(value, list):
        return [s for v in value for s in _string_values(v)]
    return []


class BaseExtractor(ABC, Generic[T]):
    """Base class for the five domain extractors.

    Subclasses must implement:
        - domain / label: result key and human-readable (Chinese) name
        - result_model: the parametrized ExtractionResult for the domain type
        - _extract(text): rule extraction over preprocessed text
        - validate_result(data): domain validity rule
        - default_data(): empty result shape
    and may override the scoring hooks ``context_score`` and
    ``completeness_score`` and ``collect_warnings``.
    """

    domain: str = ""
    label: str = ""
    result_model: type[ExtractionResult] = ExtractionResult

    def __init__(self, config: ExtractorConfig | None = None):
        self.config = config or get_extractor_config()
        self.patterns = self.config.patterns

    # -- domain hooks -------------------------------------------------------

    @abstractmethod
    def _extract(self, text: str) -> T:
        """Extract domain data from preprocessed text."""

    @abstractmethod
    def validate_result(self, data: T) -> bool:
        """Domain validity rule for the extracted data."""

    @abstractmethod
    def default_data(self) -> T:
        """Empty, default-shaped data returned by a degraded extraction."""

    def context_score(self, data: T) -> float | None:
        return None

    def completeness_score(self, data: T) -> float | None:
        return None

    def collect_warnings(self, data: T) -> list[str]:
        return []

    # -- scoring ------------------------------------------------------------

    def regex_score(self, data: T, text: str) -> float | None:
        """Fraction of extracted string values found verbatim in the source."""
        values = _string_values(data)
        if not values:
            return None
        return sum(1 for v in values if v in text) / len(values)

    def get_confidence_score(self, data: T, text: str, ai_score: float | None = None) -> float:
        signals: list[tuple[float, float | None]] = [
            (W_REGEX_MATCH, self.regex_score(data, text)),
            (W_CONTEXT_RELEVANCE, self.context_score(data)),
            (W_DATA_COMPLETENESS, self.completeness_score(data)),
            (W_FORMAT_VALIDITY, 1.0 if self.validate_result(data) else 0.0),
        ]
        if self.config.enable_ai_assistance:
            signals.append((W_AI_CONFIDENCE, ai_score))

        present = [(w, s) for w, s in signals if s is not None]
        total_weight = sum(w for w, _ in present)
        if total_weight == 0:
            return 0.0
        score = sum(w * s for w, s in present) / total_weight
        return round(min(max(score, 0.0), 1.0), 4)

    # -- result construction ------------------------------------------------

    def create_result(
        self,
        data: T,
        text: str,
        processing_time_ms: float,
        method: str = "regex",
        ai_score: float | None = None,
        extra_warnings: list[str] | None = None,
    ) -> ExtractionResult[T]:
        warnings = self.collect_warnings(data)
        if not self.validate_result(data):
            warnings.append(f"{self.label}结果未通过格式校验")
        warnings.extend(extra_warnings or [])
        return self.result_model(
            data=data,
            confidence=self.get_confidence_score(data, text, ai_score),
            warnings=list(dict.fromkeys(warnings)),
            metadata=ResultMetadata(method=method, processing_time_ms=round(processing_time_ms, 2)),
        )

    def degraded_result(self, warning: str, processing_time_ms: float = 0.0) -> ExtractionResult[T]:
        return self.result_model(
            data=self.default_data(),
            confidence=0.0,
            warnings=[warning],
            metadata=ResultMetadata(
                method="regex", processing_time_ms=round(processing_time_ms, 2), degraded=True,
            ),
        )

    # -- execution ----------------------------------------------------------

    def _run(self, text: str, deadline: float, started: float) -> ExtractionResult[T]:
        _deadline.set(deadline)
        processed = preprocess(text)
        data = self._extract(processed)
        checkpoint()
        return self.create_result(data, processed, (time.perf_counter() - started) * 1000)

    async def extract(self, text: str) -> ExtractionResult[T]:
        """Run the extraction under the configured deadline. Never raises."""
        started = time.perf_counter()
        timeout = self.config.timeout_ms / 1000
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(self._run, text or "", time.monotonic() + timeout, started),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, ExtractionTimeout):
            logger.warning("%s extraction timed out after %dms", self.domain, self.config.timeout_ms)
            return self.degraded_result(
                f"{self.label}提取超时 (timeout {self.config.timeout_ms}ms)",
                (time.perf_counter() - started) * 1000,
            )
        except Exception as e:
            logger.warning("%s extraction failed: %s", self.domain, e)
            return self.degraded_result(
                f"{self.label}提取失败: {e}", (time.perf_counter() - started) * 1000,
            )
        logger.debug("%s extracted in %.1fms", self.domain, result.metadata.processing_time_ms)
        return result
