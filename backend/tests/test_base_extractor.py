import time

import pytest

from config import create_custom_config
from models.schemas.extraction_result import ExtractionResult
from services.extractors.base import BaseExtractor, preprocess
from services.extractors.basic_info import BasicInfoExtractor
from services.extractors.education import EducationExtractor
from services.extractors.experience import ExperienceExtractor
from services.extractors.projects import ProjectExtractor
from services.extractors.skills import SkillsExtractor

ALL_EXTRACTORS = [
    BasicInfoExtractor,
    EducationExtractor,
    ExperienceExtractor,
    ProjectExtractor,
    SkillsExtractor,
]


class LineExtractor(BaseExtractor[list[str]]):
    domain = "lines"
    label = "文本行"
    result_model = ExtractionResult[list[str]]

    def _extract(self, text):
        return [line for line in text.split("\n") if line]

    def validate_result(self, data):
        return bool(data)

    def default_data(self):
        return []


class FailingExtractor(BasicInfoExtractor):
    def _extract(self, text):
        raise RuntimeError("boom")


def test_preprocess():
    assert preprocess("  张三\r\n手机：  138\t1234　5678  \r\n\r\n") == "张三\n手机： 138 1234 5678"


class TestConfidence:
    def test_missing_signals_are_excluded(self, rule_config):
        extractor = LineExtractor(rule_config)
        # Only regex match and format validity are present, both perfect.
        assert extractor.get_confidence_score(["a"], "a") == 1.0

    def test_ai_signal_only_counts_when_enabled(self, rule_config):
        off = LineExtractor(rule_config)
        on = LineExtractor(create_custom_config(enable_ai_assistance=True))
        assert off.get_confidence_score(["a"], "a", ai_score=0.0) == 1.0
        assert on.get_confidence_score(["a"], "a", ai_score=0.0) == pytest.approx(0.625)
        assert on.get_confidence_score(["a"], "a", ai_score=None) == 1.0

    def test_invalid_result_warns(self, rule_config):
        result = LineExtractor(rule_config).create_result([], "", 1.0)
        assert "文本行结果未通过格式校验" in result.warnings

    @pytest.mark.asyncio
    @pytest.mark.parametrize("extractor_cls", ALL_EXTRACTORS)
    @pytest.mark.parametrize("text", ["", "张三", "!!!\n???", "2018-2022 清华大学"])
    async def test_confidence_bounds(self, rule_config, extractor_cls, text):
        result = await extractor_cls(rule_config).extract(text)
        assert 0.0 <= result.confidence <= 1.0


class TestExecution:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("extractor_cls", ALL_EXTRACTORS)
    async def test_deterministic(self, rule_config, extractor_cls, sample_resume):
        extractor = extractor_cls(rule_config)
        first = await extractor.extract(sample_resume)
        second = await extractor.extract(sample_resume)
        assert first.model_dump(exclude={"metadata"}) == second.model_dump(exclude={"metadata"})

    @pytest.mark.asyncio
    async def test_exception_becomes_degraded_result(self, rule_config):
        result = await FailingExtractor(rule_config).extract("张三")
        assert result.confidence == 0.0
        assert result.metadata.degraded is True
        assert result.data.name is None
        assert result.warnings == ["基本信息提取失败: boom"]

    @pytest.mark.slow
    @pytest.mark.asyncio
    @pytest.mark.parametrize("extractor_cls", ALL_EXTRACTORS)
    async def test_timeout_returns_degraded_result(self, extractor_cls, sample_resume):
        extractor = extractor_cls(create_custom_config(enable_ai_assistance=False, timeout_ms=1))
        big = sample_resume * 500
        started = time.perf_counter()
        result = await extractor.extract(big)
        elapsed = time.perf_counter() - started
        assert elapsed < 1.0
        assert result.metadata.degraded is True
        assert result.confidence == 0.0
        assert result.warnings and "超时" in result.warnings[0]
        assert result.data == extractor.default_data()
