import pytest

from services.extractors.education import EducationExtractor

MULTI_RECORD = """教育经历
2019.09-2022.06 北京大学 软件工程 硕士
2015.09-2019.06 武汉理工大学 计算机科学与技术 本科
"""


@pytest.fixture
def extractor(rule_config):
    return EducationExtractor(rule_config)


class TestEducationExtractor:
    @pytest.mark.asyncio
    async def test_segmentation_scenario(self, extractor, sample_resume):
        records = (await extractor.extract(sample_resume)).data
        assert len(records) == 1
        edu = records[0]
        assert "清华大学" in edu.school
        assert "计算机科学与技术" in edu.major
        assert edu.degree == "学士"
        assert edu.is_key_university is True
        assert edu.start_date == "2018-09"
        assert edu.end_date == "2022-06"

    @pytest.mark.asyncio
    async def test_gpa_and_honors(self, extractor, sample_resume):
        edu = (await extractor.extract(sample_resume)).data[0]
        assert edu.gpa == "3.8/4.0"
        assert any("奖学金" in h for h in edu.honors)

    @pytest.mark.asyncio
    async def test_multiple_records(self, extractor):
        records = (await extractor.extract(MULTI_RECORD)).data
        assert [r.school for r in records] == ["北京大学", "武汉理工大学"]
        assert records[0].degree == "硕士"
        assert records[0].major == "软件工程"
        assert records[1].degree == "学士"
        assert records[1].is_key_university is False

    @pytest.mark.asyncio
    async def test_lead_in_words_not_part_of_school(self, extractor):
        text = "教育背景\n就读于北京大学 软件工程 硕士 2019.09-2022.06"
        edu = (await extractor.extract(text)).data[0]
        assert edu.school == "北京大学"
        assert edu.major == "软件工程"
        assert edu.degree == "硕士"
        assert edu.is_key_university

    @pytest.mark.asyncio
    async def test_degree_inferred_from_school(self, extractor):
        text = "教育背景\n2016.09-2019.06 深圳职业技术学院 软件技术"
        edu = (await extractor.extract(text)).data[0]
        assert edu.degree == "专科"

    @pytest.mark.asyncio
    async def test_record_without_major_is_dropped(self, extractor):
        result = await extractor.extract("教育背景\n2015-2019 某某大学")
        assert result.data == []
        assert "未能提取到教育经历" in result.warnings

    @pytest.mark.asyncio
    async def test_every_record_has_school_and_major(self, extractor, sample_resume):
        for text in (sample_resume, MULTI_RECORD):
            for edu in (await extractor.extract(text)).data:
                assert edu.school
                assert edu.major


class TestValidation:
    def test_school_needs_suffix(self, extractor):
        assert extractor.is_valid_school("清华大学")
        assert not extractor.is_valid_school("字节跳动")

    def test_major_exclusions(self, extractor):
        assert extractor.is_valid_major("计算机科学与技术")
        assert not extractor.is_valid_major("大学毕业")
        assert not extractor.is_valid_major("")
