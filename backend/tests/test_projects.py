import pytest

from models.schemas.project import Project
from services.extractors.projects import ProjectExtractor, projects_match

OPEN_SOURCE = """项目经历
分布式任务调度框架 2021.01-2021.12
担任核心开发，开源项目
基于Python和Redis实现任务分发与失败重试
地址：https://github.com/example/scheduler
累计获得500+个星标
"""


@pytest.fixture
def extractor(rule_config):
    return ProjectExtractor(rule_config)


class TestProjectExtractor:
    @pytest.mark.asyncio
    async def test_sample_project(self, extractor, sample_resume):
        records = (await extractor.extract(sample_resume)).data
        assert len(records) == 1
        project = records[0]
        assert project.name == "在线教育平台"
        assert project.technologies == ["Vue", "Spring Boot", "MySQL"]
        assert project.start_date == "2022-03"
        assert project.end_date == "2022-06"
        assert any("1000+" in a for a in project.achievements)
        assert len(project.description) >= 10

    @pytest.mark.asyncio
    async def test_star_tagging(self, extractor, sample_resume):
        project = (await extractor.extract(sample_resume)).data[0]
        assert project.star is not None
        assert project.star.action
        assert project.star.result

    @pytest.mark.asyncio
    async def test_open_source_project(self, extractor):
        project = (await extractor.extract(OPEN_SOURCE)).data[0]
        assert project.name == "分布式任务调度框架"
        assert project.type == "open_source"
        assert project.role == "开发工程师"
        assert project.url == "https://github.com/example/scheduler"
        assert "Python" in project.technologies
        assert "Redis" in project.technologies

    @pytest.mark.asyncio
    async def test_labelled_name(self, extractor):
        text = "项目名称：智能客服系统\n使用Java和MySQL开发了工单与知识库模块"
        project = (await extractor.extract(text)).data[0]
        assert project.name == "智能客服系统"

    @pytest.mark.asyncio
    async def test_short_description_dropped(self, extractor):
        result = await extractor.extract("项目经历\n博客系统\n使用Go")
        assert result.data == []

    @pytest.mark.asyncio
    async def test_every_project_has_name_and_description(self, extractor, sample_resume):
        for text in (sample_resume, OPEN_SOURCE):
            for project in (await extractor.extract(text)).data:
                assert project.name
                assert project.description


class TestProjectsMatch:
    def test_equal_names(self):
        assert projects_match(Project(name="在线教育平台"), Project(name="在线教育平台"), 0.7)

    def test_name_containment(self):
        assert projects_match(Project(name="教育平台"), Project(name="在线教育平台"), 0.7)

    def test_description_containment(self):
        a = Project(name="甲系统", description="实现用户管理功能")
        b = Project(name="乙平台", description="基于Vue实现用户管理功能，支持批量导入")
        assert projects_match(a, b, 0.7)

    def test_similar_names_above_threshold(self):
        a = Project(name="电商后台管理系统")
        b = Project(name="电商后台管理平台")
        assert projects_match(a, b, 0.7)
        assert not projects_match(a, b, 0.95)

    def test_unrelated(self):
        assert not projects_match(Project(name="在线教育平台"), Project(name="物流调度系统"), 0.7)

    def test_empty_name_never_matches(self):
        assert not projects_match(Project(name=""), Project(name=""), 0.7)
