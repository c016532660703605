from models.schemas.basic_info import BasicInfo
from models.schemas.education import Education
from models.schemas.experience import Experience
from models.schemas.project import Project
from models.schemas.skills import Certification, Language, SkillItem, Skills, TechnicalSkill
from services.hybrid_merge import HybridExtractionStrategy

merger = HybridExtractionStrategy(project_similarity_threshold=0.7)


class TestBasicInfo:
    def test_rule_value_wins(self):
        rule = BasicInfo(name="张三", phone="13812345678")
        ai = BasicInfo(name="张叁", email="zhangsan@example.com")
        merged = merger.merge_basic_info(rule, ai)
        assert merged.name == "张三"
        assert merged.phone == "13812345678"
        assert merged.email == "zhangsan@example.com"

    def test_empty_string_is_filled(self):
        merged = merger.merge_basic_info(BasicInfo(summary=""), BasicInfo(summary="五年后端经验"))
        assert merged.summary == "五年后端经验"

    def test_none_is_pass_through(self):
        rule = BasicInfo(name="张三")
        assert merger.merge_basic_info(rule, None) is rule


class TestRecordLists:
    def test_education_added_only_when_unmatched(self):
        rule = [Education(school="清华大学", major="计算机科学与技术")]
        ai = [
            Education(school="清华大学", major="计算机科学与技术", degree="学士"),
            Education(school="北京大学", major="软件工程"),
        ]
        merged = merger.merge_education(rule, ai)
        assert [e.school for e in merged] == ["清华大学", "北京大学"]
        assert merged[0].degree == ""

    def test_experience_key_is_company_and_position(self):
        rule = [Experience(company="某某科技有限公司", position="工程师")]
        ai = [Experience(company="某某科技有限公司", position="技术经理")]
        assert len(merger.merge_experience(rule, ai)) == 2

    def test_projects_use_similarity(self):
        rule = [Project(name="电商后台管理系统", description="实现订单管理")]
        ai = [
            Project(name="电商后台管理平台", description="订单与库存"),
            Project(name="物流调度系统", description="路径规划"),
        ]
        merged = merger.merge_projects(rule, ai)
        assert [p.name for p in merged] == ["电商后台管理系统", "物流调度系统"]

    def test_inputs_are_not_mutated(self):
        rule = [Education(school="清华大学", major="计算机")]
        merger.merge_education(rule, [Education(school="北京大学", major="软件工程")])
        assert len(rule) == 1

    def test_none_is_pass_through(self):
        rule = [Project(name="在线教育平台", description="在线课程学习平台")]
        assert merger.merge_projects(rule, None) is rule


class TestSkills:
    def test_merge_by_category_and_name(self):
        rule = Skills(
            technical_skills=[TechnicalSkill(category="编程语言", items=[SkillItem(name="Java", proficiency="expert")])],
            soft_skills=["沟通能力"],
            languages=[Language(language="英语", certificate="CET-6")],
            certifications=[Certification(name="PMP", issuer="PMI")],
        )
        ai = Skills(
            technical_skills=[
                TechnicalSkill(category="编程语言", items=[SkillItem(name="java"), SkillItem(name="Go")]),
                TechnicalSkill(category="数据库", items=[SkillItem(name="MySQL")]),
            ],
            soft_skills=["沟通能力", "团队合作"],
            languages=[Language(language="英语"), Language(language="日语")],
            certifications=[Certification(name="PMP"), Certification(name="CPA")],
        )
        merged = merger.merge_skills(rule, ai)

        languages = merged.technical_skills[0]
        assert [i.name for i in languages.items] == ["Java", "Go"]
        assert languages.items[0].proficiency == "expert"
        assert merged.technical_skills[1].category == "数据库"
        assert merged.soft_skills == ["沟通能力", "团队合作"]
        assert [lang.language for lang in merged.languages] == ["英语", "日语"]
        assert merged.languages[0].certificate == "CET-6"
        assert [c.name for c in merged.certifications] == ["PMP", "CPA"]
        # The rule-side object is left untouched.
        assert [i.name for i in rule.technical_skills[0].items] == ["Java"]

    def test_skill_known_in_other_category_not_duplicated(self):
        rule = Skills(technical_skills=[TechnicalSkill(category="云服务", items=[SkillItem(name="Docker")])])
        ai = Skills(technical_skills=[TechnicalSkill(category="开发工具", items=[SkillItem(name="Docker")])])
        merged = merger.merge_skills(rule, ai)
        assert [t.category for t in merged.technical_skills] == ["云服务"]

    def test_none_is_pass_through(self):
        rule = Skills(soft_skills=["沟通能力"])
        assert merger.merge_skills(rule, None) is rule
