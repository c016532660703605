import pytest

from services.patterns.library import (
    identify_company_type,
    identify_industry,
    identify_position_level,
    is_key_university,
    load_english_patterns,
    load_patterns,
)
from services.patterns.regexes import (
    find_single_date,
    normalize_address,
    normalize_date,
    parse_date_range,
    strip_dates,
    validate_contact,
)
from services.patterns.skill_matcher import SkillMatcher


@pytest.fixture(scope="module")
def patterns():
    return load_patterns()


class TestDates:
    @pytest.mark.parametrize("token,expected", [
        ("2018年9月", "2018-09"),
        ("2018.09", "2018-09"),
        ("2018/9", "2018-09"),
        ("2018", "2018"),
        ("2018年", "2018"),
    ])
    def test_normalize_date(self, token, expected):
        assert normalize_date(token) == expected

    def test_closed_range(self):
        result = parse_date_range("2018年9月-2022年6月 清华大学")
        assert result == {"start_date": "2018-09", "end_date": "2022-06", "is_current": False}

    def test_open_range_is_current(self):
        result = parse_date_range("2022年7月-至今 北京字节跳动科技有限公司")
        assert result["start_date"] == "2022-07"
        assert result["end_date"] == "至今"
        assert result["is_current"] is True

    def test_english_present(self):
        result = parse_date_range("2019.03 - Present")
        assert result["is_current"] is True

    def test_no_range(self):
        assert parse_date_range("熟练掌握Java") is None

    def test_single_date_needs_year_marker(self):
        assert find_single_date("Java程序员认证 2023年") == "2023"
        assert find_single_date("服务1000+用户") is None

    def test_strip_dates(self):
        assert strip_dates("2022年3月-2022年6月 在线教育平台") == "在线教育平台"


class TestContacts:
    def test_valid_mobile(self):
        assert validate_contact("phone", "13812345678")
        assert validate_contact("phone", "138-1234-5678")

    def test_invalid_carrier_prefix(self):
        assert not validate_contact("phone", "12012345678")
        assert not validate_contact("phone", "1381234567")

    def test_email(self):
        assert validate_contact("email", "zhangsan@example.com")
        assert not validate_contact("email", "zhangsan@")

    def test_wechat_and_qq(self):
        assert validate_contact("wechat", "zhang_san88")
        assert not validate_contact("wechat", "88zhang")
        assert validate_contact("qq", "123456789")
        assert not validate_contact("qq", "0123")

    def test_unknown_kind(self):
        assert not validate_contact("fax", "010-1234567")


class TestAddress:
    def test_municipality(self):
        location = normalize_address("北京市海淀区中关村大街1号")
        assert location["province"] == "北京"
        assert location["city"] == "北京市"
        assert location["district"] == "海淀区"

    def test_province_and_city(self):
        location = normalize_address("广东省深圳市南山区科技园")
        assert location["province"] == "广东"
        assert location["city"] == "深圳市"
        assert location["district"] == "南山区"

    def test_unknown(self):
        location = normalize_address("远程办公")
        assert location["province"] is None
        assert location["city"] is None


class TestLookups:
    def test_key_university(self, patterns):
        assert is_key_university("清华大学", patterns)
        assert is_key_university("北京邮电大学", patterns)
        assert not is_key_university("某某职业技术学院", patterns)
        assert not is_key_university("", patterns)

    def test_company_type(self, patterns):
        assert identify_company_type("中国工商银行", patterns) == "state_owned"
        assert identify_company_type("北京字节跳动科技有限公司", patterns) == "private"
        assert identify_company_type("星辰工作室", patterns) == "other"

    def test_position_level(self, patterns):
        assert identify_position_level("技术总监", patterns) == "senior"
        assert identify_position_level("产品经理", patterns) == "middle"
        assert identify_position_level("运营专员", patterns) == "junior"
        assert identify_position_level("Java开发工程师", patterns) is None

    def test_industry(self, patterns):
        assert identify_industry("北京字节跳动科技有限公司", patterns) == "internet"
        assert identify_industry("招商银行", patterns) == "finance"

    def test_english_bundle_drops_surnames(self):
        english = load_english_patterns()
        assert english.surnames == []
        assert "Stanford" in english.university_keywords
        assert english.skill_categories == load_patterns().skill_categories

    def test_english_company_types(self):
        english = load_english_patterns()
        assert identify_company_type("Global Payments International Ltd", english) == "foreign"
        assert identify_company_type("National Grid Corporation", english) == "state_owned"
        assert identify_company_type("Nimbus Labs", english) == "startup"
        assert identify_company_type("Acme Inc", english) == "private"


class TestSkillMatcher:
    def test_longest_keyword_wins(self, patterns):
        names = SkillMatcher(patterns).names("熟练使用JavaScript和Spring Boot")
        assert "JavaScript" in names
        assert "Java" not in names
        assert "Spring Boot" in names
        assert "Spring" not in names

    def test_alias_maps_to_canonical(self, patterns):
        names = SkillMatcher(patterns).names("使用Vue.js、K8s部署")
        assert "Vue" in names
        assert "Kubernetes" in names

    def test_no_match_inside_words(self, patterns):
        assert "Go" not in SkillMatcher(patterns).names("Google Docs")

    def test_matches_in_text_order(self, patterns):
        matches = SkillMatcher(patterns).find("MySQL、Python")
        assert [m.name for m in matches] == ["MySQL", "Python"]
