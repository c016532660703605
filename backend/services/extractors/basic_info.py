"""Identity and contact extraction."""

import re

from models.schemas.basic_info import BasicInfo
from models.schemas.extraction_result import ExtractionResult
from services.extractors.base import BaseExtractor
from services.extractors.segmentation import contains_any, split_sections
from services.patterns.regexes import (
    CJK,
    EMAIL_RE,
    FULL_ADDRESS_RE,
    GITHUB_RE,
    LINKEDIN_RE,
    PHONE_RE,
    PROVINCE_RE,
    QQ_RE,
    WECHAT_RE,
    normalize_address,
    normalize_phone,
    validate_contact,
)

NAME_SCAN_CHARS = 200
MAX_SUMMARY_CHARS = 500

_NAME_LABEL_RE = re.compile(rf"(?:姓\s*名|(?<![A-Za-z])Name)\s*[:：]?\s*([{CJK}]{{2,4}}|[A-Za-z]+(?: [A-Za-z]+){{1,2}})", re.IGNORECASE)
_CJK_TOKEN_RE = re.compile(rf"[{CJK}]+")
_LATIN_NAME_RE = re.compile(r"^([A-Z][a-z]+(?: [A-Z][a-z]+){1,2})$")
_ADDRESS_LABEL_RE = re.compile(r"(?:通讯地址|家庭住址|地址|住址|居住地|现居住地|现居|所在地)\s*[:：]\s*([^\n|]{2,50})")
_ADDRESS_HINT_RE = re.compile(r"[区县路街道号巷弄]")
_STATUS_LABEL_RE = re.compile(r"(?:目前状态|当前状态|求职状态|状态)\s*[:：]\s*([^\n，,;；|]{2,15})")
_SUMMARY_LABEL_RE = re.compile(r"(?:个人简介|自我介绍|个人总结|自我评价|Profile|Summary)\s*[:：]\s*(.+)", re.IGNORECASE)

CORE_FIELDS = ("name", "phone", "email", "address", "desired_position")


class BasicInfoExtractor(BaseExtractor[BasicInfo]):
    domain = "basic_info"
    label = "基本信息"
    result_model = ExtractionResult[BasicInfo]

    def default_data(self) -> BasicInfo:
        return BasicInfo()

    def _extract(self, text: str) -> BasicInfo:
        sections = split_sections(text, self.patterns)
        # Personal fields live before the first section or in the basic-info section.
        head = "\n".join(filter(None, (sections.get("header"), sections.get("basic_info"))))

        fields: dict[str, str | None] = {
            "name": self.extract_name(text),
            "phone": self._extract_phone(text),
            "email": self._extract_email(text),
            "wechat": self._first_valid(WECHAT_RE, text, "wechat"),
            "qq": self._first_valid(QQ_RE, text, "qq"),
            "linkedin": _first_match(LINKEDIN_RE, text),
            "github": _first_match(GITHUB_RE, text),
            "address": self._extract_address(text, head),
            "desired_position": self._extract_desired_position(text),
            "current_status": self._extract_status(head or text),
            "summary": self._extract_summary(text, sections),
        }
        if fields["address"]:
            location = normalize_address(fields["address"])
            fields["province"] = location["province"]
            fields["city"] = location["city"]
        return BasicInfo(**fields)

    # -- name ---------------------------------------------------------------

    def validate_name(self, name: str | None) -> bool:
        if not name or len(name) < 2 or len(name) > 20:
            return False
        if re.fullmatch(rf"[{CJK}]{{2,4}}", name):
            if contains_any(name, self.patterns.name_exclusions):
                return False
            return self._surname_of(name) is not None or self._is_minority_name(name)
        if re.fullmatch(r"[A-Za-z ]{3,20}", name):
            words = name.split()
            return len(words) >= 2 and all(len(w) >= 2 for w in words)
        return False

    def _is_minority_name(self, name: str) -> bool:
        return sum(hint in name for hint in self.patterns.minority_names) >= 2

    def _surname_of(self, token: str) -> str | None:
        for surname in self.patterns.compound_surnames:
            if token.startswith(surname) and 3 <= len(token) <= 4:
                return surname
        if token[0] in self.patterns.surnames and 2 <= len(token) <= 4:
            return token[0]
        return None

    def extract_name(self, text: str) -> str | None:
        """Label, then surname scan, then Latin name, then the first line."""
        m = _NAME_LABEL_RE.search(text)
        if m and self.validate_name(m.group(1).strip()):
            return m.group(1).strip()

        opening = text[:NAME_SCAN_CHARS]
        reserved = self._reserved_words()
        for line in opening.split("\n"):
            # Labelled values ("地址：北京...") are never names.
            if re.search(r"[:：]", line):
                continue
            # Unlabelled tokens need a surname; minority names come from a label or the first line.
            for token in _CJK_TOKEN_RE.findall(line):
                if self._surname_of(token) and self.validate_name(token) and token not in reserved:
                    return token

        for line in opening.split("\n"):
            m = _LATIN_NAME_RE.match(line.strip())
            if m and self.validate_name(m.group(1)):
                return m.group(1)

        first_line = text.split("\n", 1)[0].strip()
        if re.fullmatch(rf"[{CJK}]{{2,4}}", first_line) and self.validate_name(first_line):
            return first_line
        return None

    def _reserved_words(self) -> set[str]:
        words = {alias for aliases in self.patterns.section_headings.values() for alias in aliases}
        words.update(self.patterns.current_status)
        return words

    # -- contacts -----------------------------------------------------------

    def _extract_phone(self, text: str) -> str | None:
        for m in PHONE_RE.finditer(text):
            phone = normalize_phone(m.group(1))
            if validate_contact("phone", phone):
                return phone
        return None

    def _extract_email(self, text: str) -> str | None:
        for m in EMAIL_RE.finditer(text):
            if validate_contact("email", m.group()):
                return m.group()
        return None

    @staticmethod
    def _first_valid(pattern: re.Pattern, text: str, kind: str) -> str | None:
        for m in pattern.finditer(text):
            if validate_contact(kind, m.group(1)):
                return m.group(1)
        return None

    # -- address and intent -------------------------------------------------

    def _extract_address(self, text: str, head: str) -> str | None:
        m = _ADDRESS_LABEL_RE.search(text)
        if m:
            return m.group(1).strip()
        scope = head or text[:NAME_SCAN_CHARS]
        for line in scope.split("\n"):
            if any(s in line for s in self.patterns.company_suffixes):
                continue
            full = FULL_ADDRESS_RE.search(line)
            if full and _ADDRESS_HINT_RE.search(full.group()):
                return full.group()
        province = PROVINCE_RE.search(scope)
        return province.group() if province else None

    def _extract_desired_position(self, text: str) -> str | None:
        labels = "|".join(map(re.escape, self.patterns.desired_position_labels))
        if not labels:
            return None
        m = re.search(rf"(?:{labels})\s*[:：]\s*([^\n，,;；|]{{2,30}})", text)
        return m.group(1).strip() if m else None

    def _extract_status(self, text: str) -> str | None:
        m = _STATUS_LABEL_RE.search(text)
        if m:
            return m.group(1).strip()
        for status in self.patterns.current_status:
            if status in text:
                return status
        return None

    def _extract_summary(self, text: str, sections: dict[str, str]) -> str | None:
        m = _SUMMARY_LABEL_RE.search(text)
        if m:
            return m.group(1).strip()[:MAX_SUMMARY_CHARS]
        body = sections.get("summary")
        if body:
            return " ".join(body.split("\n"))[:MAX_SUMMARY_CHARS]
        return None

    # -- validation and scoring ---------------------------------------------

    def validate_result(self, data: BasicInfo) -> bool:
        return bool(data.name or data.phone or data.email)

    def regex_score(self, data: BasicInfo, text: str) -> float | None:
        checks: list[bool] = []
        if data.name:
            checks.append(self.validate_name(data.name))
        for kind in ("phone", "email", "wechat", "qq"):
            value = getattr(data, kind)
            if value:
                checks.append(validate_contact(kind, value))
        if not checks:
            return None
        return sum(checks) / len(checks)

    def context_score(self, data: BasicInfo) -> float:
        score = 0.0
        if data.phone or data.email:
            score += 0.3
        if self.validate_name(data.name):
            score += 0.3
        if data.address and len(data.address) > 5:
            score += 0.2
        if data.desired_position:
            score += 0.2
        return min(score, 1.0)

    def completeness_score(self, data: BasicInfo) -> float:
        return sum(1 for f in CORE_FIELDS if getattr(data, f)) / len(CORE_FIELDS)

    def collect_warnings(self, data: BasicInfo) -> list[str]:
        warnings = []
        if not data.name:
            warnings.append("未能提取到姓名信息")
        if not data.phone and not data.email:
            warnings.append("未能提取到有效的联系方式")
        if data.phone and not validate_contact("phone", data.phone):
            warnings.append("手机号码格式可能不正确")
        if data.email and not validate_contact("email", data.email):
            warnings.append("邮箱地址格式可能不正确")
        return warnings


def _first_match(pattern: re.Pattern, text: str) -> str | None:
    m = pattern.search(text)
    return m.group() if m else None
