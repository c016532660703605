"""Education history extraction."""

import re

from models.schemas.education import Education
from models.schemas.extraction_result import ExtractionResult
from services.extractors.base import BaseExtractor, checkpoint
from services.extractors.segmentation import contains_any, find_section, scan_entries
from services.patterns.library import is_key_university
from services.patterns.regexes import CJK, find_single_date, has_date, parse_date_range, strip_dates

_SCHOOL_RE = re.compile(
    rf"([{CJK}]{{2,12}}?(?:大学|学院|学校|大专|高中|中学))"
    r"|((?:[A-Z][A-Za-z&.]*\s)+(?:University|College|Institute|School)(?:\s+of(?:\s+[A-Z][A-Za-z]*)+)?)"
    r"|(University\s+of(?:\s+[A-Z][A-Za-z]*)+)"
)
_MAJOR_LABEL_RE = re.compile(rf"(?:专业|Major)\s*[:：]\s*([{CJK}A-Za-z（）() ]{{2,30}})")
_GPA_RE = re.compile(r"(?:GPA|绩点|平均分)\s*[:：]?\s*(\d+(?:\.\d+)?(?:\s*/\s*\d+(?:\.\d+)?)?)", re.IGNORECASE)
_CJK_RUN_RE = re.compile(rf"[{CJK}（）()]{{2,30}}")
_LATIN_RUN_RE = re.compile(r"[A-Za-z][A-Za-z &]{3,40}")
_NOISE_WORDS = ("全日制", "非全日制", "统招", "在读", "毕业", "学位", "学历")

REQUIRED_FIELDS = ("school", "degree", "major", "start_date", "end_date")


class EducationExtractor(BaseExtractor[list[Education]]):
    domain = "education"
    label = "教育经历"
    result_model = ExtractionResult[list[Education]]

    def default_data(self) -> list[Education]:
        return []

    def _extract(self, text: str) -> list[Education]:
        section = find_section(text, "education", self.patterns)
        scope = section if section is not None else text
        lines = scope.split("\n")

        records = scan_entries(
            lines,
            is_start=self.is_entry_start,
            open_entry=self._open_entry,
            supplement=self._supplement,
            close=self._close,
        )
        # Pairwise pass: school and major on one line, merged by school+major.
        for pair in self._school_major_pairs(lines):
            if any(r.school == pair.school and r.major == pair.major for r in records):
                continue
            if any(r.school == pair.school for r in records):
                continue
            records.append(pair)
        return [self._enhance(r, text) for r in records]

    # -- state machine hooks ------------------------------------------------

    def is_entry_start(self, line: str) -> bool:
        return has_date(line) and self.find_school(line) is not None

    def _open_entry(self, line: str) -> dict:
        entry = {"school": self.find_school(line) or "", "honors": []}
        dates = parse_date_range(line)
        if dates:
            entry["start_date"] = dates["start_date"]
            entry["end_date"] = dates["end_date"]
        else:
            entry["end_date"] = find_single_date(line)
        entry["major"] = self.find_major(line, entry["school"])
        entry["degree"] = self.find_degree(line)
        self._supplement(entry, line, opening=True)
        return entry

    def _supplement(self, entry: dict, line: str, opening: bool = False) -> None:
        if not opening:
            if not entry.get("major"):
                m = _MAJOR_LABEL_RE.search(line)
                if m:
                    entry["major"] = _clean_major(m.group(1))
            if not entry.get("degree"):
                entry["degree"] = self.find_degree(line)
        if not entry.get("gpa"):
            m = _GPA_RE.search(line)
            if m:
                entry["gpa"] = re.sub(r"\s+", "", m.group(1))
        if not opening and contains_any(line, self.patterns.honor_keywords):
            entry["honors"].append(line)

    def _close(self, entry: dict) -> Education | None:
        if not (self.is_valid_school(entry.get("school")) and self.is_valid_major(entry.get("major"))):
            return None
        return Education(**{k: v for k, v in entry.items() if v})

    # -- pairwise pass ------------------------------------------------------

    def _school_major_pairs(self, lines: list[str]) -> list[Education]:
        pairs = []
        for i, line in enumerate(lines):
            checkpoint()
            school = self.find_school(line)
            if not school:
                continue
            major = self.find_major(line, school)
            if not major and i + 1 < len(lines):
                m = _MAJOR_LABEL_RE.search(lines[i + 1])
                major = _clean_major(m.group(1)) if m else None
            if self.is_valid_school(school) and self.is_valid_major(major):
                pairs.append(Education(school=school, major=major, degree=self.find_degree(line)))
        return pairs

    # -- field parsing ------------------------------------------------------

    def find_school(self, line: str) -> str | None:
        m = _SCHOOL_RE.search(line)
        if not m:
            return None
        school = next(g for g in m.groups() if g).strip()
        for prefix in self.patterns.school_prefixes:
            if school.startswith(prefix) and len(school) - len(prefix) >= 2:
                return school[len(prefix):]
        return school

    def find_major(self, line: str, school: str | None) -> str | None:
        m = _MAJOR_LABEL_RE.search(line)
        if m:
            return _clean_major(m.group(1))
        rest = strip_dates(line)
        if school:
            rest = rest.replace(school, " ")
        rest = _GPA_RE.sub(" ", rest)
        for keyword in self._degree_keywords():
            rest = rest.replace(keyword, " ")
        for word in (*_NOISE_WORDS, *self.patterns.school_prefixes):
            rest = rest.replace(word, " ")
        for run in _CJK_RUN_RE.findall(rest) + _LATIN_RUN_RE.findall(rest):
            major = _clean_major(run)
            if self.is_valid_major(major) and not contains_any(major, self.patterns.honor_keywords):
                return major
        return None

    def find_degree(self, line: str) -> str | None:
        for degree, keywords in self.patterns.degrees.items():
            if contains_any(line, keywords):
                return degree
        return None

    def _degree_keywords(self) -> list[str]:
        keywords = [k for ks in self.patterns.degrees.values() for k in ks]
        return sorted(keywords, key=len, reverse=True)

    def infer_degree_from_school(self, school: str) -> str:
        if "大专" in school or "职业" in school:
            return "专科"
        if "高中" in school or "中学" in school:
            return "高中"
        return "学士"

    # -- post-enhancement ---------------------------------------------------

    def _enhance(self, record: Education, text: str) -> Education:
        update: dict = {
            "is_key_university": is_key_university(record.school, self.patterns),
        }
        if not record.degree:
            update["degree"] = self.infer_degree_from_school(record.school)
        if not record.start_date or not record.end_date:
            for line in text.split("\n"):
                if record.school in line:
                    dates = parse_date_range(line)
                    if dates:
                        update.setdefault("start_date", record.start_date or dates["start_date"])
                        update.setdefault("end_date", record.end_date or dates["end_date"])
                        break
        return record.model_copy(update=update)

    # -- validation and scoring ---------------------------------------------

    def is_valid_school(self, school: str | None) -> bool:
        if not school or len(school) < 2 or len(school) > 40:
            return False
        return contains_any(school, self.patterns.school_suffixes)

    def is_valid_major(self, major: str | None) -> bool:
        if not major or len(major) < 2 or len(major) > 30:
            return False
        return not contains_any(major, self.patterns.major_exclusions)

    def validate_result(self, data: list[Education]) -> bool:
        return bool(data) and all(
            self.is_valid_school(e.school) and self.is_valid_major(e.major) for e in data
        )

    def context_score(self, data: list[Education]) -> float | None:
        if not data:
            return None
        total = 0.0
        for e in data:
            score = 0.0
            if e.school and e.major and e.degree:
                score += 0.4
            if e.start_date or e.end_date:
                score += 0.3
            if e.is_key_university:
                score += 0.2
            if e.gpa or e.honors:
                score += 0.1
            total += score
        return total / len(data)

    def completeness_score(self, data: list[Education]) -> float:
        if not data:
            return 0.0
        filled = sum(1 for e in data for f in REQUIRED_FIELDS if getattr(e, f))
        return filled / (len(data) * len(REQUIRED_FIELDS))

    def collect_warnings(self, data: list[Education]) -> list[str]:
        if not data:
            return ["未能提取到教育经历"]
        warnings = []
        for i, e in enumerate(data, 1):
            if not e.degree:
                warnings.append(f"教育记录{i}缺少学历信息")
            if not e.start_date and not e.end_date:
                warnings.append(f"教育记录{i}缺少时间信息")
        return warnings


def _clean_major(value: str) -> str:
    value = value.strip(" （）()")
    return re.sub(r"(?:专业|系)$", "", value).strip()
