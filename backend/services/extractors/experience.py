"""Work experience extraction."""

import re

from models.schemas.experience import Experience
from models.schemas.extraction_result import ExtractionResult
from models.schemas.extractor_config import ExtractorConfig
from services.extractors.base import BaseExtractor, checkpoint
from services.extractors.segmentation import contains_any, find_section, scan_entries
from services.patterns.library import identify_company_type, identify_industry, identify_position_level
from services.patterns.regexes import (
    CJK,
    LOCATION_RE,
    METRIC_RE,
    SALARY_RE,
    TEAM_SIZE_RE,
    find_single_date,
    has_date,
    parse_date_range,
    strip_bullet,
    strip_dates,
)

_LABELLED_RE = re.compile(
    r"(?:公司|单位|公司名称|工作单位)\s*[:：]\s*([^\s|，,]{2,40})"
    r".*?(?:职位|岗位|职务)\s*[:：]\s*([^\s|，,]{2,30})"
)
_POSITION_LABEL_RE = re.compile(r"(?:职位|岗位|职务|Title)\s*[:：]\s*([^\s|，,]{2,30})")

REQUIRED_FIELDS = ("company", "position", "start_date", "end_date", "responsibilities")
MAX_POSITION_LINE = 20


class ExperienceExtractor(BaseExtractor[list[Experience]]):
    domain = "work_experience"
    label = "工作经历"
    result_model = ExtractionResult[list[Experience]]

    def __init__(self, config: ExtractorConfig | None = None):
        super().__init__(config)
        ordered = sorted(self.patterns.company_suffixes, key=len, reverse=True)
        cjk_suffixes = "|".join(re.escape(s) for s in ordered if not s.isascii())
        latin_suffixes = "|".join(re.escape(s) for s in ordered if s.isascii())
        positions = "|".join(
            re.escape(s) for s in sorted(self.patterns.position_suffixes, key=len, reverse=True)
        )
        self._company_re = re.compile(
            rf"([{CJK}A-Za-z0-9（）()·&]{{2,30}}?(?:{cjk_suffixes}))"
            rf"|((?:[A-Z][A-Za-z0-9&.\-]*\s){{1,4}}(?:{latin_suffixes})\.?)(?![A-Za-z])"
        )
        self._position_re = re.compile(
            rf"((?:[A-Za-z][A-Za-z0-9+#./]*\s?)?[{CJK}]{{0,15}}(?:{positions}))"
        )

    def default_data(self) -> list[Experience]:
        return []

    def _extract(self, text: str) -> list[Experience]:
        section = find_section(text, "experience", self.patterns)
        scope = section if section is not None else text
        lines = scope.split("\n")

        records = scan_entries(
            lines,
            is_start=self.is_entry_start,
            open_entry=self._open_entry,
            supplement=self._supplement,
            close=self._close,
        )
        # Pairwise pass: "公司：... 职位：..." labelled lines.
        for pair in self._labelled_pairs(lines):
            if not any(r.company == pair.company for r in records):
                records.append(pair)
        return [self._enhance(r, text) for r in records]

    # -- state machine hooks ------------------------------------------------

    def is_entry_start(self, line: str) -> bool:
        body = strip_bullet(line)
        if any(body.startswith(k) for k in self.patterns.responsibility_keywords):
            return False
        company = self.find_company(line)
        if not company:
            return False
        return has_date(line) or self.find_position(line, company) is not None

    def _open_entry(self, line: str) -> dict:
        company = self.find_company(line) or ""
        entry: dict = {
            "company": company,
            "position": self.find_position(line, company),
            "responsibilities": [],
            "achievements": [],
        }
        entry.update(self._dates(line))
        self._parse_details(entry, line)
        return entry

    def _supplement(self, entry: dict, line: str) -> None:
        body = strip_bullet(line)
        if not entry.get("position"):
            m = _POSITION_LABEL_RE.search(body)
            if m:
                entry["position"] = m.group(1)
                return
            position = self.find_position(body, None)
            if position and len(body) <= MAX_POSITION_LINE and not self._is_content_line(body):
                entry["position"] = position
                if not entry.get("start_date"):
                    entry.update(self._dates(body))
                return
        if not entry.get("start_date") and has_date(body) and len(strip_dates(body)) < 4:
            entry.update(self._dates(body))
            return
        if self._parse_details(entry, body):
            return
        if len(body) < 4:
            return
        if self.is_achievement(body):
            entry["achievements"].append(body)
        else:
            entry["responsibilities"].append(body)

    def _parse_details(self, entry: dict, line: str) -> bool:
        """Team size, salary and location; True if the line held only a label."""
        found = False
        if entry.get("team_size") is None:
            m = TEAM_SIZE_RE.search(line)
            if m:
                entry["team_size"] = int(m.group(1))
        if not entry.get("salary_range"):
            m = SALARY_RE.search(line)
            if m:
                entry["salary_range"] = m.group(1).replace(" ", "")
                found = len(line) - len(m.group()) < 4
        if not entry.get("location"):
            m = LOCATION_RE.search(line)
            if m:
                entry["location"] = m.group(1)
                found = found or len(line) - len(m.group()) < 4
        return found

    def _close(self, entry: dict) -> Experience | None:
        if not (self.is_valid_company(entry.get("company")) and self.is_valid_position(entry.get("position"))):
            return None
        return Experience(**{k: v for k, v in entry.items() if v not in (None, "")})

    def _dates(self, line: str) -> dict:
        dates = parse_date_range(line)
        if dates:
            return dates
        single = find_single_date(line)
        return {"start_date": single} if single else {}

    # -- pairwise pass ------------------------------------------------------

    def _labelled_pairs(self, lines: list[str]) -> list[Experience]:
        pairs = []
        for line in lines:
            checkpoint()
            m = _LABELLED_RE.search(line)
            if m and self.is_valid_company(m.group(1)) and self.is_valid_position(m.group(2)):
                pairs.append(Experience(company=m.group(1), position=m.group(2), **self._dates(line)))
        return pairs

    # -- field parsing ------------------------------------------------------

    def find_company(self, line: str) -> str | None:
        rest = strip_dates(line)
        for m in self._company_re.finditer(rest):
            company = next(g for g in m.groups() if g).strip()
            if self.is_valid_company(company):
                return company
        return None

    def find_position(self, line: str, company: str | None) -> str | None:
        rest = strip_dates(line)
        if company:
            rest = rest.replace(company, " ")
        for m in self._position_re.finditer(rest):
            position = m.group(1).strip()
            if self.is_valid_position(position):
                return position
        return None

    def is_achievement(self, line: str) -> bool:
        keywords = [k for ks in self.patterns.achievement_keywords.values() for k in ks]
        return contains_any(line, keywords) and METRIC_RE.search(line) is not None

    def _is_content_line(self, line: str) -> bool:
        return any(line.startswith(k) for k in self.patterns.responsibility_keywords)

    # -- post-enhancement ---------------------------------------------------

    def _enhance(self, record: Experience, text: str) -> Experience:
        context = " ".join([record.company, record.position, *record.responsibilities])
        update: dict = {
            "company_type": identify_company_type(record.company, self.patterns),
            "industry": record.industry or identify_industry(context, self.patterns),
            "position_level": record.position_level or identify_position_level(record.position, self.patterns),
        }
        if not record.start_date:
            for line in text.split("\n"):
                if record.company in line:
                    dates = parse_date_range(line)
                    if dates:
                        update.update(dates)
                        break
        end_date = update.get("end_date", record.end_date)
        update["is_current"] = record.is_current or end_date == "至今"
        return record.model_copy(update=update)

    # -- validation and scoring ---------------------------------------------

    def is_valid_company(self, company: str | None) -> bool:
        if not company or len(company) < 2 or len(company) > 50:
            return False
        if contains_any(company, self.patterns.company_exclusions):
            return False
        return contains_any(company, self.patterns.company_suffixes)

    def is_valid_position(self, position: str | None) -> bool:
        if not position or len(position) < 2 or len(position) > 30:
            return False
        return not contains_any(position, self.patterns.position_exclusions)

    def validate_result(self, data: list[Experience]) -> bool:
        return bool(data) and all(
            self.is_valid_company(e.company) and self.is_valid_position(e.position) for e in data
        )

    def context_score(self, data: list[Experience]) -> float | None:
        if not data:
            return None
        total = 0.0
        for e in data:
            score = 0.0
            if e.company and e.position:
                score += 0.3
            if e.start_date:
                score += 0.3
            if e.responsibilities:
                score += 0.2
            if e.achievements:
                score += 0.2
            total += score
        return total / len(data)

    def completeness_score(self, data: list[Experience]) -> float:
        if not data:
            return 0.0
        filled = sum(1 for e in data for f in REQUIRED_FIELDS if getattr(e, f))
        return filled / (len(data) * len(REQUIRED_FIELDS))

    def collect_warnings(self, data: list[Experience]) -> list[str]:
        if not data:
            return ["未能提取到工作经历"]
        warnings = []
        for i, e in enumerate(data, 1):
            if not e.start_date:
                warnings.append(f"工作经历{i}缺少时间信息")
            if not e.responsibilities:
                warnings.append(f"工作经历{i}缺少工作职责描述")
        return warnings
