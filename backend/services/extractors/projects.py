"""Project history extraction, including STAR tagging of descriptions."""

import re

from rapidfuzz import fuzz

from models.schemas.extraction_result import ExtractionResult
from models.schemas.extractor_config import ExtractorConfig
from models.schemas.project import Project, STARElements
from services.extractors.base import BaseExtractor, checkpoint
from services.extractors.segmentation import contains_any, find_section, first_keyword, scan_entries
from services.patterns.regexes import (
    CJK,
    METRIC_RE,
    URL_RE,
    find_single_date,
    has_date,
    parse_date_range,
    strip_bullet,
    strip_dates,
)
from services.patterns.skill_matcher import SkillMatcher

_NAME_LABEL_RE = re.compile(r"^(?:项目名称|项目名|项目)\s*[:：]\s*(.+)$")
_SEPARATOR_RE = re.compile(r"\s*[|｜/]\s*|\s{2,}")

MIN_DESCRIPTION_LENGTH = 10
MAX_NAME_LENGTH = 30
MIN_STAR_ELEMENTS = 2
REQUIRED_FIELDS = ("name", "description", "technologies", "role", "start_date")


def projects_match(a: Project, b: Project, threshold: float) -> bool:
    """Same project: equal names, name/description containment, or similar names."""
    if not a.name or not b.name:
        return False
    if a.name == b.name:
        return True
    if a.name in b.name or b.name in a.name:
        return True
    if a.description and b.description and (a.description in b.description or b.description in a.description):
        return True
    return fuzz.ratio(a.name, b.name) / 100 >= threshold


class ProjectExtractor(BaseExtractor[list[Project]]):
    domain = "projects"
    label = "项目经历"
    result_model = ExtractionResult[list[Project]]

    def __init__(self, config: ExtractorConfig | None = None):
        super().__init__(config)
        self.skills = SkillMatcher(self.patterns)
        suffixes = "|".join(
            re.escape(s) for s in sorted(self.patterns.project_name_suffixes, key=len, reverse=True)
        )
        self._name_re = re.compile(rf"^([{CJK}A-Za-z0-9][{CJK}A-Za-z0-9 \-·+.]{{0,28}}?(?:{suffixes}))")

    def default_data(self) -> list[Project]:
        return []

    def _extract(self, text: str) -> list[Project]:
        section = find_section(text, "projects", self.patterns)
        scope = section if section is not None else text
        lines = scope.split("\n")

        records = scan_entries(
            lines,
            is_start=self.is_entry_start,
            open_entry=self._open_entry,
            supplement=self._supplement,
            close=self._close,
        )
        threshold = self.config.project_similarity_threshold
        # Pairwise pass: "name: description" lines that mention a technology.
        for candidate in self._inline_projects(lines):
            if not any(projects_match(r, candidate, threshold) for r in records):
                records.append(candidate)
        return records

    # -- state machine hooks ------------------------------------------------

    def is_entry_start(self, line: str) -> bool:
        body = strip_bullet(line)
        if _NAME_LABEL_RE.match(body):
            return True
        if self._is_content_line(body):
            return False
        if self.find_name(body):
            return True
        return has_date(body) and bool(self.skills.find(body)) and self.is_valid_name(self._name_part(body))

    def _open_entry(self, line: str) -> dict:
        body = strip_bullet(line)
        m = _NAME_LABEL_RE.match(body)
        if m:
            name = self.find_name(m.group(1)) or m.group(1).strip()
        else:
            part = self._name_part(body)
            name = self.find_name(part) or part
        entry: dict = {
            "name": (name or "").strip(),
            "lines": [],
            "achievements": [],
            "technologies": self.skills.names(body),
        }
        entry.update(self._dates(body))
        entry["role"] = self.find_role(body)
        return entry

    def _supplement(self, entry: dict, line: str) -> None:
        body = strip_bullet(line)
        if not entry.get("start_date") and has_date(body) and len(strip_dates(body)) < 4:
            entry.update(self._dates(body))
            return
        for tech in self.skills.names(body):
            if tech not in entry["technologies"]:
                entry["technologies"].append(tech)
        if not entry.get("role"):
            entry["role"] = self.find_role(body)
        if not entry.get("url"):
            m = URL_RE.search(body)
            if m:
                entry["url"] = m.group()
        if self.is_achievement(body):
            entry["achievements"].append(body)
        else:
            entry["lines"].append(body)

    def _close(self, entry: dict) -> Project | None:
        name = entry["name"]
        if not self.is_valid_name(name):
            return None
        described = [ln for ln in entry["lines"] if contains_any(ln, self.patterns.description_keywords)]
        description = "；".join(described or entry["lines"])
        if not self.is_valid_description(description):
            return None

        full_text = "\n".join([name, *entry["lines"], *entry["achievements"]])
        star = self.tag_star(entry["lines"], entry["achievements"])
        return Project(
            name=name,
            description=description,
            type=self.infer_type(full_text, entry),
            technologies=entry["technologies"],
            role=entry.get("role"),
            start_date=entry.get("start_date"),
            end_date=entry.get("end_date"),
            achievements=entry["achievements"],
            url=entry.get("url"),
            star=star if star.element_count() >= MIN_STAR_ELEMENTS else None,
        )

    def _dates(self, line: str) -> dict:
        dates = parse_date_range(line)
        if dates:
            return {"start_date": dates["start_date"], "end_date": dates["end_date"]}
        single = find_single_date(line)
        return {"start_date": single} if single else {}

    # -- pairwise pass ------------------------------------------------------

    def _inline_projects(self, lines: list[str]) -> list[Project]:
        found = []
        for line in lines:
            checkpoint()
            body = strip_bullet(line)
            if not re.search(r"[:：]", body) or _NAME_LABEL_RE.match(body):
                continue
            head, rest = re.split(r"[:：]", body, maxsplit=1)
            name = self.find_name(head.strip())
            rest = rest.strip()
            techs = self.skills.names(rest)
            if name and techs and self.is_valid_description(rest):
                found.append(Project(name=name, description=rest, technologies=techs))
        return found

    # -- field parsing ------------------------------------------------------

    def _name_part(self, line: str) -> str:
        """Leading chunk of a start line, without dates and technologies."""
        rest = strip_dates(line)
        for match in sorted(self.skills.find(rest), key=lambda s: s.start, reverse=True):
            rest = rest[:match.start] + " " + rest[match.end:]
        parts = [p for p in _SEPARATOR_RE.split(rest) if p.strip()]
        return parts[0].strip() if parts else ""

    def find_name(self, text: str) -> str | None:
        m = self._name_re.match(strip_dates(text))
        if not m:
            return None
        name = m.group(1).strip()
        return name if self.is_valid_name(name) else None

    def find_role(self, line: str) -> str | None:
        key = first_keyword(line, list(self.patterns.project_roles))
        return self.patterns.project_roles[key] if key else None

    def infer_type(self, text: str, entry: dict) -> str:
        for project_type, keywords in self.patterns.project_types.items():
            if contains_any(text, keywords):
                return project_type
        if entry.get("url") and "github.com" in entry["url"]:
            return "open_source"
        return "other"

    def tag_star(self, lines: list[str], achievements: list[str]) -> STARElements:
        """Assign each line to the first STAR bucket whose keywords it contains."""
        buckets: dict[str, list[str]] = {"situation": [], "task": [], "action": [], "result": list(achievements)}
        for line in lines:
            for element in ("situation", "task", "action", "result"):
                if contains_any(line, self.patterns.star.get(element, [])):
                    buckets[element].append(line)
                    break
        return STARElements(**buckets)

    def is_achievement(self, line: str) -> bool:
        keywords = [k for ks in self.patterns.achievement_keywords.values() for k in ks]
        return contains_any(line, keywords) and METRIC_RE.search(line) is not None

    def _is_content_line(self, line: str) -> bool:
        starters = self.patterns.responsibility_keywords + self.patterns.description_keywords
        return any(line.startswith(k) for k in starters)

    # -- validation and scoring ---------------------------------------------

    def is_valid_name(self, name: str | None) -> bool:
        if not name or len(name) < 2 or len(name) > MAX_NAME_LENGTH:
            return False
        return not contains_any(name, self.patterns.project_name_exclusions)

    def is_valid_description(self, description: str | None) -> bool:
        return bool(description) and len(description) >= MIN_DESCRIPTION_LENGTH

    def validate_result(self, data: list[Project]) -> bool:
        return bool(data) and all(
            self.is_valid_name(p.name) and self.is_valid_description(p.description) for p in data
        )

    def context_score(self, data: list[Project]) -> float | None:
        if not data:
            return None
        total = 0.0
        for p in data:
            score = 0.0
            if p.name and p.description:
                score += 0.3
            if len(p.technologies) >= 3:
                score += 0.2
            if p.role:
                score += 0.2
            if p.star:
                score += 0.2
            if p.start_date:
                score += 0.1
            total += score
        return total / len(data)

    def completeness_score(self, data: list[Project]) -> float:
        if not data:
            return 0.0
        filled = sum(1 for p in data for f in REQUIRED_FIELDS if getattr(p, f))
        return filled / (len(data) * len(REQUIRED_FIELDS))

    def collect_warnings(self, data: list[Project]) -> list[str]:
        if not data:
            return ["未能提取到项目经历"]
        warnings = []
        for i, p in enumerate(data, 1):
            if not p.technologies:
                warnings.append(f"项目{i}缺少技术栈信息")
            if not p.start_date:
                warnings.append(f"项目{i}缺少时间信息")
        return warnings
