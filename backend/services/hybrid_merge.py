"""Merge rule-based results with AI output.

Rule-based values always win; AI output only fills gaps and adds records the
rules missed. Every merge builds new objects; inputs are never modified.
"""

from models.schemas.basic_info import BasicInfo
from models.schemas.education import Education
from models.schemas.experience import Experience
from models.schemas.project import Project
from models.schemas.skills import Certification, Language, Skills, TechnicalSkill
from services.extractors.projects import projects_match


def _blank(value) -> bool:
    return value is None or value == "" or value == []


class HybridExtractionStrategy:
    def __init__(self, project_similarity_threshold: float = 0.7):
        self.project_similarity_threshold = project_similarity_threshold

    def merge_basic_info(self, rule: BasicInfo, ai: BasicInfo | None) -> BasicInfo:
        if ai is None:
            return rule
        rule_fields = rule.model_dump()
        filled = {
            field: value
            for field, value in ai.model_dump().items()
            if _blank(rule_fields.get(field)) and not _blank(value)
        }
        return rule.model_copy(update=filled)

    def merge_education(self, rule: list[Education], ai: list[Education] | None) -> list[Education]:
        if ai is None:
            return rule
        return _add_unmatched(rule, ai, lambda a, b: a.school == b.school and a.major == b.major)

    def merge_experience(self, rule: list[Experience], ai: list[Experience] | None) -> list[Experience]:
        if ai is None:
            return rule
        return _add_unmatched(rule, ai, lambda a, b: a.company == b.company and a.position == b.position)

    def merge_projects(self, rule: list[Project], ai: list[Project] | None) -> list[Project]:
        if ai is None:
            return rule
        threshold = self.project_similarity_threshold
        return _add_unmatched(rule, ai, lambda a, b: projects_match(a, b, threshold))

    def merge_skills(self, rule: Skills, ai: Skills | None) -> Skills:
        if ai is None:
            return rule
        return Skills(
            technical_skills=self._merge_technical(rule.technical_skills, ai.technical_skills),
            soft_skills=list(dict.fromkeys([*rule.soft_skills, *ai.soft_skills])),
            languages=_union_by(rule.languages, ai.languages, lambda lang: lang.language),
            certifications=_union_by(rule.certifications, ai.certifications, lambda c: c.name),
        )

    @staticmethod
    def _merge_technical(rule: list[TechnicalSkill], ai: list[TechnicalSkill]) -> list[TechnicalSkill]:
        merged = {t.category: list(t.items) for t in rule}
        for group in ai:
            items = merged.setdefault(group.category, [])
            known = {i.name.lower() for i in items}
            # Skip names already listed under any category.
            known.update(i.name.lower() for other in merged.values() for i in other)
            for item in group.items:
                if item.name.lower() not in known:
                    items.append(item)
                    known.add(item.name.lower())
        return [TechnicalSkill(category=c, items=items) for c, items in merged.items() if items]


def _add_unmatched(rule: list, ai: list, same) -> list:
    merged = list(rule)
    for candidate in ai:
        if not any(same(existing, candidate) for existing in merged):
            merged.append(candidate)
    return merged


def _union_by(rule: list[Language | Certification], ai: list, key) -> list:
    seen = {key(x) for x in rule}
    merged = list(rule)
    for item in ai:
        if key(item) not in seen:
            seen.add(key(item))
            merged.append(item)
    return merged
