"""Technical skills, soft skills, languages and certifications."""

import re
from typing import Literal

from pydantic import AliasChoices, Field, field_validator

from models.schemas.record import Record

Proficiency = Literal["expert", "advanced", "intermediate", "beginner"]
PROFICIENCY_LEVELS: tuple[str, ...] = ("expert", "advanced", "intermediate", "beginner")


class SkillItem(Record):
    name: str
    proficiency: Proficiency = "intermediate"
    years: int | None = Field(default=None, validation_alias=AliasChoices("years", "years_experience"))

    @field_validator("proficiency", mode="before")
    @classmethod
    def _known_level(cls, v):
        if isinstance(v, str) and v.lower() in PROFICIENCY_LEVELS:
            return v.lower()
        return "intermediate"

    @field_validator("years", mode="before")
    @classmethod
    def _years_as_int(cls, v):
        if isinstance(v, float):
            return int(v)
        if isinstance(v, str):
            m = re.search(r"\d+", v)
            return int(m.group()) if m else None
        return v


class TechnicalSkill(Record):
    category: str
    items: list[SkillItem] = []


class Language(Record):
    language: str
    proficiency: str | None = None
    certificate: str | None = None


class Certification(Record):
    name: str
    issuer: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    credential_id: str | None = None


class Skills(Record):
    technical_skills: list[TechnicalSkill] = []
    soft_skills: list[str] = []
    languages: list[Language] = []
    certifications: list[Certification] = []

    def is_empty(self) -> bool:
        return not (self.technical_skills or self.soft_skills or self.languages or self.certifications)
