"""A single work experience entry."""

from typing import Literal

from pydantic import field_validator

from models.schemas.record import Record

CompanyType = Literal["state_owned", "private", "foreign", "startup", "other"]
COMPANY_TYPES: tuple[str, ...] = ("state_owned", "private", "foreign", "startup", "other")


class Experience(Record):
    company: str = ""
    position: str = ""
    industry: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    location: str | None = None
    is_current: bool = False
    responsibilities: list[str] = []
    achievements: list[str] = []
    team_size: int | None = None
    salary_range: str | None = None
    company_type: CompanyType = "other"
    position_level: str | None = None  # senior, middle, junior

    @field_validator("company_type", mode="before")
    @classmethod
    def _unknown_type_is_other(cls, v):
        return v if v in COMPANY_TYPES else "other"

    @field_validator("team_size", mode="before")
    @classmethod
    def _team_size_digits(cls, v):
        if isinstance(v, str):
            digits = "".join(ch for ch in v if ch.isdigit())
            return int(digits) if digits else None
        return v
