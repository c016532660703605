"""A single project entry."""

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

from models.schemas.record import Record

ProjectType = Literal["personal", "team", "commercial", "academic", "open_source", "other"]
PROJECT_TYPES: tuple[str, ...] = (
    "personal", "team", "commercial", "academic", "open_source", "other",
)


class STARElements(BaseModel):
    """Situation/Task/Action/Result decomposition of a project description."""
    situation: list[str] = []
    task: list[str] = []
    action: list[str] = []
    result: list[str] = []

    def element_count(self) -> int:
        return sum(1 for lines in (self.situation, self.task, self.action, self.result) if lines)


class Project(Record):
    name: str = ""
    description: str = ""
    type: ProjectType = "other"
    technologies: list[str] = []
    role: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    achievements: list[str] = []
    url: str | None = None
    star: STARElements | None = Field(default=None, validation_alias=AliasChoices("star", "star_elements"))

    @field_validator("type", mode="before")
    @classmethod
    def _unknown_type_is_other(cls, v):
        if isinstance(v, str):
            v = v.replace("-", "_")
        return v if v in PROJECT_TYPES else "other"
