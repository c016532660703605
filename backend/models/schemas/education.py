"""A single education entry."""

from pydantic import field_validator

from models.schemas.record import Record


class Education(Record):
    school: str = ""
    degree: str = ""  # 博士, 硕士, 学士, 专科, 高中, 其他
    major: str = ""
    start_date: str | None = None
    end_date: str | None = None
    gpa: str | None = None
    honors: list[str] = []
    is_key_university: bool = False

    @field_validator("gpa", mode="before")
    @classmethod
    def _gpa_as_text(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v
