"""Identity and contact fields of a resume."""

from models.schemas.record import Record


class BasicInfo(Record):
    """Identity/contact record. No field is required."""
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    wechat: str | None = None
    qq: str | None = None
    address: str | None = None
    province: str | None = None
    city: str | None = None
    desired_position: str | None = None
    current_status: str | None = None
    summary: str | None = None
    linkedin: str | None = None
    github: str | None = None
