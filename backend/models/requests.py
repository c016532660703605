from pydantic import BaseModel, Field


class ExtractRequest(BaseModel):
    text: str = Field(..., max_length=50000, description="Plain text resume content")
    resume_id: str | None = Field(None, max_length=64, description="Store the result under this resume id")
