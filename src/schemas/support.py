from pydantic import BaseModel, ConfigDict, Field, field_validator


class SupportEmailRequest(BaseModel):
    """Message typed into the contact form."""

    message: str = Field(..., min_length=1, max_length=5000)

    model_config = ConfigDict(extra="forbid")

    @field_validator("message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be empty")
        return v


class SupportEmailResponse(BaseModel):
    success: bool
