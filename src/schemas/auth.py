from pydantic import BaseModel, ConfigDict, Field


class TokenData(BaseModel):
    sub: str | None = Field(
        default=None,
        description="Subject (user identifier) of the token",
    )
    email: str | None = Field(
        default=None, description="Email claim, used for support replies"
    )
    scopes: list[str] = Field(
        default_factory=list,
        description="Scopes/permissions associated with the token",
    )


class CurrentUser(BaseModel):
    """The authenticated caller, resolved from bearer token claims."""

    id: str = Field(..., min_length=1, description="Identity provider user id")
    email: str | None = None

    model_config = ConfigDict(frozen=True)
