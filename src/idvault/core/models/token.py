from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Verified claims of an access token. Never persisted."""

    subject_id: str = Field(description="User id the token was issued to")
    email: str = Field(description="Email of the subject at issue time")
    issued_at: int = Field(description="Issued-at, seconds since the epoch")
    expires_at: int = Field(description="Expiry, seconds since the epoch")
    token_id: str | None = Field(default=None, description="Unique token identifier")
