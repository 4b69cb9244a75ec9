"""Request and response models for registration, login and profile access.

Incoming models accept camelCase (``firstName``) as well as snake_case and run
every string through :func:`sanitize_text` before any validation.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from src.idvault.core.security import sanitize_text


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _SanitizedInput(_CamelModel):
    @field_validator("*", mode="before")
    @classmethod
    def _sanitize_strings(cls, value: Any, info: ValidationInfo) -> Any:
        # Passwords are compared byte for byte and must reach the hasher untouched
        if info.field_name == "password":
            return value
        if isinstance(value, str):
            return sanitize_text(value)
        return value


class RegistrationRequest(_SanitizedInput):
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    sensitive_id: str = ""


class LoginRequest(_SanitizedInput):
    email: str = ""
    password: str = ""


class PasswordVerificationRequest(_SanitizedInput):
    password: str = ""


class ProfileUpdate(_SanitizedInput):
    """Partial profile update. ``None`` means the field is left unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    sensitive_id: str | None = None

    def changed_fields(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump().items() if v is not None}


class RegistrationResult(_CamelModel):
    success: bool = True
    message: str = "User registered successfully"
    user_id: str


class PublicUser(_CamelModel):
    """Non-sensitive user fields safe to return from login."""

    id: str
    email: str
    first_name: str
    last_name: str


class LoginResult(_CamelModel):
    token: str
    user: PublicUser


class ProfileView(_CamelModel):
    """Full profile including the decrypted sensitive id."""

    id: str
    email: str
    first_name: str
    last_name: str
    phone: str
    sensitive_id: str = Field(description="Decrypted national id")
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None
