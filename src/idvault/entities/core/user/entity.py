"""User domain entity."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from src.idvault.core.models.crypto import EncryptedField
from src.idvault.entities.core._base import Entity


class User(Entity):
    """A registered user.

    ``password_hash`` and ``sensitive_id`` never leave the core; response models
    are built field by field from this entity.
    """

    email: str = Field(description="Unique, lower-cased email address")
    password_hash: str = Field(description="bcrypt hash of the password", repr=False)
    first_name: str = Field(description="User's first name")
    last_name: str = Field(description="User's last name")
    phone: str = Field(description="User's phone number")
    sensitive_id: EncryptedField = Field(
        description="National id, encrypted", repr=False
    )
    last_login_at: datetime | None = Field(
        default=None, description="Time of the last successful login"
    )

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.phone == other.phone
            and self.sensitive_id == other.sensitive_id
        )

    def __hash__(self) -> int:
        return hash((self.id, self.email))
