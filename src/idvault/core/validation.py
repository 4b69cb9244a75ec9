"""Structural validation of registration and profile data."""

import re
from dataclasses import dataclass

from src.idvault.core.models.identity import ProfileUpdate, RegistrationRequest
from src.idvault.runtime.config.config_data import ValidationPolicyConfig

_WHITESPACE = re.compile(r"\s+")


def normalize_sensitive_id(value: str) -> str:
    """Remove all whitespace; ``"1234 5678 9012"`` becomes ``"123456789012"``."""
    return _WHITESPACE.sub("", value)


@dataclass(frozen=True)
class ValidationPolicy:
    min_password_length: int
    max_password_bytes: int
    email_pattern: re.Pattern[str]
    phone_pattern: re.Pattern[str]
    sensitive_id_pattern: re.Pattern[str]

    @classmethod
    def from_config(cls, config: ValidationPolicyConfig) -> "ValidationPolicy":
        return cls(
            min_password_length=config.min_password_length,
            max_password_bytes=config.max_password_bytes,
            email_pattern=re.compile(config.email_pattern),
            phone_pattern=re.compile(config.phone_pattern),
            sensitive_id_pattern=re.compile(config.sensitive_id_pattern),
        )

    def is_valid_email(self, email: str) -> bool:
        if not email or ".." in email:
            return False
        local, sep, domain = email.partition("@")
        if not sep or not local or not domain or "@" in domain:
            return False
        return self.email_pattern.match(email) is not None

    def is_valid_phone(self, phone: str) -> bool:
        return bool(phone) and self.phone_pattern.match(phone) is not None

    def is_valid_sensitive_id(self, value: str) -> bool:
        return bool(value) and (
            self.sensitive_id_pattern.match(normalize_sensitive_id(value)) is not None
        )

    def password_errors(self, password: str) -> list[str]:
        if not password or len(password) < self.min_password_length:
            return [
                f"Password must be at least {self.min_password_length} characters long"
            ]
        if len(password.encode("utf-8")) > self.max_password_bytes:
            return [f"Password must be at most {self.max_password_bytes} bytes long"]
        return []

    def registration_errors(self, data: RegistrationRequest) -> list[str]:
        """Every problem with ``data``, in field order; empty when valid."""
        errors: list[str] = []
        if not self.is_valid_email(data.email):
            errors.append("Invalid email format")
        errors.extend(self.password_errors(data.password))
        if not data.first_name.strip():
            errors.append("First name is required")
        if not data.last_name.strip():
            errors.append("Last name is required")
        if not self.is_valid_sensitive_id(data.sensitive_id):
            errors.append("Invalid sensitive id format (must be 12 digits)")
        if not self.is_valid_phone(data.phone):
            errors.append("Invalid phone number format")
        return errors

    def update_errors(self, update: ProfileUpdate) -> list[str]:
        errors: list[str] = []
        if update.first_name is not None and not update.first_name.strip():
            errors.append("First name cannot be empty")
        if update.last_name is not None and not update.last_name.strip():
            errors.append("Last name cannot be empty")
        if update.phone is not None and not self.is_valid_phone(update.phone):
            errors.append("Invalid phone number format")
        if update.sensitive_id is not None and not self.is_valid_sensitive_id(
            update.sensitive_id
        ):
            errors.append("Sensitive id must be exactly 12 digits")
        return errors
