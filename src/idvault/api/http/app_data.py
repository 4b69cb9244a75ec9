from dataclasses import dataclass

from src.idvault.api.http.middleware.limiter import DefaultLocalRateLimiter
from src.idvault.core.services import (
    DbSessionService,
    FieldEncryptionService,
    PasswordHasher,
    TokenService,
)
from src.idvault.core.validation import ValidationPolicy


@dataclass(frozen=True)
class ApplicationDependencies:
    """Process-wide components built once at startup and never mutated."""

    database_service: DbSessionService
    field_encryption_service: FieldEncryptionService
    password_hasher: PasswordHasher
    token_service: TokenService
    validation_policy: ValidationPolicy
    rate_limiter: DefaultLocalRateLimiter | None = None
