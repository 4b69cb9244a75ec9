"""Core services exports."""

from .crypto import FieldEncryptionService, PasswordHasher, derive_key
from .database import DbSessionService
from .identity_service import IdentityService
from .jwt import TokenService
from .profile_service import ProfileService

__all__ = [
    "DbSessionService",
    "FieldEncryptionService",
    "IdentityService",
    "PasswordHasher",
    "ProfileService",
    "TokenService",
    "derive_key",
]
