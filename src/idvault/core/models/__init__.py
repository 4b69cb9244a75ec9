"""Value types shared by the core services and the HTTP layer."""

from .crypto import EncryptedField
from .identity import (
    LoginRequest,
    LoginResult,
    PasswordVerificationRequest,
    ProfileUpdate,
    ProfileView,
    PublicUser,
    RegistrationRequest,
    RegistrationResult,
)
from .token import TokenClaims

__all__ = [
    "EncryptedField",
    "LoginRequest",
    "LoginResult",
    "PasswordVerificationRequest",
    "ProfileUpdate",
    "ProfileView",
    "PublicUser",
    "RegistrationRequest",
    "RegistrationResult",
    "TokenClaims",
]
