"""Authorized profile reads and updates, and step-up password checks.

This is the only place the sensitive id is decrypted. Callers must already have
verified the access token for ``user_id``.
"""

from loguru import logger
from sqlmodel import Session

from src.idvault.core.exceptions import (
    DecryptionError,
    DecryptionFailure,
    MalformedHashError,
    NotFoundError,
    ValidationError,
)
from src.idvault.core.models.identity import ProfileUpdate, ProfileView
from src.idvault.core.security import redact_sensitive
from src.idvault.core.services.crypto.field_encryption import FieldEncryptionService
from src.idvault.core.services.crypto.password_hasher import PasswordHasher
from src.idvault.core.validation import ValidationPolicy, normalize_sensitive_id
from src.idvault.entities.core.user import User, UserRepository


class ProfileService:
    def __init__(
        self,
        db_session: Session,
        encryptor: FieldEncryptionService,
        hasher: PasswordHasher,
        policy: ValidationPolicy,
    ):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)
        self._encryptor = encryptor
        self._hasher = hasher
        self._policy = policy

    def _load(self, user_id: str, operation: str) -> User:
        user = self._user_repo.get(user_id)
        if user is None:
            logger.bind(operation=f"{operation}_not_found", user_id=user_id).warning(
                "Profile not found"
            )
            raise NotFoundError()
        return user

    def _view(self, user: User, operation: str) -> ProfileView:
        try:
            sensitive_id = self._encryptor.decrypt(user.sensitive_id)
        except DecryptionError as e:
            logger.bind(operation=f"{operation}_failed", user_id=user.id).error(
                "Stored sensitive id could not be decrypted: {}",
                redact_sensitive(e.message),
            )
            raise DecryptionFailure() from e

        return ProfileView(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            sensitive_id=sensitive_id,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login_at=user.last_login_at,
        )

    def get_profile(self, user_id: str) -> ProfileView:
        logger.bind(operation="profile_retrieval_attempt", user_id=user_id).info(
            "Profile requested"
        )
        user = self._load(user_id, "profile_retrieval")
        view = self._view(user, "profile_retrieval")
        logger.bind(operation="profile_retrieval_success", user_id=user_id).info(
            "Profile returned"
        )
        return view

    def update_profile(self, user_id: str, update: ProfileUpdate) -> ProfileView:
        """Apply a partial update and return the refreshed, decrypted profile.

        A new sensitive id is encrypted afresh and replaces the stored triple as
        a whole.
        """
        logger.bind(operation="profile_update_attempt", user_id=user_id).info(
            "Profile update requested"
        )
        errors = self._policy.update_errors(update)
        if errors:
            raise ValidationError(errors)

        user = self._load(user_id, "profile_update")
        changes = update.changed_fields()
        if "first_name" in changes:
            user.first_name = changes["first_name"].strip()
        if "last_name" in changes:
            user.last_name = changes["last_name"].strip()
        if "phone" in changes:
            user.phone = changes["phone"].strip()
        if "sensitive_id" in changes:
            user.sensitive_id = self._encryptor.encrypt(
                normalize_sensitive_id(changes["sensitive_id"])
            )

        updated = self._user_repo.update(user)
        if updated is None:
            raise NotFoundError()
        self._db_session.commit()

        logger.bind(
            operation="profile_update_success",
            user_id=user_id,
            fields=sorted(changes),
        ).info("Profile updated")
        return self._view(updated, "profile_update")

    def verify_password(self, user_id: str, password: str) -> bool:
        """Step-up check. ``False`` on a wrong password, ``NotFoundError`` for no user."""
        user = self._load(user_id, "password_verification")
        try:
            verified = self._hasher.verify(password or "", user.password_hash)
        except MalformedHashError:
            logger.bind(operation="password_verification_failed", user_id=user_id).error(
                "Stored password hash is unusable"
            )
            return False

        operation = (
            "password_verification_success" if verified else "password_verification_failed"
        )
        logger.bind(operation=operation, user_id=user_id).info(
            "Password verification completed"
        )
        return verified
