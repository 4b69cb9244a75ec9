"""Registration and login."""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.idvault.core.exceptions import (
    DuplicateError,
    InvalidCredentialsError,
    MalformedHashError,
    ValidationError,
)
from src.idvault.core.models.identity import (
    LoginResult,
    PublicUser,
    RegistrationRequest,
    RegistrationResult,
)
from src.idvault.core.services.crypto.field_encryption import FieldEncryptionService
from src.idvault.core.services.crypto.password_hasher import PasswordHasher
from src.idvault.core.services.jwt.token_service import TokenService
from src.idvault.core.validation import ValidationPolicy, normalize_sensitive_id
from src.idvault.entities.core.user import User, UserRepository


class IdentityService:
    def __init__(
        self,
        db_session: Session,
        hasher: PasswordHasher,
        encryptor: FieldEncryptionService,
        token_service: TokenService,
        policy: ValidationPolicy,
    ):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)
        self._hasher = hasher
        self._encryptor = encryptor
        self._token_service = token_service
        self._policy = policy

    def register(self, data: RegistrationRequest) -> RegistrationResult:
        """Validate, check uniqueness, hash, encrypt and persist a new user.

        Nothing is written unless every earlier step succeeds; the commit is the
        only write. The unique index on email is the authoritative duplicate
        check, the lookup before it only gives an early, clearer error.

        Raises:
            ValidationError: One or more fields are invalid (all are reported).
            DuplicateError: The email is already registered.
        """
        errors = self._policy.registration_errors(data)
        if errors:
            raise ValidationError(errors)

        email = data.email.strip().lower()
        if self._user_repo.email_exists(email):
            logger.bind(operation="registration_duplicate").info("Registration rejected")
            raise DuplicateError()

        password_hash = self._hasher.hash(data.password)
        encrypted_id = self._encryptor.encrypt(normalize_sensitive_id(data.sensitive_id))

        user = User(
            email=email,
            password_hash=password_hash,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            phone=data.phone.strip(),
            sensitive_id=encrypted_id,
        )
        try:
            created = self._user_repo.create(user)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            logger.bind(operation="registration_duplicate").info(
                "Registration lost a race on the email unique index"
            )
            raise DuplicateError() from e

        logger.bind(operation="registration_success", user_id=created.id).info(
            "User registered"
        )
        return RegistrationResult(user_id=created.id)

    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate and issue an access token.

        Unknown email, wrong password and an unusable stored hash all raise the
        same :class:`InvalidCredentialsError`.
        """
        user = self._user_repo.get_by_email(email or "")
        if user is None:
            self._hasher.burn(password or "")
            logger.bind(operation="login_failed").info("Login failed")
            raise InvalidCredentialsError()

        try:
            verified = self._hasher.verify(password or "", user.password_hash)
        except MalformedHashError:
            logger.bind(operation="login_failed", user_id=user.id).error(
                "Login failed on an unusable stored hash"
            )
            raise InvalidCredentialsError() from None
        if not verified:
            logger.bind(operation="login_failed", user_id=user.id).info("Login failed")
            raise InvalidCredentialsError()

        token = self._token_service.issue(user.id, user.email)

        user.last_login_at = datetime.now(UTC)
        self._user_repo.update(user)
        self._db_session.commit()

        logger.bind(operation="login_success", user_id=user.id).info("User logged in")
        return LoginResult(
            token=token,
            user=PublicUser(
                id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
            ),
        )
