"""User repository for data access operations."""

from datetime import UTC, datetime

from sqlmodel import Session, select

from src.idvault.core.models.crypto import EncryptedField

from .entity import User
from .table import UserTable


def _to_entity(row: UserTable) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        sensitive_id=EncryptedField(
            ciphertext=row.sensitive_id_ciphertext,
            iv=row.sensitive_id_iv,
            auth_tag=row.sensitive_id_auth_tag,
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
        last_login_at=row.last_login_at,
    )


def _apply(row: UserTable, user: User) -> None:
    row.email = user.email
    row.password_hash = user.password_hash
    row.first_name = user.first_name
    row.last_name = user.last_name
    row.phone = user.phone
    # The encrypted triple is replaced as a whole
    row.sensitive_id_ciphertext = user.sensitive_id.ciphertext
    row.sensitive_id_iv = user.sensitive_id.iv
    row.sensitive_id_auth_tag = user.sensitive_id.auth_tag
    row.last_login_at = user.last_login_at


class UserRepository:
    """Repository for User entity data access operations.

    Writes are flushed but not committed; the caller owns the transaction.
    """

    def __init__(self, session: Session):
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        return _to_entity(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(UserTable.email == email.strip().lower())
        row = self._session.exec(statement).first()
        return _to_entity(row) if row else None

    def email_exists(self, email: str) -> bool:
        statement = select(UserTable.id).where(UserTable.email == email.strip().lower())
        return self._session.exec(statement).first() is not None

    def create(self, user: User) -> User:
        """Insert a new user. A duplicate email surfaces as ``IntegrityError``."""
        row = UserTable(id=user.id, created_at=user.created_at, updated_at=user.updated_at)
        _apply(row, user)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return _to_entity(row)

    def update(self, user: User) -> User | None:
        row = self._session.get(UserTable, user.id)
        if row is None:
            return None
        _apply(row, user)
        row.updated_at = datetime.now(UTC)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return _to_entity(row)
