"""User database table model."""

from datetime import datetime

from sqlmodel import Field

from src.idvault.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    The sensitive id is stored as three columns that are always written
    together; a row never holds a ciphertext without its matching nonce and tag.
    """

    __tablename__ = "users"

    email: str = Field(index=True, unique=True, max_length=320)
    password_hash: str
    first_name: str
    last_name: str
    phone: str
    sensitive_id_ciphertext: str
    sensitive_id_iv: str
    sensitive_id_auth_tag: str
    last_login_at: datetime | None = None
