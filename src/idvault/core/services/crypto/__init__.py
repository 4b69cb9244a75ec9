from .field_encryption import FieldEncryptionService
from .key_derivation import KEY_LENGTH, derive_key
from .password_hasher import PasswordHasher

__all__ = ["FieldEncryptionService", "KEY_LENGTH", "PasswordHasher", "derive_key"]
