"""Derive the field-encryption key from the configured secret."""

import hashlib
import re

from src.idvault.core.exceptions import ConfigurationError

KEY_LENGTH = 32  # AES-256

_HEX_KEY = re.compile(rf"^[0-9a-fA-F]{{{KEY_LENGTH * 2}}}$")


def derive_key(secret: str | None) -> bytes:
    """Turn a configured secret into a 32-byte key.

    A secret of exactly 64 hex characters is used as the raw key; anything else
    is compressed with SHA-256. The same secret always yields the same key.

    Raises:
        ConfigurationError: If no secret is configured.
    """
    if secret is None or not secret.strip():
        raise ConfigurationError("Encryption key is not configured")

    if _HEX_KEY.match(secret):
        return bytes.fromhex(secret)
    return hashlib.sha256(secret.encode("utf-8")).digest()
