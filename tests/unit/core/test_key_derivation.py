"""Unit tests for encryption key derivation."""

import hashlib

import pytest

from src.idvault.core.exceptions import ConfigurationError
from src.idvault.core.services.crypto import KEY_LENGTH, derive_key


class TestDeriveKey:
    def test_hex_key_is_used_verbatim(self, encryption_key_hex):
        assert derive_key(encryption_key_hex) == bytes.fromhex(encryption_key_hex)

    def test_uppercase_hex_key_is_accepted(self, encryption_key_hex):
        assert derive_key(encryption_key_hex.upper()) == bytes.fromhex(
            encryption_key_hex
        )

    def test_passphrase_is_hashed_to_key_length(self):
        key = derive_key("a passphrase of arbitrary length")

        assert len(key) == KEY_LENGTH
        assert key == hashlib.sha256(b"a passphrase of arbitrary length").digest()

    def test_hex_of_wrong_length_is_hashed(self):
        short_hex = "ab" * 16
        assert derive_key(short_hex) == hashlib.sha256(short_hex.encode()).digest()

    def test_derivation_is_deterministic(self):
        assert derive_key("same secret") == derive_key("same secret")

    @pytest.mark.parametrize("secret", [None, "", "   "])
    def test_missing_secret_is_a_configuration_error(self, secret):
        with pytest.raises(ConfigurationError):
            derive_key(secret)
