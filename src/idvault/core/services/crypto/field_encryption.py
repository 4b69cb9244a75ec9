"""Authenticated encryption of a single sensitive field with AES-256-GCM."""

import os
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from loguru import logger

from src.idvault.core.exceptions import DecryptionError, EncryptionError
from src.idvault.core.models.crypto import EncryptedField
from src.idvault.core.services.crypto.key_derivation import KEY_LENGTH

NONCE_LENGTH = 12
TAG_LENGTH = 16


class FieldEncryptionService:
    """Encrypts and decrypts one string at a time.

    Every call to :meth:`encrypt` draws a fresh random nonce, so encrypting the
    same plaintext twice never produces the same ciphertext. The associated data
    is bound into the tag; a triple produced under different associated data does
    not decrypt.
    """

    def __init__(self, key: bytes, associated_data: bytes = b"additional-auth-data"):
        if not key or len(key) != KEY_LENGTH:
            raise EncryptionError("Encryption key must be 32 bytes")
        self._aesgcm = AESGCM(key)
        self._associated_data = associated_data

    def encrypt(self, plaintext: str) -> EncryptedField:
        if not isinstance(plaintext, str) or not plaintext:
            raise EncryptionError("Plaintext must be a non-empty string")

        nonce = os.urandom(NONCE_LENGTH)
        sealed = self._aesgcm.encrypt(
            nonce, plaintext.encode("utf-8"), self._associated_data
        )
        # cryptography appends the tag to the ciphertext
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return EncryptedField(
            ciphertext=ciphertext.hex(), iv=nonce.hex(), auth_tag=tag.hex()
        )

    def decrypt(self, field: EncryptedField) -> str:
        """Return the plaintext, or raise :class:`DecryptionError`.

        Fails closed on a missing component, bad hex, wrong nonce or tag length,
        a wrong key, or any tampering. Nothing is returned unless the tag verifies.
        """
        if field is None or not (field.ciphertext and field.iv and field.auth_tag):
            raise DecryptionError("Encrypted field is incomplete")

        try:
            ciphertext = bytes.fromhex(field.ciphertext)
            nonce = bytes.fromhex(field.iv)
            tag = bytes.fromhex(field.auth_tag)
        except ValueError as e:
            raise DecryptionError("Encrypted field is not valid hex") from e

        if len(nonce) != NONCE_LENGTH or len(tag) != TAG_LENGTH:
            raise DecryptionError("Encrypted field has an invalid nonce or tag length")

        try:
            plaintext = self._aesgcm.decrypt(
                nonce, ciphertext + tag, self._associated_data
            )
        except InvalidTag as e:
            logger.warning("Field decryption failed authentication")
            raise DecryptionError("Authentication tag mismatch") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted field is not valid UTF-8") from e

    @staticmethod
    def generate_key() -> str:
        """Return a new random key as 64 hex characters."""
        return secrets.token_hex(KEY_LENGTH)
