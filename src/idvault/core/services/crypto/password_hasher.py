"""bcrypt password hashing."""

import bcrypt
from loguru import logger

from src.idvault.core.exceptions import MalformedHashError, ValidationError

BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted, cost-tunable password hashing.

    ``verify`` returns ``False`` for any wrong password and only raises when the
    stored hash itself is unusable.
    """

    def __init__(self, rounds: int = 12):
        self._rounds = rounds
        self._dummy_hash = bcrypt.hashpw(
            b"dummy-password", bcrypt.gensalt(rounds=rounds)
        )

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            # bcrypt would silently ignore the tail
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes long"
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode(
            "utf-8"
        )

    def verify(self, password: str, stored_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, stored_hash.encode("utf-8"))
        except ValueError as e:
            logger.error("Stored password hash is malformed")
            raise MalformedHashError("Stored password hash is malformed") from e

    def burn(self, password: str) -> None:
        """Spend one verification's worth of work against a throwaway hash.

        Used when no stored hash exists so that an unknown account costs the
        same time as a wrong password.
        """
        bcrypt.checkpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], self._dummy_hash)
