"""Issue and verify the service's own HMAC-signed access tokens."""

import time
from collections.abc import Callable

from authlib.common.security import generate_token
from authlib.jose import JsonWebToken
from authlib.jose.errors import DecodeError, ExpiredTokenError, JoseError
from loguru import logger

from src.idvault.core.exceptions import (
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMalformedError,
)
from src.idvault.core.models.token import TokenClaims

BEARER_PREFIX = "Bearer "


class TokenService:
    """Stateless token issuer/verifier.

    Any process holding the same secret can verify a token; nothing is stored
    server side and tokens cannot be revoked before they expire.
    """

    def __init__(
        self,
        secret: str | None,
        expires_in_seconds: int = 24 * 3600,
        algorithm: str = "HS256",
        issuer: str = "idvault",
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ConfigurationError("JWT signing secret is not configured")
        self._secret = secret
        self._expires_in = expires_in_seconds
        self._algorithm = algorithm
        self._issuer = issuer
        self._clock = clock
        # Only the configured algorithm is accepted on decode
        self._jwt = JsonWebToken([algorithm])

    def issue(self, subject_id: str, email: str) -> str:
        now = int(self._clock())
        payload = {
            "iss": self._issuer,
            "sub": subject_id,
            "email": email,
            "iat": now,
            "exp": now + self._expires_in,
            "jti": generate_token(16),
        }
        header = {"alg": self._algorithm, "typ": "JWT"}
        token = self._jwt.encode(header, payload, self._secret)
        return token.decode() if isinstance(token, bytes) else token

    def verify(self, token: str) -> TokenClaims:
        """Check signature, issuer and expiry and return the claims.

        Raises:
            TokenExpiredError: ``now >= exp``.
            TokenMalformedError: The token cannot be parsed.
            TokenInvalidError: Signature, issuer or required claims do not check out.
        """
        if not isinstance(token, str) or not token:
            raise TokenMalformedError("Token must be a non-empty string")

        now = int(self._clock())
        claims_options = {
            "iss": {"essential": True, "value": self._issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }
        try:
            claims = self._jwt.decode(token, self._secret, claims_options=claims_options)
            claims.validate(now=now, leeway=0)
        except ExpiredTokenError as e:
            raise TokenExpiredError() from e
        except DecodeError as e:
            raise TokenMalformedError() from e
        except JoseError as e:
            logger.debug("Token rejected: {}", e.error)
            raise TokenInvalidError() from e
        except (ValueError, TypeError) as e:
            raise TokenMalformedError() from e

        expires_at = int(claims["exp"])
        # authlib treats exp as inclusive; a token is dead from its expiry second on
        if now >= expires_at:
            raise TokenExpiredError()

        email = claims.get("email")
        if not isinstance(email, str):
            raise TokenInvalidError("Token is missing the email claim")

        return TokenClaims(
            subject_id=str(claims["sub"]),
            email=email,
            issued_at=int(claims.get("iat", now)),
            expires_at=expires_at,
            token_id=claims.get("jti"),
        )

    @staticmethod
    def extract_from_header(header: str | None) -> str | None:
        """Return the token from an ``Authorization: Bearer <token>`` value.

        A missing header or any other scheme yields ``None`` so the caller can
        decide on the response.
        """
        if not header or not header.startswith(BEARER_PREFIX):
            return None
        token = header[len(BEARER_PREFIX):].strip()
        return token or None
