"""Domain error taxonomy.

Every error raised by the core derives from :class:`IdentityError`. The HTTP
layer maps ``status_code`` and ``public_message`` straight onto the response;
``public_message`` never carries key material, ciphertext, plaintext or
passwords.
"""


class IdentityError(Exception):
    """Base class for all identity service errors."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.public_message
        super().__init__(self.message)


class ConfigurationError(IdentityError):
    """Required configuration (a secret) is missing or unusable."""

    public_message = "Service misconfigured"


class ValidationError(IdentityError):
    """Caller supplied structurally invalid data."""

    status_code = 400
    public_message = "Validation failed"

    def __init__(self, errors: list[str] | str) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors) or self.public_message)
        # Validation messages describe the caller's own input and are safe to echo
        self.public_message = self.message


class DuplicateError(IdentityError):
    status_code = 409
    public_message = "User with this email already exists"


class InvalidCredentialsError(IdentityError):
    """Unknown email or wrong password; the two are deliberately indistinguishable."""

    status_code = 401
    public_message = "Invalid credentials"

    def __init__(self) -> None:
        super().__init__(self.public_message)


class TokenError(IdentityError):
    status_code = 401
    public_message = "Invalid token"


class TokenMissingError(TokenError):
    public_message = "Access token required"


class TokenExpiredError(TokenError):
    public_message = "Token expired"


class TokenInvalidError(TokenError):
    """Signature, issuer or algorithm did not verify."""

    public_message = "Invalid token"


class TokenMalformedError(TokenInvalidError):
    """The token could not be parsed at all."""


class NotFoundError(IdentityError):
    status_code = 404
    public_message = "User not found"


class EncryptionError(IdentityError):
    public_message = "Encryption failed"


class DecryptionError(IdentityError):
    public_message = "Decryption failed"


class DecryptionFailure(IdentityError):
    """Stored sensitive data could not be decrypted while serving a profile."""

    public_message = "Failed to retrieve profile"


class MalformedHashError(IdentityError):
    """A stored password hash is not a valid bcrypt hash."""

    public_message = "Internal server error"


class Unauthorized(IdentityError):
    """Step-up password confirmation failed."""

    status_code = 401
    public_message = "Invalid password"
