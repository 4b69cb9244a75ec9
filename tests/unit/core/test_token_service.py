"""Unit tests for access token issue and verification."""

import pytest
from authlib.jose import jwt

from src.idvault.core.exceptions import (
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMalformedError,
)
from src.idvault.core.services.jwt import TokenService


class TestIssueAndVerify:
    def test_round_trip_claims(self, token_service, clock):
        token = token_service.issue("user-1", "asha@example.com")

        claims = token_service.verify(token)

        assert claims.subject_id == "user-1"
        assert claims.email == "asha@example.com"
        assert claims.issued_at == int(clock.now)
        assert claims.expires_at == int(clock.now) + 3600
        assert claims.token_id

    def test_tokens_are_unique(self, token_service):
        assert token_service.issue("user-1", "a@example.com") != token_service.issue(
            "user-1", "a@example.com"
        )

    def test_valid_until_the_second_before_expiry(self, token_service, clock):
        token = token_service.issue("user-1", "asha@example.com")

        clock.advance(3599)

        assert token_service.verify(token).subject_id == "user-1"

    def test_expired_at_exactly_expiry(self, token_service, clock):
        token = token_service.issue("user-1", "asha@example.com")

        clock.advance(3600)

        with pytest.raises(TokenExpiredError):
            token_service.verify(token)

    def test_expired_after_expiry(self, token_service, clock):
        token = token_service.issue("user-1", "asha@example.com")

        clock.advance(7200)

        with pytest.raises(TokenExpiredError):
            token_service.verify(token)

    def test_expired_is_distinct_from_invalid(self):
        assert not issubclass(TokenExpiredError, TokenInvalidError)
        assert TokenExpiredError.public_message != TokenInvalidError.public_message


class TestRejection:
    def test_wrong_secret_is_invalid(self, token_service, clock):
        other = TokenService("another-secret", clock=clock)
        token = other.issue("user-1", "asha@example.com")

        with pytest.raises(TokenInvalidError) as exc_info:
            token_service.verify(token)
        assert not isinstance(exc_info.value, TokenMalformedError)

    def test_tampered_payload_is_invalid(self, token_service):
        header, payload, signature = token_service.issue("user-1", "a@example.com").split(".")
        forged_payload = payload[:-2] + ("AA" if payload[-2:] != "AA" else "BB")

        with pytest.raises(TokenInvalidError):
            token_service.verify(".".join([header, forged_payload, signature]))

    def test_wrong_issuer_is_invalid(self, jwt_secret, token_service, clock):
        foreign = TokenService(jwt_secret, issuer="someone-else", clock=clock)

        with pytest.raises(TokenInvalidError):
            token_service.verify(foreign.issue("user-1", "a@example.com"))

    def test_disallowed_algorithm_is_invalid(self, jwt_secret, token_service, clock):
        token = jwt.encode(
            {"alg": "HS512"},
            {
                "iss": "idvault",
                "sub": "user-1",
                "email": "a@example.com",
                "iat": int(clock.now),
                "exp": int(clock.now) + 60,
            },
            jwt_secret,
        ).decode()

        with pytest.raises(TokenInvalidError):
            token_service.verify(token)

    def test_missing_subject_is_invalid(self, jwt_secret, token_service, clock):
        token = jwt.encode(
            {"alg": "HS256"},
            {"iss": "idvault", "email": "a@example.com", "exp": int(clock.now) + 60},
            jwt_secret,
        ).decode()

        with pytest.raises(TokenInvalidError):
            token_service.verify(token)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c", None])
    def test_garbage_is_malformed(self, token_service, token):
        with pytest.raises(TokenMalformedError):
            token_service.verify(token)

    @pytest.mark.parametrize("secret", [None, ""])
    def test_missing_secret_is_a_configuration_error(self, secret):
        with pytest.raises(ConfigurationError):
            TokenService(secret)


class TestExtractFromHeader:
    def test_bearer_token(self):
        assert TokenService.extract_from_header("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize(
        "header", [None, "", "Bearer", "Bearer ", "Basic dXNlcjpwYXNz", "bearer abc", "Token abc"]
    )
    def test_missing_or_wrong_scheme_returns_none(self, header):
        assert TokenService.extract_from_header(header) is None
