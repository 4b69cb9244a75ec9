"""Unit tests for registration and login."""

from unittest.mock import patch

import pytest
from sqlmodel import select

from src.idvault.core.exceptions import (
    DuplicateError,
    InvalidCredentialsError,
    ValidationError,
)
from src.idvault.entities.core.user import UserRepository, UserTable
from tests.fixtures.services import PASSWORD, SENSITIVE_ID


class TestRegister:
    def test_register_returns_only_identifiers(
        self, identity_service, registration_factory
    ):
        result = identity_service.register(registration_factory())

        assert result.success is True
        assert result.user_id
        dumped = result.model_dump_json()
        assert PASSWORD not in dumped
        assert SENSITIVE_ID not in dumped

    def test_sensitive_id_is_stored_encrypted(
        self, identity_service, registration_factory, session
    ):
        identity_service.register(registration_factory())

        row = session.exec(select(UserTable)).one()
        assert SENSITIVE_ID not in row.sensitive_id_ciphertext
        assert row.sensitive_id_iv and row.sensitive_id_auth_tag
        assert row.password_hash != PASSWORD
        assert row.password_hash.startswith("$2b$")

    def test_email_is_lower_cased(self, identity_service, registration_factory, session):
        identity_service.register(registration_factory(email="Asha@Example.COM"))

        assert UserRepository(session).get_by_email("asha@example.com") is not None

    def test_sensitive_id_whitespace_is_normalised(
        self, identity_service, registration_factory, encryptor, session
    ):
        result = identity_service.register(
            registration_factory(sensitive_id="1234 5678 9012")
        )

        user = UserRepository(session).get(result.user_id)
        assert encryptor.decrypt(user.sensitive_id) == SENSITIVE_ID

    def test_duplicate_email_is_rejected(
        self, identity_service, registration_factory, session, encryptor
    ):
        first = identity_service.register(registration_factory())

        with pytest.raises(DuplicateError):
            identity_service.register(
                registration_factory(email="ASHA@example.com", first_name="Other")
            )

        users = session.exec(select(UserTable)).all()
        assert len(users) == 1
        original = UserRepository(session).get(first.user_id)
        assert original.first_name == "Asha"
        assert encryptor.decrypt(original.sensitive_id) == SENSITIVE_ID

    def test_store_constraint_violation_maps_to_duplicate(
        self, identity_service, registration_factory, session
    ):
        identity_service.register(registration_factory())

        # Simulate a concurrent registration that passed the pre-check
        with patch.object(UserRepository, "email_exists", return_value=False):
            with pytest.raises(DuplicateError):
                identity_service.register(registration_factory())

        assert len(session.exec(select(UserTable)).all()) == 1

    def test_all_validation_errors_are_reported(
        self, identity_service, registration_factory, session
    ):
        data = registration_factory(
            email="not-an-email",
            password="short",
            first_name=" ",
            last_name="",
            phone="12",
            sensitive_id="12345",
        )

        with pytest.raises(ValidationError) as exc_info:
            identity_service.register(data)

        assert len(exc_info.value.errors) == 6
        assert session.exec(select(UserTable)).all() == []

    @pytest.mark.parametrize(
        "email",
        ["a..b@example.com", "a@b@example.com", "@example.com", "user@", "user@example"],
    )
    def test_invalid_emails_are_rejected(self, identity_service, registration_factory, email):
        with pytest.raises(ValidationError):
            identity_service.register(registration_factory(email=email))

    def test_nothing_is_written_when_encryption_fails(
        self, identity_service, registration_factory, encryptor, session
    ):
        with patch.object(encryptor, "encrypt", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                identity_service.register(registration_factory())

        assert session.exec(select(UserTable)).all() == []


class TestLogin:
    def test_login_returns_token_and_public_user(
        self, identity_service, registered_user_id, token_service
    ):
        result = identity_service.login("asha@example.com", PASSWORD)

        assert result.user.id == registered_user_id
        assert result.user.email == "asha@example.com"
        assert token_service.verify(result.token).subject_id == registered_user_id
        dumped = result.user.model_dump_json()
        assert "password" not in dumped.lower()
        assert SENSITIVE_ID not in dumped

    def test_login_is_case_insensitive_on_email(self, identity_service, registered_user_id):
        assert identity_service.login("ASHA@EXAMPLE.COM", PASSWORD).user.id == (
            registered_user_id
        )

    def test_login_updates_last_login(
        self, identity_service, registered_user_id, session
    ):
        assert UserRepository(session).get(registered_user_id).last_login_at is None

        identity_service.login("asha@example.com", PASSWORD)

        assert UserRepository(session).get(registered_user_id).last_login_at is not None

    def test_unknown_email_and_wrong_password_are_indistinguishable(
        self, identity_service, registered_user_id
    ):
        with pytest.raises(InvalidCredentialsError) as unknown:
            identity_service.login("nobody@example.com", PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong:
            identity_service.login("asha@example.com", "wrong-password")

        assert type(unknown.value) is type(wrong.value)
        assert str(unknown.value) == str(wrong.value) == "Invalid credentials"
        assert unknown.value.status_code == wrong.value.status_code == 401

    def test_corrupted_hash_is_reported_as_invalid_credentials(
        self, identity_service, registered_user_id, session
    ):
        row = session.get(UserTable, registered_user_id)
        row.password_hash = "corrupted"
        session.add(row)
        session.commit()

        with pytest.raises(InvalidCredentialsError):
            identity_service.login("asha@example.com", PASSWORD)
