"""Unit tests for profile access and step-up verification."""

import pytest

from src.idvault.core.exceptions import (
    DecryptionFailure,
    NotFoundError,
    ValidationError,
)
from src.idvault.core.models.identity import ProfileUpdate
from src.idvault.entities.core.user import UserRepository, UserTable
from tests.fixtures.services import PASSWORD, SENSITIVE_ID
from tests.utils import tamper


class TestGetProfile:
    def test_returns_decrypted_sensitive_id(self, profile_service, registered_user_id):
        profile = profile_service.get_profile(registered_user_id)

        assert profile.id == registered_user_id
        assert profile.sensitive_id == SENSITIVE_ID
        assert profile.email == "asha@example.com"
        assert profile.first_name == "Asha"

    def test_unknown_user_is_not_found(self, profile_service):
        with pytest.raises(NotFoundError):
            profile_service.get_profile("missing-id")

    def test_corrupted_ciphertext_is_a_decryption_failure(
        self, profile_service, registered_user_id, session
    ):
        repo = UserRepository(session)
        user = repo.get(registered_user_id)
        user.sensitive_id = tamper(user.sensitive_id, "ciphertext")
        repo.update(user)
        session.commit()

        with pytest.raises(DecryptionFailure) as exc_info:
            profile_service.get_profile(registered_user_id)

        assert exc_info.value.status_code == 500
        assert SENSITIVE_ID not in str(exc_info.value)


class TestUpdateProfile:
    def test_replacing_sensitive_id_replaces_whole_triple(
        self, profile_service, registered_user_id, session
    ):
        before = session.get(UserTable, registered_user_id)
        old_triple = (
            before.sensitive_id_ciphertext,
            before.sensitive_id_iv,
            before.sensitive_id_auth_tag,
        )

        profile = profile_service.update_profile(
            registered_user_id, ProfileUpdate(sensitive_id="000000000000")
        )

        after = session.get(UserTable, registered_user_id)
        session.refresh(after)
        new_triple = (
            after.sensitive_id_ciphertext,
            after.sensitive_id_iv,
            after.sensitive_id_auth_tag,
        )
        assert profile.sensitive_id == "000000000000"
        assert profile_service.get_profile(registered_user_id).sensitive_id == (
            "000000000000"
        )
        assert all(old != new for old, new in zip(old_triple, new_triple, strict=True))

    def test_partial_update_leaves_other_fields(self, profile_service, registered_user_id):
        profile = profile_service.update_profile(
            registered_user_id, ProfileUpdate(first_name="Ash")
        )

        assert profile.first_name == "Ash"
        assert profile.last_name == "Rao"
        assert profile.phone == "+91 98765 43210"
        assert profile.sensitive_id == SENSITIVE_ID

    def test_update_refreshes_updated_at(self, profile_service, registered_user_id):
        before = profile_service.get_profile(registered_user_id)

        after = profile_service.update_profile(
            registered_user_id, ProfileUpdate(phone="+1 (555) 010-9999")
        )

        assert after.phone == "+1 (555) 010-9999"
        assert after.updated_at >= before.updated_at

    @pytest.mark.parametrize(
        "update",
        [
            ProfileUpdate(first_name="  "),
            ProfileUpdate(last_name=""),
            ProfileUpdate(phone="abc"),
            ProfileUpdate(sensitive_id="1234"),
            ProfileUpdate(sensitive_id="12345678901a"),
        ],
    )
    def test_invalid_update_is_rejected_without_write(
        self, profile_service, registered_user_id, update
    ):
        with pytest.raises(ValidationError):
            profile_service.update_profile(registered_user_id, update)

        profile = profile_service.get_profile(registered_user_id)
        assert profile.first_name == "Asha"
        assert profile.sensitive_id == SENSITIVE_ID

    def test_update_unknown_user_is_not_found(self, profile_service):
        with pytest.raises(NotFoundError):
            profile_service.update_profile("missing-id", ProfileUpdate(first_name="X"))


class TestVerifyPassword:
    def test_correct_password(self, profile_service, registered_user_id):
        assert profile_service.verify_password(registered_user_id, PASSWORD) is True

    def test_wrong_password(self, profile_service, registered_user_id):
        assert profile_service.verify_password(registered_user_id, "nope-nope") is False

    def test_unknown_user_is_not_found(self, profile_service):
        with pytest.raises(NotFoundError):
            profile_service.verify_password("missing-id", PASSWORD)

    def test_corrupted_hash_returns_false(
        self, profile_service, registered_user_id, session
    ):
        row = session.get(UserTable, registered_user_id)
        row.password_hash = "garbage"
        session.add(row)
        session.commit()

        assert profile_service.verify_password(registered_user_id, PASSWORD) is False
