"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.idvault.api.http.app_data import ApplicationDependencies
from src.idvault.core.exceptions import TokenMissingError
from src.idvault.core.models.token import TokenClaims
from src.idvault.core.services import (
    DbSessionService,
    FieldEncryptionService,
    IdentityService,
    PasswordHasher,
    ProfileService,
    TokenService,
)
from src.idvault.core.validation import ValidationPolicy


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return get_app_dependencies(request).database_service


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a request-scoped database session, closed afterwards."""
    session = get_app_dependencies(request).database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_field_encryption_service(request: Request) -> FieldEncryptionService:
    return get_app_dependencies(request).field_encryption_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return get_app_dependencies(request).password_hasher


def get_token_service(request: Request) -> TokenService:
    return get_app_dependencies(request).token_service


def get_validation_policy(request: Request) -> ValidationPolicy:
    return get_app_dependencies(request).validation_policy


def get_identity_service(
    db_session: Session = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    encryptor: FieldEncryptionService = Depends(get_field_encryption_service),
    token_service: TokenService = Depends(get_token_service),
    policy: ValidationPolicy = Depends(get_validation_policy),
) -> IdentityService:
    """Get the Identity service instance."""
    return IdentityService(db_session, hasher, encryptor, token_service, policy)


def get_profile_service(
    db_session: Session = Depends(get_db_session),
    encryptor: FieldEncryptionService = Depends(get_field_encryption_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    policy: ValidationPolicy = Depends(get_validation_policy),
) -> ProfileService:
    """Get the Profile service instance."""
    return ProfileService(db_session, encryptor, hasher, policy)


def get_current_claims(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Authenticate the request using a Bearer token.

    On success the subject id and email are attached to ``request.state``.
    """
    token = TokenService.extract_from_header(request.headers.get("Authorization"))
    if token is None:
        raise TokenMissingError()

    claims = token_service.verify(token)
    request.state.uid = claims.subject_id
    request.state.user = {"subject_id": claims.subject_id, "email": claims.email}
    return claims
