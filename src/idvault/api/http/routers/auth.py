"""Registration, login and token validation endpoints."""

from fastapi import APIRouter, Depends, status

from src.idvault.api.http.deps import get_current_claims, get_identity_service
from src.idvault.api.http.middleware.limiter import rate_limit
from src.idvault.core.models.identity import (
    LoginRequest,
    LoginResult,
    RegistrationRequest,
    RegistrationResult,
)
from src.idvault.core.models.token import TokenClaims
from src.idvault.core.services import IdentityService

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegistrationResult,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limit)],
)
def register(
    body: RegistrationRequest,
    identity_service: IdentityService = Depends(get_identity_service),
) -> RegistrationResult:
    return identity_service.register(body)


@router.post(
    "/login",
    response_model=LoginResult,
    response_model_by_alias=True,
    dependencies=[Depends(rate_limit)],
)
def login(
    body: LoginRequest,
    identity_service: IdentityService = Depends(get_identity_service),
) -> LoginResult:
    return identity_service.login(body.email, body.password)


@router.post("/validate", dependencies=[Depends(rate_limit)])
def validate_token(claims: TokenClaims = Depends(get_current_claims)) -> dict:
    """Confirm a token is still valid and echo its subject."""
    return {
        "valid": True,
        "user": {"userId": claims.subject_id, "email": claims.email},
    }
