"""Authenticated profile endpoints."""

from fastapi import APIRouter, Depends

from src.idvault.api.http.deps import get_current_claims, get_profile_service
from src.idvault.core.exceptions import Unauthorized
from src.idvault.core.models.identity import PasswordVerificationRequest, ProfileUpdate
from src.idvault.core.models.token import TokenClaims
from src.idvault.core.services import ProfileService

router = APIRouter(tags=["profile"])


@router.get("")
def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    profile_service: ProfileService = Depends(get_profile_service),
) -> dict:
    profile = profile_service.get_profile(claims.subject_id)
    return {"user": profile.model_dump(mode="json", by_alias=True)}


@router.put("")
def update_profile(
    body: ProfileUpdate,
    claims: TokenClaims = Depends(get_current_claims),
    profile_service: ProfileService = Depends(get_profile_service),
) -> dict:
    profile = profile_service.update_profile(claims.subject_id, body)
    return {
        "message": "Profile updated successfully",
        "user": profile.model_dump(mode="json", by_alias=True),
    }


@router.post("/verify-password")
def verify_password(
    body: PasswordVerificationRequest,
    claims: TokenClaims = Depends(get_current_claims),
    profile_service: ProfileService = Depends(get_profile_service),
) -> dict:
    """Step-up confirmation before a sensitive edit."""
    if not profile_service.verify_password(claims.subject_id, body.password):
        raise Unauthorized()
    return {"message": "Password verified successfully", "verified": True}
