"""OAuth sign-in endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vegan_aisle.database import get_db
from vegan_aisle.models.enums import AuthProvider
from vegan_aisle.schemas.auth import (
    AppleLoginRequest,
    GoogleLoginRequest,
    OAuthResponse,
    UserResponse,
)
from vegan_aisle.services.oauth import (
    OAuthResult,
    authenticate_oauth,
    verify_apple_token,
    verify_google_token,
)

router = APIRouter(prefix="/api/oauth", tags=["oauth"])


def _response(result: OAuthResult) -> OAuthResponse:
    return OAuthResponse(
        access_token=result.token,
        user=UserResponse.model_validate(result.user),
        is_new_user=result.is_new_user,
        message="Account created successfully" if result.is_new_user else "Login successful",
    )


@router.post("/google", response_model=OAuthResponse)
async def google_login(
    request: GoogleLoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Sign in with a Google ID token or access token."""
    data = await verify_google_token(request.credential)
    return _response(authenticate_oauth(db, AuthProvider.GOOGLE, data))


@router.post("/apple", response_model=OAuthResponse)
async def apple_login(
    request: AppleLoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Sign in with an Apple identity token."""
    name = request.user.name if request.user else None
    data = await verify_apple_token(request.identity_token, name=name)
    return _response(authenticate_oauth(db, AuthProvider.APPLE, data))
