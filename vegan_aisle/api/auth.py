"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user
from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    PasswordChange,
    ProfileUpdate,
    ResetPasswordRequest,
    UserLogin,
    UserResponse,
    UserSignup,
)
from vegan_aisle.services import auth as auth_service
from vegan_aisle.services.email import EmailService, get_email_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserSignup,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    user, access_token = auth_service.signup(
        db, user_data.email, user_data.password, user_data.display_name
    )
    return AuthResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    user, access_token = auth_service.login(db, credentials.email, credentials.password)
    return AuthResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update display name, email or location preference."""
    return auth_service.update_profile(db, current_user, profile.model_dump(exclude_unset=True))


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    passwords: PasswordChange,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    auth_service.change_password(
        db, current_user, passwords.current_password, passwords.new_password
    )
    return MessageResponse(message="Password changed successfully")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
):
    """Email a password reset link. Always answers the same way."""
    message = await auth_service.forgot_password(db, request.email, email_service)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
):
    """Set a new password with a reset token."""
    user = auth_service.reset_password(db, request.token, request.password)
    await email_service.send_password_changed_email(user.email, user.display_name)
    return MessageResponse(message="Password has been reset. You can now log in.")
