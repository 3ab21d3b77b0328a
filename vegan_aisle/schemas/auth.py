"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserSignup(BaseModel):
    """User signup request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., max_length=128)
    display_name: str = Field(..., max_length=255)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdate(BaseModel):
    """Profile update request. Omitted fields are left unchanged."""

    display_name: str | None = Field(None, min_length=2, max_length=255)
    name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    preferred_city: str | None = Field(None, max_length=255)
    preferred_state: str | None = Field(None, max_length=100)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class PasswordChange(BaseModel):
    """Change password request."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., max_length=128)


class ForgotPasswordRequest(BaseModel):
    """Request a password reset email."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Reset a password using an emailed token."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., max_length=128)


class GoogleLoginRequest(BaseModel):
    """Google sign-in with an ID token or access token."""

    credential: str = Field(..., min_length=1)


class AppleUserData(BaseModel):
    """Profile Apple sends only on the first sign-in.

    Any email sent alongside is ignored; the signed identity token is the
    only source of the address.
    """

    name: str | None = None


class AppleLoginRequest(BaseModel):
    """Apple sign-in request."""

    identity_token: str = Field(..., min_length=1)
    user: AppleUserData | None = None


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: str
    name: str | None = None
    role: str
    auth_provider: str
    profile_picture: str | None = None
    trusted_contributor: bool = False
    preferred_city: str | None = None
    preferred_state: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    last_login: datetime | None = None


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse


class OAuthResponse(AuthResponse):
    """OAuth authentication response."""

    is_new_user: bool
    message: str


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str
