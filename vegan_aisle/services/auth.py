"""Authentication service for JWT, password and account handling."""

import hashlib
import logging
import re
import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from vegan_aisle.config import get_settings
from vegan_aisle.errors import AuthenticationError, BadRequestError, ConflictError, NotFoundError
from vegan_aisle.models.mixins import as_utc
from vegan_aisle.models.password_reset import PasswordResetToken
from vegan_aisle.models.user import User
from vegan_aisle.services.email import EmailService

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
MIN_DISPLAY_NAME_LENGTH = 2

FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a password reset link has been sent."


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password against its hash. OAuth-only accounts never match."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def hash_reset_token(token: str) -> str:
    """Reset tokens are stored as sha256 digests, never in clear text."""
    return hashlib.sha256(token.encode()).hexdigest()


def create_access_token(user: User) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def _validate_email(email: str) -> str:
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise BadRequestError("Invalid email format", field="email")
    return email


def _validate_password(password: str, field: str = "password") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        label = "New password" if field == "new_password" else "Password"
        raise BadRequestError(
            f"{label} must be at least {MIN_PASSWORD_LENGTH} characters", field=field
        )


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_user(db: Session, email: str, password: str, display_name: str) -> User:
    """Create a new local user."""
    user = User(
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
        display_name=display_name.strip(),
        role="user",
        auth_provider="local",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def signup(db: Session, email: str, password: str, display_name: str) -> tuple[User, str]:
    """Register a local account and return it with a fresh token."""
    email = _validate_email(email)
    _validate_password(password)
    if not display_name or len(display_name.strip()) < MIN_DISPLAY_NAME_LENGTH:
        raise BadRequestError(
            f"Display name must be at least {MIN_DISPLAY_NAME_LENGTH} characters",
            field="display_name",
        )

    if get_user_by_email(db, email):
        raise ConflictError("Email already registered", field="email")

    user = create_user(db, email, password, display_name)
    logger.info(f"Registered user {user.id}")
    return user, create_access_token(user)


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """Log in with email and password."""
    user = authenticate_user(db, email, password)
    if not user:
        raise AuthenticationError("Invalid email or password")

    user.last_login = datetime.now(UTC)
    db.commit()
    db.refresh(user)
    return user, create_access_token(user)


def update_profile(db: Session, user: User, updates: dict) -> User:
    """Apply profile changes. Keys absent from ``updates`` are left alone."""
    display_name = updates.get("display_name")
    if display_name and len(display_name.strip()) >= MIN_DISPLAY_NAME_LENGTH:
        user.display_name = display_name.strip()

    if updates.get("email"):
        email = _validate_email(updates["email"])
        taken = db.query(User).filter(User.email == email, User.id != user.id).first()
        if taken:
            raise ConflictError("Email already in use", field="email")
        user.email = email

    for field in ("name", "preferred_city", "preferred_state", "latitude", "longitude"):
        if field in updates:
            setattr(user, field, updates[field])

    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    """Change a user's password after checking the current one."""
    if not verify_password(current_password, user.password_hash):
        raise AuthenticationError("Current password is incorrect", field="current_password")
    _validate_password(new_password, field="new_password")

    user.password_hash = get_password_hash(new_password)
    db.commit()
    logger.info(f"User {user.id} changed their password")


def create_password_reset_token(db: Session, user: User) -> str:
    """Create a reset token and return the clear-text value to email."""
    token = secrets.token_urlsafe(32)
    reset = PasswordResetToken(
        user_id=user.id,
        token_hash=hash_reset_token(token),
        expires_at=datetime.now(UTC)
        + timedelta(minutes=settings.password_reset_expiration_minutes),
    )
    db.add(reset)
    db.commit()
    return token


async def forgot_password(db: Session, email: str, email_service: EmailService) -> str:
    """Email a reset link if the account exists.

    The response message is identical either way so callers cannot learn
    which emails are registered.
    """
    user = get_user_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return FORGOT_PASSWORD_MESSAGE

    token = create_password_reset_token(db, user)
    sent = await email_service.send_password_reset_email(user.email, token, user.display_name)
    if not sent:
        logger.warning(f"Password reset email for user {user.id} was not delivered")
    return FORGOT_PASSWORD_MESSAGE


def reset_password(db: Session, token: str, new_password: str) -> User:
    """Set a new password using a reset token. Tokens work once."""
    _validate_password(new_password)

    reset = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.token_hash == hash_reset_token(token))
        .first()
    )
    now = datetime.now(UTC)
    if reset is None or reset.used_at is not None or as_utc(reset.expires_at) <= now:
        raise BadRequestError("Invalid or expired reset token", field="token")

    user = get_user_by_id(db, reset.user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.password_hash = get_password_hash(new_password)
    # Burn this token and any others still outstanding for the user
    db.query(PasswordResetToken).filter(
        PasswordResetToken.user_id == user.id,
        PasswordResetToken.used_at.is_(None),
    ).update({PasswordResetToken.used_at: now}, synchronize_session=False)
    db.commit()
    db.refresh(user)
    logger.info(f"Password reset completed for user {user.id}")
    return user
