"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.services.auth import decode_access_token
from vegan_aisle.services.trust import can_moderate, is_admin

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _user_from_token(db: Session, token: str) -> User | None:
    payload = decode_access_token(token)
    if payload is None or payload.get("sub") is None:
        return None
    return db.query(User).filter(User.id == int(payload["sub"])).first()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    user = _user_from_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """The signed-in user if a valid token was sent, else None."""
    if credentials is None:
        return None
    return _user_from_token(db, credentials.credentials)


def require_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    if not is_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def require_moderator(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Admins and moderators."""
    if not can_moderate(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Moderator access required"
        )
    return current_user

