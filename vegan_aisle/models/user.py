"""User model."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication, ownership and moderation rights."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # null for OAuth-only accounts
    display_name = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="user", index=True)  # user, moderator, admin

    # OAuth linking
    auth_provider = Column(String(20), nullable=False, default="local")
    provider_id = Column(String(255), nullable=True, index=True)
    profile_picture = Column(String(1000), nullable=True)

    # Trusted contributors skip the pending queue
    trusted_contributor = Column(Boolean, nullable=False, default=False)
    trusted_at = Column(DateTime(timezone=True), nullable=True)
    trusted_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Location preference
    preferred_city = Column(String(255), nullable=True)
    preferred_state = Column(String(100), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    last_login = Column(DateTime(timezone=True), nullable=True)
