"""Trust gate deciding whether contributions publish immediately."""

from typing import NamedTuple

from sqlalchemy.orm import Session

from vegan_aisle.models.enums import ModerationStatus, ProductStatus, UserRole
from vegan_aisle.models.user import User


class TrustLevel(NamedTuple):
    """How a user's contributions are moderated."""

    is_trusted: bool
    needs_review: bool


UNTRUSTED = TrustLevel(is_trusted=False, needs_review=True)


def trust_level_for(user: User | None) -> TrustLevel:
    """Trust level of an already loaded user.

    Admin content publishes with no follow-up. Moderator and trusted
    contributor content publishes but stays in the trusted review queue.
    Everyone else waits in the pending queue.
    """
    if user is None:
        return UNTRUSTED
    if user.role == UserRole.ADMIN.value:
        return TrustLevel(is_trusted=True, needs_review=False)
    if user.role == UserRole.MODERATOR.value or user.trusted_contributor:
        return TrustLevel(is_trusted=True, needs_review=True)
    return UNTRUSTED


def get_trust_level(db: Session, user_id: int | None) -> TrustLevel:
    """Trust level for a user id; unknown users are untrusted."""
    if user_id is None:
        return UNTRUSTED
    return trust_level_for(db.query(User).filter(User.id == user_id).first())


def product_status_for(trust: TrustLevel) -> str:
    return ProductStatus.APPROVED.value if trust.is_trusted else ProductStatus.PENDING.value


def moderation_status_for(trust: TrustLevel) -> str:
    return ModerationStatus.CONFIRMED.value if trust.is_trusted else ModerationStatus.PENDING.value


def can_moderate(user: User | None) -> bool:
    """Check if a user may see and act on moderation queues."""
    return user is not None and user.role in (UserRole.ADMIN.value, UserRole.MODERATOR.value)


def is_admin(user: User | None) -> bool:
    return user is not None and user.role == UserRole.ADMIN.value
