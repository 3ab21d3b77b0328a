"""Mixins for SQLAlchemy models."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ArchiveMixin:
    """Mixin to hide catalog rows without deleting them."""

    archived = Column(Boolean, nullable=False, default=False, index=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    archived_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    def archive(self, user_id: int) -> None:
        """Archive the record."""
        self.archived = True
        self.archived_at = utcnow()
        self.archived_by = user_id

    def unarchive(self) -> None:
        """Restore an archived record."""
        self.archived = False
        self.archived_at = None
        self.archived_by = None


class ContentEditMixin:
    """Columns shared by suggested edits to brand and city page text."""

    id = Column(Integer, primary_key=True, index=True)
    field = Column(String(50), nullable=False)
    original_value = Column(Text, nullable=False, default="")
    suggested_value = Column(Text, nullable=False)
    reason = Column(String(1000), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected
    trusted_contribution = Column(Boolean, nullable=False, default=False)
    auto_applied = Column(Boolean, nullable=False, default=False)
    needs_review = Column(Boolean, nullable=False, default=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_note = Column(String(1000), nullable=True)
