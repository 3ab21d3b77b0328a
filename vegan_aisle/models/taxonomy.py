"""Category/tag administration models."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import TimestampMixin


class ArchivedFilter(Base, TimestampMixin):
    """A category or tag value hidden from shoppers."""

    __tablename__ = "archived_filters"
    __table_args__ = (UniqueConstraint("type", "value", name="uq_archived_filter_type_value"),)

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False, index=True)  # category, tag
    value = Column(String(255), nullable=False, index=True)  # exact stored form, e.g. "en:animal-fat"
    archived_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    archived_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))


class FilterDisplayName(Base, TimestampMixin):
    """Shopper-facing label for a normalized category or tag."""

    __tablename__ = "filter_display_names"
    __table_args__ = (UniqueConstraint("type", "value", name="uq_filter_display_type_value"),)

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False, index=True)
    value = Column(String(255), nullable=False, index=True)  # normalized value
    display_name = Column(String(255), nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=False)
