"""Availability models."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import TimestampMixin


class Availability(Base, TimestampMixin):
    """A product stocked at a store."""

    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("product_id", "store_id", name="uq_availability_product_store"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(36), nullable=False, index=True)  # products.id or user_products.id
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="known")  # known, user_reported, unknown
    price_range = Column(String(100), nullable=True)
    source = Column(String(30), nullable=False, default="seed_data")
    last_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    is_stale = Column(Boolean, nullable=False, default=False)

    # Moderation
    moderation_status = Column(String(20), nullable=False, default="confirmed", index=True)
    reported_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    trusted_contribution = Column(Boolean, nullable=False, default=False)
    needs_review = Column(Boolean, nullable=False, default=False)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    # Shopper stock reports, summarized
    stock_status = Column(String(20), nullable=False, default="unknown")
    last_stock_report_at = Column(DateTime(timezone=True), nullable=True)
    recent_in_stock_count = Column(Integer, nullable=False, default=0)
    recent_out_of_stock_count = Column(Integer, nullable=False, default=0)

    store = relationship("Store")


class AvailabilityReport(Base, TimestampMixin):
    """A shopper saying a product was (or was not) on the shelf."""

    __tablename__ = "availability_reports"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(36), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)  # in_stock, out_of_stock
    notes = Column(String(200), nullable=True)
    reported_at = Column(DateTime(timezone=True), nullable=False, index=True)
