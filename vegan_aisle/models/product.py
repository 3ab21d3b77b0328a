"""Catalog models: curated products and user contributions."""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import ArchiveMixin, TimestampMixin


def new_product_id() -> str:
    """Catalog ids share one space across both tables."""
    return str(uuid.uuid4())


class ProductFieldsMixin:
    """Columns shared by curated and contributed products."""

    name = Column(String(500), nullable=False, index=True)
    brand = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    size_or_variant = Column(String(255), nullable=False, default="Standard")
    categories = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    is_strict_vegan = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(1000), nullable=True)
    nutrition_summary = Column(Text, nullable=True)
    ingredient_summary = Column(Text, nullable=True)


class Product(Base, ProductFieldsMixin, ArchiveMixin, TimestampMixin):
    """Curated product (imported or admin-maintained)."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_product_id)

    # Admin-controlled featuring
    featured = Column(Boolean, nullable=False, default=False, index=True)
    featured_order = Column(Integer, nullable=False, default=0)
    featured_at = Column(DateTime(timezone=True), nullable=True)


class UserProduct(Base, ProductFieldsMixin, ArchiveMixin, TimestampMixin):
    """User-contributed product, or an edit overlay when source_product_id is set."""

    __tablename__ = "user_products"

    id = Column(String(36), primary_key=True, default=new_product_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Either a products.id or a user_products.id
    source_product_id = Column(String(36), nullable=True, index=True)

    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected
    trusted_contribution = Column(Boolean, nullable=False, default=False)
    needs_review = Column(Boolean, nullable=False, default=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String(1000), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", foreign_keys=[user_id])

    @property
    def is_edit(self) -> bool:
        """Whether this row is an edit suggestion for another product."""
        return self.source_product_id is not None
