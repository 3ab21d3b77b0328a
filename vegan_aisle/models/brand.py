"""Brand pages and suggested edits to them."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import ContentEditMixin, TimestampMixin


class BrandPage(Base, TimestampMixin):
    """Public page for a brand, matched to products by brand name."""

    __tablename__ = "brand_pages"

    id = Column(Integer, primary_key=True, index=True)
    brand_name = Column(String(255), unique=True, nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    logo_url = Column(String(1000), nullable=True)
    website_url = Column(String(1000), nullable=True)
    # Points at the official page when this one is an alias
    parent_brand_id = Column(Integer, ForeignKey("brand_pages.id"), nullable=True, index=True)
    is_official = Column(Boolean, nullable=False, default=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    edits = relationship("BrandContentEdit", back_populates="brand_page")


class BrandContentEdit(Base, ContentEditMixin, TimestampMixin):
    """Suggested change to one field of a brand page."""

    __tablename__ = "brand_content_edits"

    brand_page_id = Column(Integer, ForeignKey("brand_pages.id"), nullable=False, index=True)
    brand_name = Column(String(255), nullable=False, index=True)
    brand_slug = Column(String(255), nullable=False, index=True)

    brand_page = relationship("BrandPage", back_populates="edits")
    user = relationship("User", foreign_keys="BrandContentEdit.user_id")
