"""City landing pages and suggested edits to them."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import ContentEditMixin, TimestampMixin


class CityLandingPage(Base, TimestampMixin):
    """Published guide to vegan shopping in one city."""

    __tablename__ = "city_landing_pages"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)  # e.g. delaware-oh
    city_name = Column(String(255), nullable=False)
    state = Column(String(10), nullable=False)
    headline = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False, index=True)
    featured_store_ids = Column(JSON, nullable=False, default=list)

    edits = relationship("CityContentEdit", back_populates="city_page", cascade="all, delete-orphan")


class CityContentEdit(Base, ContentEditMixin, TimestampMixin):
    """Suggested change to one field of a city page."""

    __tablename__ = "city_content_edits"

    city_page_id = Column(Integer, ForeignKey("city_landing_pages.id"), nullable=False, index=True)
    city_slug = Column(String(255), nullable=False, index=True)

    city_page = relationship("CityLandingPage", back_populates="edits")
    user = relationship("User", foreign_keys="CityContentEdit.user_id")
