"""Store and store chain models."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Float
from sqlalchemy.orm import relationship

from vegan_aisle.database import Base
from vegan_aisle.models.mixins import TimestampMixin


class StoreChain(Base, TimestampMixin):
    """Retail brand grouping many physical stores."""

    __tablename__ = "store_chains"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    logo_url = Column(String(1000), nullable=True)
    website_url = Column(String(1000), nullable=True)
    type = Column(String(20), nullable=False, default="regional")  # national, regional, local
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    location_count = Column(Integer, nullable=False, default=0)

    stores = relationship("Store", back_populates="chain")


class Store(Base, TimestampMixin):
    """Physical location, online retailer or brand shop."""

    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(30), nullable=False, index=True)  # brick_and_mortar, online_retailer, brand_direct
    region_or_scope = Column(String(255), nullable=False, default="Unknown")
    website_url = Column(String(1000), nullable=True)

    # Location
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True, index=True)
    state = Column(String(100), nullable=True, index=True)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(10), nullable=False, default="US")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    google_place_id = Column(String(255), nullable=True, index=True)
    phone_number = Column(String(50), nullable=True)

    # Chain membership
    chain_id = Column(Integer, ForeignKey("store_chains.id"), nullable=True, index=True)
    location_identifier = Column(String(255), nullable=True)

    # Moderation
    moderation_status = Column(String(20), nullable=False, default="confirmed", index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    trusted_contribution = Column(Boolean, nullable=False, default=False)
    needs_review = Column(Boolean, nullable=False, default=False)

    chain = relationship("StoreChain", back_populates="stores")
    creator = relationship("User", foreign_keys=[created_by])
