"""Store, chain and availability schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from vegan_aisle.models.enums import ChainType, StoreType


class AvailabilityResponse(BaseModel):
    """Availability row joined with its store and chain."""

    id: int
    product_id: str
    store_id: int
    store_name: str
    store_type: str
    region_or_scope: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    website_url: str | None = None
    chain_id: int | None = None
    chain_name: str | None = None
    chain_slug: str | None = None
    status: str
    moderation_status: str
    price_range: str | None = None
    source: str
    last_confirmed_at: datetime | None = None
    is_stale: bool = False
    stock_status: str = "unknown"
    last_stock_report_at: datetime | None = None
    recent_in_stock_count: int = 0
    recent_out_of_stock_count: int = 0


class StockReportCreate(BaseModel):
    """Shopper report of whether a product was on the shelf."""

    store_id: int
    status: Literal["in_stock", "out_of_stock"]
    notes: str | None = Field(None, max_length=200)


class StockReportResponse(BaseModel):
    """Stock summary after a report."""

    product_id: str
    store_id: int
    stock_status: str
    last_stock_report_at: datetime | None = None
    recent_in_stock_count: int
    recent_out_of_stock_count: int


class StoreCreate(BaseModel):
    """Add a store."""

    name: str = Field(..., min_length=1, max_length=255)
    type: StoreType
    region_or_scope: str = Field("Unknown", max_length=255)
    website_url: HttpUrl | None = None
    address: str | None = Field(None, max_length=500)
    city: str | None = Field(None, max_length=255)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str = Field("US", max_length=10)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    google_place_id: str | None = Field(None, max_length=255)
    phone_number: str | None = Field(None, max_length=50)
    chain_id: int | None = None
    location_identifier: str | None = Field(None, max_length=255)
    skip_duplicate_check: bool = False


class StoreResponse(BaseModel):
    """Store information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    region_or_scope: str
    website_url: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str
    latitude: float | None = None
    longitude: float | None = None
    google_place_id: str | None = None
    phone_number: str | None = None
    chain_id: int | None = None
    location_identifier: str | None = None
    moderation_status: str
    created_at: datetime


class StoreWithChainResponse(StoreResponse):
    """Store with its chain's name and slug."""

    chain_name: str | None = None
    chain_slug: str | None = None


class StoreCreateResponse(BaseModel):
    """Result of adding a store; duplicates are returned instead of created."""

    store: StoreResponse | None = None
    is_duplicate: bool = False
    duplicate_type: Literal["exact", "similar"] | None = None
    similar_stores: list[StoreResponse] = Field(default_factory=list)
    message: str | None = None


class ChainCreate(BaseModel):
    """Create a store chain."""

    name: str = Field(..., min_length=1, max_length=255)
    logo_url: str | None = Field(None, max_length=1000)
    website_url: str | None = Field(None, max_length=1000)
    type: ChainType = ChainType.REGIONAL
    is_active: bool = True


class ChainUpdate(BaseModel):
    """Update a store chain. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    logo_url: str | None = Field(None, max_length=1000)
    website_url: str | None = Field(None, max_length=1000)
    type: ChainType | None = None
    is_active: bool | None = None


class ChainResponse(BaseModel):
    """Store chain response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    logo_url: str | None = None
    website_url: str | None = None
    type: str
    is_active: bool
    location_count: int


class ChainAssignment(BaseModel):
    """Assign stores to a chain (or remove them with chain_id=None)."""

    store_ids: list[int] = Field(..., min_length=1)
    chain_id: int | None = None


class PlacePrediction(BaseModel):
    """Google Places autocomplete suggestion."""

    place_id: str
    description: str
    main_text: str
    secondary_text: str


class PlaceDetails(BaseModel):
    """Parsed Google place details."""

    place_id: str
    name: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    phone_number: str | None = None
    website_url: str | None = None
    formatted_address: str | None = None


class ChainStoreGroup(BaseModel):
    """A chain and its stores."""

    chain: ChainResponse
    stores: list[StoreResponse]


class GroupedStoresResponse(BaseModel):
    """Stores grouped by chain."""

    chains: list[ChainStoreGroup]
    independent_stores: list[StoreResponse]


class ChainLocationsResponse(BaseModel):
    """A chain's stores, optionally narrowed to one city or state."""

    chain: ChainResponse
    stores: list[StoreResponse]
    total_count: int
    related_chains: list[str] = Field(default_factory=list)
