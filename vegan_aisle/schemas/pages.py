"""Brand page, city page and content edit schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from vegan_aisle.models.enums import BrandEditField, CityEditField
from vegan_aisle.schemas.product import ProductSummary


class BrandPageResponse(BaseModel):
    """Brand page; ``exists`` is false for a placeholder built from the name."""

    id: int | None = None
    brand_name: str
    slug: str
    display_name: str
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    is_active: bool = True
    exists: bool


class BrandEditCreate(BaseModel):
    """Suggest new text for one brand page field."""

    field: BrandEditField
    suggested_value: str = Field(..., min_length=1, max_length=5000)
    reason: str | None = Field(None, max_length=1000)


class CityEditCreate(BaseModel):
    """Suggest new text for one city page field."""

    field: CityEditField
    suggested_value: str = Field(..., min_length=1, max_length=5000)
    reason: str | None = Field(None, max_length=1000)


class EditSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    field: str
    status: str


class EditSubmitted(BaseModel):
    """Result of suggesting an edit."""

    message: str
    edit: EditSummary
    auto_applied: bool


class ContentEditResponse(BaseModel):
    """Suggested edit as moderators see it."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    field: str
    original_value: str
    suggested_value: str
    reason: str | None = None
    user_id: int
    status: str
    trusted_contribution: bool
    auto_applied: bool
    needs_review: bool
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    review_note: str | None = None
    created_at: datetime


class BrandContentEditResponse(ContentEditResponse):
    brand_page_id: int
    brand_name: str
    brand_slug: str


class CityContentEditResponse(ContentEditResponse):
    city_page_id: int
    city_slug: str


class EditReview(BaseModel):
    note: str | None = Field(None, max_length=1000)


# Cities


class CityPageResponse(BaseModel):
    """Public city landing page."""

    model_config = ConfigDict(from_attributes=True)

    slug: str
    city_name: str
    state: str
    headline: str
    description: str
    is_active: bool


class CityPageAdmin(CityPageResponse):
    """City page with its bookkeeping fields."""

    id: int
    featured_store_ids: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CityPageCreate(BaseModel):
    """Create a city landing page. New pages are unpublished unless is_active is set."""

    slug: str = Field(..., min_length=1, max_length=255, pattern=r"^[A-Za-z0-9-]+$")
    city_name: str = Field(..., min_length=1, max_length=255)
    state: str = Field(..., min_length=2, max_length=10)
    headline: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    is_active: bool = False
    featured_store_ids: list[int] = Field(default_factory=list)


class CityPageUpdate(BaseModel):
    """Update a city page. Omitted fields are left unchanged."""

    city_name: str | None = Field(None, min_length=1, max_length=255)
    state: str | None = Field(None, min_length=2, max_length=10)
    headline: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, min_length=1)
    is_active: bool | None = None
    featured_store_ids: list[int] | None = None


class GeocodeResponse(BaseModel):
    city: str | None = None
    state: str | None = None


class CityChain(BaseModel):
    id: int
    name: str
    slug: str
    logo_url: str | None = None


class CityStore(BaseModel):
    """Physical store in a city with its confirmed product count."""

    id: int
    name: str
    type: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    website_url: str | None = None
    phone_number: str | None = None
    product_count: int = 0
    chain_id: int | None = None
    location_identifier: str | None = None
    chain: CityChain | None = None


class CityStoresResponse(BaseModel):
    stores: list[CityStore]


class CityChainGroup(BaseModel):
    chain: CityChain
    stores: list[CityStore]
    total_product_count: int


class CityStoresGrouped(BaseModel):
    """City stores bucketed by chain, busiest first."""

    chain_groups: list[CityChainGroup]
    independent_stores: list[CityStore]


class CityProduct(ProductSummary):
    average_rating: float | None = None
    review_count: int = 0
    store_names: list[str] = Field(default_factory=list)


class CityProductsPage(BaseModel):
    products: list[CityProduct]
    total_count: int
    page: int
    total_pages: int


class StoreProduct(ProductSummary):
    average_rating: float | None = None
    review_count: int = 0
    price_range: str | None = None


class StoreProductsResponse(BaseModel):
    products: list[StoreProduct]
