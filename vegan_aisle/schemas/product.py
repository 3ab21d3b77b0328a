"""Product catalog schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vegan_aisle.schemas.availability import AvailabilityResponse


class StoreSelection(BaseModel):
    """A single store the product is sold at."""

    store_id: int
    price_range: str | None = Field(None, max_length=100)


class ChainSelection(BaseModel):
    """Every store of a chain (optionally its sister chains) sells the product."""

    chain_id: int
    price_range: str | None = Field(None, max_length=100)
    include_related_company: bool = False


class ProductFields(BaseModel):
    """Editable product fields."""

    name: str = Field(..., min_length=1, max_length=500)
    brand: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    size_or_variant: str = Field("Standard", max_length=255)
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=lambda: ["vegan"])
    is_strict_vegan: bool = True
    image_url: str | None = Field(None, max_length=1000)
    nutrition_summary: str | None = Field(None, max_length=5000)
    ingredient_summary: str | None = Field(None, max_length=5000)

    @field_validator("name", "brand")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UserProductCreate(ProductFields):
    """Contribute a new product."""

    store_availabilities: list[StoreSelection] = Field(default_factory=list)
    chain_availabilities: list[ChainSelection] = Field(default_factory=list)


class EditSuggestionCreate(ProductFields):
    """Suggest an edit to an existing catalog product."""

    source_product_id: str = Field(..., min_length=1, max_length=36)


class UserProductUpdate(BaseModel):
    """Update a contributed product. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=500)
    brand: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    size_or_variant: str | None = Field(None, max_length=255)
    categories: list[str] | None = None
    tags: list[str] | None = None
    is_strict_vegan: bool | None = None
    image_url: str | None = Field(None, max_length=1000)
    nutrition_summary: str | None = Field(None, max_length=5000)
    ingredient_summary: str | None = Field(None, max_length=5000)
    store_availabilities: list[StoreSelection] | None = None
    chain_availabilities: list[ChainSelection] | None = None


class UserProductResponse(BaseModel):
    """A user contribution as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: int
    source_product_id: str | None = None
    name: str
    brand: str
    description: str | None = None
    size_or_variant: str
    categories: list[str]
    tags: list[str]
    is_strict_vegan: bool
    image_url: str | None = None
    nutrition_summary: str | None = None
    ingredient_summary: str | None = None
    status: str
    trusted_contribution: bool
    needs_review: bool
    rejection_reason: str | None = None
    archived: bool
    created_at: datetime
    updated_at: datetime


class ProductSummary(BaseModel):
    """Product as it appears in search results and lists."""

    id: str
    name: str
    brand: str
    size_or_variant: str
    categories: list[str]
    tags: list[str]
    is_strict_vegan: bool
    image_url: str | None = None
    source: str
    status: str
    featured: bool = False


class RatingStats(BaseModel):
    """Aggregated review ratings."""

    average_rating: float
    review_count: int
    distribution: dict[int, int]


class ProductDetail(ProductSummary):
    """Fully resolved product."""

    description: str | None = None
    nutrition_summary: str | None = None
    ingredient_summary: str | None = None
    user_id: int | None = None
    source_product_id: str | None = None
    archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    availability: list[AvailabilityResponse] = Field(default_factory=list)
    rating_stats: RatingStats | None = None


class ProductSearchResponse(BaseModel):
    """Paginated product search results."""

    items: list[ProductSummary]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class FilterValue(BaseModel):
    """A category or tag shoppers can filter by."""

    value: str
    display_name: str


class ProductAvailabilityCreate(BaseModel):
    """Report where an existing product is sold."""

    store_availabilities: list[StoreSelection] = Field(default_factory=list)
    chain_availabilities: list[ChainSelection] = Field(default_factory=list)
