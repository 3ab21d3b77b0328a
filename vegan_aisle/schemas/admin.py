"""Administration and moderation schemas."""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from vegan_aisle.models.enums import FilterType, UserRole
from vegan_aisle.schemas.availability import StoreResponse
from vegan_aisle.schemas.pages import BrandContentEditResponse, CityContentEditResponse
from vegan_aisle.schemas.product import UserProductResponse

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """A page of admin results."""

    items: list[T]
    total: int
    page: int
    page_size: int


class ProductStats(BaseModel):
    total: int
    curated: int
    user_contributed: int
    pending_approval: int
    trusted_pending_review: int


class StoreStats(BaseModel):
    total: int
    physical: int
    online: int
    brand_direct: int
    pending_approval: int
    trusted_pending_review: int


class UserStats(BaseModel):
    total: int
    admins: int
    moderators: int
    regular_users: int
    trusted_contributors: int


class AvailabilityStats(BaseModel):
    total: int
    user_contributed: int
    pending_approval: int
    trusted_pending_review: int


class ReviewStats(BaseModel):
    pending_approval: int


class RecentActivity(BaseModel):
    new_products_this_week: int
    new_users_this_week: int
    new_stores_this_week: int


class DashboardStats(BaseModel):
    """Moderation dashboard counters."""

    products: ProductStats
    stores: StoreStats
    users: UserStats
    availability: AvailabilityStats
    reviews: ReviewStats
    recent_activity: RecentActivity


class OriginalProduct(BaseModel):
    """The product an edit suggestion would change."""

    id: str
    name: str
    brand: str
    description: str | None = None
    size_or_variant: str | None = None
    categories: list[str]
    tags: list[str]
    image_url: str | None = None


class PendingProduct(UserProductResponse):
    """Contribution awaiting moderation, with edit context."""

    user_email: str | None = None
    user_display_name: str | None = None
    is_edit_suggestion: bool = False
    original_product: OriginalProduct | None = None


class AdminUser(BaseModel):
    """User row in the admin user list."""

    id: int
    email: str
    display_name: str
    role: str
    trusted_contributor: bool
    trusted_at: datetime | None = None
    created_at: datetime
    last_login: datetime | None = None
    products_contributed: int


class PendingAvailability(BaseModel):
    """Availability row awaiting moderation."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: str
    store_id: int
    price_range: str | None = None
    status: str
    moderation_status: str
    source: str
    reported_by: int | None = None
    trusted_contribution: bool
    needs_review: bool
    created_at: datetime


class TrustedReviewQueue(BaseModel):
    """Trusted contributions that were published but still need a look."""

    products: list[UserProductResponse]
    stores: list[StoreResponse]
    availability: list[PendingAvailability]
    brand_edits: list[BrandContentEditResponse] = Field(default_factory=list)
    city_edits: list[CityContentEditResponse] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    role: UserRole


class TrustedUpdate(BaseModel):
    trusted: bool


class RejectionRequest(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class FeatureUpdate(BaseModel):
    featured: bool
    featured_order: int = 0


class ArchivedProduct(BaseModel):
    """Archived catalog product."""

    id: str
    name: str
    brand: str
    source: str
    archived_at: datetime | None = None
    archived_by: int | None = None


class FilterInfo(BaseModel):
    """A category/tag value with its admin state."""

    value: str
    display_name: str | None = None
    archived: bool
    archived_at: datetime | None = None


class FilterArchiveRequest(BaseModel):
    type: FilterType
    value: str = Field(..., min_length=1, max_length=255)


class DisplayNameRequest(BaseModel):
    type: FilterType
    value: str = Field(..., min_length=1, max_length=255)
    display_name: str = Field(..., min_length=1, max_length=255)
