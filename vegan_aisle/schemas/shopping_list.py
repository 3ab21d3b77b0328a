"""Shopping list schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ShoppingListCreate(BaseModel):
    """Create a shopping list."""

    name: str = Field(..., min_length=1, max_length=255)


class ShoppingListResponse(BaseModel):
    """Shopping list without items."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    created_at: datetime
    updated_at: datetime


class ListItemCreate(BaseModel):
    """Add a product to a list."""

    product_id: str = Field(..., min_length=1, max_length=36)
    quantity: int = Field(1, ge=1)
    note: str | None = Field(None, max_length=500)


class ListItemUpdate(BaseModel):
    """Update a list item. Omitted fields are left unchanged."""

    quantity: int | None = Field(None, ge=1)
    note: str | None = Field(None, max_length=500)


class AvailabilityHint(BaseModel):
    """Where a listed product can be bought."""

    store_id: int
    store_name: str
    store_type: str
    price_range: str | None = None
    stock_status: str = "unknown"
    last_stock_report_at: datetime | None = None
    recent_in_stock_count: int = 0
    recent_out_of_stock_count: int = 0


class ListItemProduct(BaseModel):
    """Product summary shown on a list item."""

    id: str
    name: str
    brand: str
    size_or_variant: str
    image_url: str | None = None
    is_strict_vegan: bool


class ListItemResponse(BaseModel):
    """List item with its resolved product."""

    id: int
    product_id: str
    quantity: int
    note: str | None = None
    added_at: datetime
    product: ListItemProduct | None = None
    availability_hints: list[AvailabilityHint] = Field(default_factory=list)


class ShoppingListDetail(ShoppingListResponse):
    """Shopping list with items."""

    items: list[ListItemResponse] = Field(default_factory=list)
