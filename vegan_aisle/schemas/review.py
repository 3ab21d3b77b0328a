"""Review schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from vegan_aisle.models.enums import ReviewSort


class ReviewCreate(BaseModel):
    """Write a review."""

    product_id: str = Field(..., min_length=1, max_length=36)
    rating: int = Field(..., ge=1, le=5)
    title: str | None = Field(None, max_length=200)
    comment: str = Field(..., min_length=1, max_length=2000)
    photo_urls: list[str] = Field(default_factory=list)


class ReviewUpdate(BaseModel):
    """Edit a review. Omitted fields are left unchanged."""

    rating: int | None = Field(None, ge=1, le=5)
    title: str | None = Field(None, max_length=200)
    comment: str | None = Field(None, min_length=1, max_length=2000)
    photo_urls: list[str] | None = None


class ReviewResponse(BaseModel):
    """Review response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: str
    user_id: int
    author_name: str | None = None
    rating: int
    title: str | None = None
    comment: str
    photo_urls: list[str]
    status: str
    trusted_contribution: bool
    helpful_count: int
    is_helpful: bool = False
    reviewed_at: datetime
    approved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReviewPage(BaseModel):
    """A page of reviews."""

    items: list[ReviewResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    sort_by: ReviewSort


class HelpfulVoteResponse(BaseModel):
    """Result of toggling a helpful vote."""

    review_id: int
    helpful_count: int
    voted: bool
