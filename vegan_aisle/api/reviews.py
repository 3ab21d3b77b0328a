"""Product review endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user, get_optional_user
from vegan_aisle.database import get_db
from vegan_aisle.models.enums import ReviewSort
from vegan_aisle.models.user import User
from vegan_aisle.schemas.product import RatingStats
from vegan_aisle.schemas.review import (
    HelpfulVoteResponse,
    ReviewCreate,
    ReviewPage,
    ReviewResponse,
    ReviewUpdate,
)
from vegan_aisle.services import reviews as review_service

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    data: ReviewCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Review a product. Untrusted reviews wait for moderation."""
    review = review_service.create_review(db, current_user, data.model_dump())
    return review_service.serialize_review(review, current_user)


@router.get("/product/{product_id}", response_model=ReviewPage)
async def get_product_reviews(
    product_id: str,
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
    sort_by: ReviewSort = ReviewSort.NEWEST,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Approved reviews of a product."""
    return review_service.get_reviews(
        db, product_id, sort_by=sort_by, page=page, page_size=page_size, viewer=viewer
    )


@router.get("/product/{product_id}/user", response_model=ReviewResponse | None)
async def get_my_review(
    product_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """The current user's review of a product, in any status."""
    review = review_service.get_user_review(db, current_user, product_id)
    if review is None:
        return None
    return review_service.serialize_review(review, current_user)


@router.get("/product/{product_id}/stats", response_model=RatingStats)
async def get_rating_stats(
    product_id: str,
    db: Annotated[Session, Depends(get_db)],
):
    return review_service.get_rating_stats(db, product_id)


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    review = review_service.update_review(
        db, current_user, review_id, data.model_dump(exclude_unset=True)
    )
    return review_service.serialize_review(review, current_user)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    review_service.delete_review(db, current_user, review_id)


@router.post("/{review_id}/helpful", response_model=HelpfulVoteResponse)
async def vote_helpful(
    review_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Toggle the current user's helpful vote."""
    review, voted = review_service.vote_helpful(db, current_user, review_id)
    return HelpfulVoteResponse(review_id=review.id, helpful_count=review.helpful_count, voted=voted)
