"""Product reviews, helpful votes and rating stats."""

import logging
import math
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from vegan_aisle.errors import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from vegan_aisle.models.enums import ProductStatus, ReviewSort
from vegan_aisle.models.review import Review, ReviewHelpfulVote
from vegan_aisle.models.user import User
from vegan_aisle.services.catalog import resolve_product
from vegan_aisle.services.trust import is_admin, product_status_for, trust_level_for

logger = logging.getLogger(__name__)

MAX_PHOTOS = 5

SORT_ORDERS = {
    ReviewSort.NEWEST: (Review.reviewed_at.desc(), Review.id.desc()),
    ReviewSort.OLDEST: (Review.reviewed_at.asc(), Review.id.asc()),
    ReviewSort.HELPFUL: (Review.helpful_count.desc(), Review.reviewed_at.desc(), Review.id.desc()),
    ReviewSort.RATING: (Review.rating.desc(), Review.reviewed_at.desc(), Review.id.desc()),
}


def _check_content(rating: int | None, photo_urls: list[str] | None) -> None:
    if rating is not None and not 1 <= rating <= 5:
        raise BadRequestError("Rating must be between 1 and 5", field="rating")
    if photo_urls is not None and len(photo_urls) > MAX_PHOTOS:
        raise BadRequestError(f"Maximum {MAX_PHOTOS} photos allowed per review", field="photo_urls")


def serialize_review(review: Review, viewer: User | None = None) -> dict:
    is_helpful = viewer is not None and any(v.user_id == viewer.id for v in review.helpful_votes)
    return {
        "id": review.id,
        "product_id": review.product_id,
        "user_id": review.user_id,
        "author_name": review.author_name,
        "rating": review.rating,
        "title": review.title,
        "comment": review.comment,
        "photo_urls": list(review.photo_urls or []),
        "status": review.status,
        "trusted_contribution": review.trusted_contribution,
        "helpful_count": review.helpful_count,
        "is_helpful": is_helpful,
        "reviewed_at": review.reviewed_at,
        "approved_at": review.approved_at,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
    }


def get_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if review is None:
        raise NotFoundError("Review not found")
    return review


def create_review(db: Session, user: User, data: dict) -> Review:
    """Write a review; one per user and product."""
    product_id = data["product_id"]
    if resolve_product(db, product_id, viewer=user) is None:
        raise NotFoundError("Product not found")

    existing = (
        db.query(Review).filter(Review.user_id == user.id, Review.product_id == product_id).first()
    )
    if existing:
        raise ConflictError("You have already reviewed this product")
    _check_content(data["rating"], data.get("photo_urls"))

    trust = trust_level_for(user)
    now = datetime.now(UTC)
    review = Review(
        product_id=product_id,
        user_id=user.id,
        rating=data["rating"],
        title=data.get("title"),
        comment=data["comment"],
        photo_urls=data.get("photo_urls") or [],
        status=product_status_for(trust),
        trusted_contribution=trust.is_trusted,
        needs_review=trust.needs_review,
        helpful_count=0,
        reviewed_at=now,
        approved_at=now if trust.is_trusted else None,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    logger.info(f"User {user.id} reviewed product {product_id} ({review.status})")
    return review


def get_reviews(
    db: Session,
    product_id: str,
    sort_by: ReviewSort = ReviewSort.NEWEST,
    page: int = 1,
    page_size: int = 20,
    viewer: User | None = None,
) -> dict:
    """Approved reviews of a product."""
    query = db.query(Review).filter(
        Review.product_id == product_id, Review.status == ProductStatus.APPROVED.value
    )
    total_count = query.count()
    reviews = (
        query.options(joinedload(Review.author), joinedload(Review.helpful_votes))
        .order_by(*SORT_ORDERS[sort_by])
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {
        "items": [serialize_review(r, viewer) for r in reviews],
        "total_count": total_count,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total_count / page_size) if total_count else 0,
        "sort_by": sort_by,
    }


def get_user_review(db: Session, user: User, product_id: str) -> Review | None:
    return (
        db.query(Review).filter(Review.user_id == user.id, Review.product_id == product_id).first()
    )


def update_review(db: Session, user: User, review_id: int, updates: dict) -> Review:
    """Edit one's own review. Untrusted edits of a published review go back to pending."""
    review = get_review(db, review_id)
    if review.user_id != user.id:
        raise PermissionDeniedError("You can only edit your own reviews")
    _check_content(updates.get("rating"), updates.get("photo_urls"))

    for field in ("rating", "comment", "photo_urls"):
        if updates.get(field) is not None:
            setattr(review, field, updates[field])
    if "title" in updates:
        review.title = updates["title"]

    trust = trust_level_for(user)
    if review.status == ProductStatus.APPROVED.value and not trust.is_trusted:
        review.status = ProductStatus.PENDING.value
        review.approved_at = None
        review.approved_by = None
        review.needs_review = True

    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, user: User, review_id: int) -> None:
    review = get_review(db, review_id)
    if review.user_id != user.id and not is_admin(user):
        raise PermissionDeniedError("You can only delete your own reviews")
    db.delete(review)
    db.commit()


def vote_helpful(db: Session, user: User, review_id: int) -> tuple[Review, bool]:
    """Toggle the user's helpful vote. Returns the review and whether the vote is now set."""
    review = get_review(db, review_id)
    if review.status != ProductStatus.APPROVED.value:
        raise BadRequestError("Can only vote on approved reviews")

    vote = (
        db.query(ReviewHelpfulVote)
        .filter(ReviewHelpfulVote.review_id == review.id, ReviewHelpfulVote.user_id == user.id)
        .first()
    )
    if vote:
        db.delete(vote)
        review.helpful_count = max(0, review.helpful_count - 1)
        voted = False
    else:
        db.add(ReviewHelpfulVote(review_id=review.id, user_id=user.id))
        review.helpful_count += 1
        voted = True

    db.commit()
    db.refresh(review)
    return review, voted


def get_rating_stats(db: Session, product_id: str) -> dict:
    """Average (one decimal), count and 1-5 distribution of approved ratings."""
    rows = (
        db.query(Review.rating, func.count(Review.id))
        .filter(Review.product_id == product_id, Review.status == ProductStatus.APPROVED.value)
        .group_by(Review.rating)
        .all()
    )
    distribution = {star: 0 for star in range(1, 6)}
    for rating, count in rows:
        distribution[rating] = count

    review_count = sum(distribution.values())
    total = sum(star * count for star, count in distribution.items())
    # Half up, so 4.25 shows as 4.3
    average = math.floor(total * 10 / review_count + 0.5) / 10 if review_count else 0.0
    return {"average_rating": average, "review_count": review_count, "distribution": distribution}


def approve_review(db: Session, review_id: int, admin_id: int) -> Review:
    review = get_review(db, review_id)
    review.status = ProductStatus.APPROVED.value
    review.approved_at = datetime.now(UTC)
    review.approved_by = admin_id
    review.needs_review = False
    db.commit()
    db.refresh(review)
    logger.info(f"Approved review {review_id}")
    return review


def reject_review(db: Session, review_id: int, admin_id: int) -> Review:
    review = get_review(db, review_id)
    review.status = ProductStatus.REJECTED.value
    review.approved_at = None
    review.approved_by = None
    review.needs_review = False
    db.commit()
    db.refresh(review)
    logger.info(f"Admin {admin_id} rejected review {review_id}")
    return review


def get_pending_reviews(db: Session, page: int = 1, page_size: int = 20) -> dict:
    query = db.query(Review).filter(Review.status == ProductStatus.PENDING.value)
    total = query.count()
    reviews = (
        query.options(joinedload(Review.author))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {
        "items": [serialize_review(r) for r in reviews],
        "total": total,
        "page": page,
        "page_size": page_size,
    }
