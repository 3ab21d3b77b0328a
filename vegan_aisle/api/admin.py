"""Administration and moderation endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import require_admin, require_moderator
from vegan_aisle.database import get_db
from vegan_aisle.models.enums import FilterType, ProductStatus
from vegan_aisle.models.user import User
from vegan_aisle.schemas.admin import (
    AdminUser,
    ArchivedProduct,
    DashboardStats,
    DisplayNameRequest,
    FeatureUpdate,
    FilterArchiveRequest,
    FilterInfo,
    Page,
    PendingAvailability,
    PendingProduct,
    RejectionRequest,
    RoleUpdate,
    TrustedReviewQueue,
    TrustedUpdate,
)
from vegan_aisle.schemas.auth import MessageResponse, UserResponse
from vegan_aisle.schemas.availability import StoreResponse, StoreWithChainResponse
from vegan_aisle.schemas.pages import (
    BrandContentEditResponse,
    CityContentEditResponse,
    CityPageAdmin,
    CityPageCreate,
    CityPageUpdate,
    ContentEditResponse,
    EditReview,
)
from vegan_aisle.schemas.product import ProductSummary, UserProductResponse
from vegan_aisle.schemas.review import ReviewResponse
from vegan_aisle.services import admin as admin_service
from vegan_aisle.services import catalog, content_edits, taxonomy
from vegan_aisle.services import cities as city_service
from vegan_aisle.services import reviews as review_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.get_dashboard_stats(db)


# Products


@router.get("/products/pending", response_model=Page[PendingProduct])
async def get_pending_products(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Contributions and edit suggestions waiting for a decision."""
    return admin_service.get_pending_products(db, page=page, page_size=page_size)


@router.get("/products/archived", response_model=Page[ArchivedProduct])
async def get_archived_products(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return admin_service.get_archived_products(db, page=page, page_size=page_size)


@router.get("/products/user-generated", response_model=Page[PendingProduct])
async def get_user_generated_products(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
    product_status: ProductStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return admin_service.get_user_generated_products(
        db, status=product_status, page=page, page_size=page_size
    )


@router.post("/products/{product_id}/approve", response_model=UserProductResponse)
async def approve_product(
    product_id: str,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    """Publish a contribution or apply an edit suggestion."""
    return admin_service.approve_product(db, product_id, moderator)


@router.post("/products/{product_id}/reject", response_model=UserProductResponse)
async def reject_product(
    product_id: str,
    rejection: RejectionRequest,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.reject_product(db, product_id, moderator, rejection.reason)


@router.post("/products/{product_id}/archive", response_model=ArchivedProduct)
async def archive_product(
    product_id: str,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.archive_product(db, product_id, admin)


@router.post("/products/{product_id}/unarchive", response_model=ArchivedProduct)
async def unarchive_product(
    product_id: str,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.unarchive_product(db, product_id, admin)


@router.put("/products/{product_id}/featured", response_model=ProductSummary)
async def set_featured(
    product_id: str,
    update: FeatureUpdate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Feature or unfeature a curated product."""
    admin_service.set_featured(db, product_id, update.featured, update.featured_order)
    resolved = catalog.resolve_product(db, product_id, admin, allow_archived=True)
    return catalog.to_summary(resolved)


# Users


@router.get("/users", response_model=Page[AdminUser])
async def get_users(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    search: str | None = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return admin_service.get_users(db, search=search, page=page, page_size=page_size)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    user_id: int,
    update: RoleUpdate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.set_user_role(db, user_id, update.role, admin)


@router.put("/users/{user_id}/trusted", response_model=UserResponse)
async def set_trusted_contributor(
    user_id: int,
    update: TrustedUpdate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Grant or revoke trusted contributor status."""
    return admin_service.set_trusted_contributor(db, user_id, update.trusted, admin)


# Stores


@router.get("/stores", response_model=Page[StoreWithChainResponse])
async def get_stores(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
    search: str | None = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    return admin_service.get_stores(db, search=search, page=page, page_size=page_size)


@router.get("/stores/pending", response_model=list[StoreResponse])
async def get_pending_stores(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.get_pending_stores(db)


@router.post("/stores/{store_id}/approve", response_model=StoreResponse)
async def approve_store(
    store_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.approve_store(db, store_id)


@router.post("/stores/{store_id}/reject", response_model=StoreResponse)
async def reject_store(
    store_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.reject_store(db, store_id)


@router.delete("/stores/{store_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_store(
    store_id: int,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a store together with its availability rows."""
    admin_service.delete_store(db, store_id)


# Availability


@router.get("/availability/pending", response_model=list[PendingAvailability])
async def get_pending_availability(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.get_pending_availability(db)


@router.post("/availability/{availability_id}/approve", response_model=PendingAvailability)
async def approve_availability(
    availability_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.approve_availability(db, availability_id, moderator)


@router.post("/availability/{availability_id}/reject", response_model=PendingAvailability)
async def reject_availability(
    availability_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return admin_service.reject_availability(db, availability_id, moderator)


# Reviews


@router.get("/reviews/pending", response_model=Page[ReviewResponse])
async def get_pending_reviews(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return review_service.get_pending_reviews(db, page=page, page_size=page_size)


@router.post("/reviews/{review_id}/approve", response_model=ReviewResponse)
async def approve_review(
    review_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    review = review_service.approve_review(db, review_id, moderator.id)
    return review_service.serialize_review(review)


@router.post("/reviews/{review_id}/reject", response_model=ReviewResponse)
async def reject_review(
    review_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    review = review_service.reject_review(db, review_id, moderator.id)
    return review_service.serialize_review(review)


# Trusted review queue


@router.get("/trusted-review", response_model=TrustedReviewQueue)
async def get_trusted_review_queue(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    """Trusted contributions that went live without a review."""
    return admin_service.get_trusted_review_queue(db)


@router.post("/trusted-review/{content_type}/{item_id}/reviewed", response_model=MessageResponse)
async def mark_trusted_reviewed(
    content_type: str,
    item_id: str,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    admin_service.mark_trusted_reviewed(db, content_type, item_id, moderator)
    return MessageResponse(message="Marked as reviewed")


@router.post("/trusted-review/{content_type}/{item_id}/reject", response_model=MessageResponse)
async def reject_trusted_content(
    content_type: str,
    item_id: str,
    rejection: RejectionRequest,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    admin_service.reject_trusted_content(db, content_type, item_id, moderator, rejection.reason)
    return MessageResponse(message="Content rejected")


# Brand and city page edits


@router.get("/content-edits/brand", response_model=list[BrandContentEditResponse])
async def get_pending_brand_edits(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return content_edits.list_pending_edits(db, "brand")


@router.get("/content-edits/city", response_model=list[CityContentEditResponse])
async def get_pending_city_edits(
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
):
    return content_edits.list_pending_edits(db, "city")


@router.post("/content-edits/{kind}/{edit_id}/approve", response_model=ContentEditResponse)
async def approve_content_edit(
    kind: Literal["brand", "city"],
    edit_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
    review: EditReview | None = None,
):
    """Apply a pending edit to its page."""
    edit = content_edits.get_edit(db, kind, edit_id)
    return content_edits.approve_edit(db, edit, moderator, review.note if review else None)


@router.post("/content-edits/{kind}/{edit_id}/reject", response_model=ContentEditResponse)
async def reject_content_edit(
    kind: Literal["brand", "city"],
    edit_id: int,
    moderator: Annotated[User, Depends(require_moderator)],
    db: Annotated[Session, Depends(get_db)],
    review: EditReview | None = None,
):
    """Reject an edit; one that already went live is rolled back."""
    edit = content_edits.get_edit(db, kind, edit_id)
    return content_edits.reject_edit(db, edit, moderator, review.note if review else None)


# City pages


@router.get("/cities", response_model=list[CityPageAdmin])
async def list_city_pages(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Every city page, published or not."""
    return city_service.list_city_pages(db, active_only=False)


@router.post("/cities", response_model=CityPageAdmin, status_code=status.HTTP_201_CREATED)
async def create_city_page(
    data: CityPageCreate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return city_service.create_city_page(db, data.model_dump())


@router.put("/cities/{slug}", response_model=CityPageAdmin)
async def update_city_page(
    slug: str,
    data: CityPageUpdate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return city_service.update_city_page(db, slug, data.model_dump(exclude_unset=True))


@router.delete("/cities/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_city_page(
    slug: str,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    city_service.delete_city_page(db, slug)


# Filters


@router.get("/filters", response_model=Page[FilterInfo])
async def list_filters(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    filter_type: FilterType = Query(..., alias="type"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
):
    """Every category or tag with its archived state and display name."""
    return taxonomy.admin_list_filters(db, filter_type, page=page, page_size=page_size)


@router.post("/filters/archive", response_model=MessageResponse)
async def archive_filter(
    request: FilterArchiveRequest,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    taxonomy.archive_filter(db, request.type, request.value, admin.id)
    return MessageResponse(message=f"Archived {request.type.value} '{request.value}'")


@router.post("/filters/unarchive", response_model=MessageResponse)
async def unarchive_filter(
    request: FilterArchiveRequest,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    if not taxonomy.unarchive_filter(db, request.type, request.value):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Filter is not archived")
    return MessageResponse(message=f"Restored {request.type.value} '{request.value}'")


@router.put("/filters/display-name", response_model=MessageResponse)
async def set_display_name(
    request: DisplayNameRequest,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    row = taxonomy.set_display_name(db, request.type, request.value, request.display_name, admin.id)
    return MessageResponse(message=f"Display name for '{row.value}' set to '{row.display_name}'")


@router.delete("/filters/display-name", status_code=status.HTTP_204_NO_CONTENT)
async def remove_display_name(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    filter_type: FilterType = Query(..., alias="type"),
    value: str = Query(..., min_length=1, max_length=255),
):
    if not taxonomy.remove_display_name(db, filter_type, value):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Display name not found")
