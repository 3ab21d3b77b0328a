"""Product catalog API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user, get_optional_user
from vegan_aisle.database import get_db
from vegan_aisle.models.enums import FilterType, StockStatus
from vegan_aisle.models.user import User
from vegan_aisle.schemas.availability import (
    AvailabilityResponse,
    StockReportCreate,
    StockReportResponse,
)
from vegan_aisle.schemas.product import (
    FilterValue,
    ProductAvailabilityCreate,
    ProductDetail,
    ProductSearchResponse,
    ProductSummary,
)
from vegan_aisle.services import catalog, taxonomy
from vegan_aisle.services.availability import (
    ChainSelection,
    StoreSelection,
    get_product_availability,
    report_stock_status,
    save_product_availability,
)
from vegan_aisle.services.reviews import get_rating_stats
from vegan_aisle.services.trust import is_admin

router = APIRouter(prefix="/api/products", tags=["products"])


def _resolve_or_404(db: Session, product_id: str, viewer: User | None) -> catalog.ResolvedProduct:
    resolved = catalog.resolve_product(db, product_id, viewer, allow_archived=is_admin(viewer))
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return resolved


@router.get("/categories", response_model=list[FilterValue])
async def list_categories(db: Annotated[Session, Depends(get_db)]):
    """Categories shoppers can filter by."""
    return taxonomy.list_filters(db, FilterType.CATEGORY)


@router.get("/tags", response_model=list[FilterValue])
async def list_tags(db: Annotated[Session, Depends(get_db)]):
    """Tags shoppers can filter by."""
    return taxonomy.list_filters(db, FilterType.TAG)


@router.get("/featured", response_model=list[ProductSummary])
async def list_featured(
    db: Annotated[Session, Depends(get_db)],
    limit: int = Query(12, ge=1, le=50),
):
    return catalog.list_featured_products(db, limit=limit)


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    db: Annotated[Session, Depends(get_db)],
    q: str | None = Query(None, max_length=200),
    category: str | None = None,
    tag: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Search the catalog by name or brand, category and tag."""
    return catalog.search_products(
        db, q=q, category=category, tag=tag, page=page, page_size=page_size
    )


@router.get("/{product_id}", response_model=ProductDetail)
async def get_product(
    product_id: str,
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
):
    """Get a product with its availability and rating stats."""
    resolved = _resolve_or_404(db, product_id, viewer)
    detail = catalog.to_detail(db, resolved, viewer)
    detail["rating_stats"] = get_rating_stats(db, product_id)
    return detail


@router.get("/{product_id}/availability", response_model=list[AvailabilityResponse])
async def get_availability(
    product_id: str,
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
):
    _resolve_or_404(db, product_id, viewer)
    return get_product_availability(db, product_id, viewer)


@router.post(
    "/{product_id}/availability",
    response_model=list[AvailabilityResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_availability(
    product_id: str,
    data: ProductAvailabilityCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Report stores (or whole chains) that sell a product."""
    _resolve_or_404(db, product_id, current_user)
    save_product_availability(
        db,
        product_id,
        current_user,
        [StoreSelection(**s.model_dump()) for s in data.store_availabilities],
        [ChainSelection(**c.model_dump()) for c in data.chain_availabilities],
    )
    return get_product_availability(db, product_id, current_user)


@router.post("/{product_id}/stock-report", response_model=StockReportResponse)
async def report_stock(
    product_id: str,
    report: StockReportCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Report whether a product was on the shelf at a store."""
    row = report_stock_status(
        db, product_id, report.store_id, current_user, StockStatus(report.status), report.notes
    )
    return StockReportResponse(
        product_id=row.product_id,
        store_id=row.store_id,
        stock_status=row.stock_status,
        last_stock_report_at=row.last_stock_report_at,
        recent_in_stock_count=row.recent_in_stock_count,
        recent_out_of_stock_count=row.recent_out_of_stock_count,
    )
