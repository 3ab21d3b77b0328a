"""City landing page endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user
from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.schemas.pages import (
    CityEditCreate,
    CityPageResponse,
    CityProductsPage,
    CityStoresGrouped,
    CityStoresResponse,
    EditSubmitted,
    EditSummary,
    GeocodeResponse,
    StoreProductsResponse,
)
from vegan_aisle.services import cities as city_service
from vegan_aisle.services.google_places import GooglePlacesService, get_google_places_service

router = APIRouter(prefix="/api/cities", tags=["cities"])


@router.get("/geocode", response_model=GeocodeResponse)
async def reverse_geocode(
    places: Annotated[GooglePlacesService, Depends(get_google_places_service)],
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
):
    """City and state for the shopper's coordinates."""
    if not places.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google API key not configured",
        )
    result = await places.reverse_geocode(lat, lng)
    if result is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Geocoding request failed")
    return result


@router.get("", response_model=dict[str, list[CityPageResponse]])
async def list_cities(db: Annotated[Session, Depends(get_db)]):
    """Published city pages by city name."""
    return {"cities": city_service.list_city_pages(db)}


@router.get("/{slug}", response_model=dict[str, CityPageResponse])
async def get_city(slug: str, db: Annotated[Session, Depends(get_db)]):
    return {"city": city_service.require_city_page(db, slug)}


@router.get("/{slug}/stores", response_model=CityStoresGrouped | CityStoresResponse)
async def get_city_stores(
    slug: str,
    db: Annotated[Session, Depends(get_db)],
    grouped: bool = False,
):
    """Physical stores in the city, flat or grouped by chain."""
    page = city_service.require_city_page(db, slug)
    stores = city_service.get_city_stores(db, page)
    if grouped:
        return city_service.group_city_stores(stores)
    return {"stores": stores}


@router.get("/{slug}/products", response_model=CityProductsPage)
async def get_city_products(
    slug: str,
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """Products confirmed at the city's stores."""
    city = city_service.require_city_page(db, slug)
    return city_service.get_city_products(db, city, page_number=page, limit=limit)


@router.get("/{slug}/stores/{store_id}/products", response_model=StoreProductsResponse)
async def get_store_products(
    slug: str,
    store_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    city = city_service.require_city_page(db, slug)
    return {"products": city_service.get_store_products(db, city, store_id)}


@router.post(
    "/{slug}/suggest-edit",
    response_model=EditSubmitted,
    status_code=status.HTTP_201_CREATED,
)
async def suggest_city_edit(
    slug: str,
    data: CityEditCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Suggest new city page text. Trusted users' edits apply immediately."""
    outcome = city_service.suggest_city_edit(
        db, slug, current_user, data.field, data.suggested_value, data.reason
    )
    return EditSubmitted(
        message=outcome.message,
        edit=EditSummary.model_validate(outcome.edit),
        auto_applied=outcome.auto_applied,
    )
