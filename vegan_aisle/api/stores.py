"""Store, chain and Google Places endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user, get_optional_user, require_admin
from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.schemas.availability import (
    ChainAssignment,
    ChainCreate,
    ChainLocationsResponse,
    ChainResponse,
    ChainUpdate,
    GroupedStoresResponse,
    PlaceDetails,
    PlacePrediction,
    StoreCreate,
    StoreCreateResponse,
    StoreWithChainResponse,
)
from vegan_aisle.services import chains as chain_service
from vegan_aisle.services import stores as store_service
from vegan_aisle.services.google_places import GooglePlacesService, get_google_places_service

router = APIRouter(prefix="/api/stores", tags=["stores"])


def _get_chain_or_404(db: Session, chain_id: int):
    chain = chain_service.get_chain(db, chain_id)
    if chain is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chain not found")
    return chain


@router.get("", response_model=list[StoreWithChainResponse])
async def list_stores(
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
    q: str | None = Query(None, max_length=200),
):
    """List stores, or search them by name."""
    if q and q.strip():
        stores = store_service.search_stores(db, q, viewer)
    else:
        stores = store_service.list_stores(db, viewer)
    return [store_service.with_chain_info(s) for s in stores]


@router.get("/grouped", response_model=GroupedStoresResponse)
async def list_stores_grouped(
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
):
    return store_service.group_stores_by_chain(db, viewer)


# Chains


@router.get("/chains", response_model=list[ChainResponse])
async def list_chains(
    db: Annotated[Session, Depends(get_db)],
    q: str | None = Query(None, max_length=200),
):
    if q and q.strip():
        return chain_service.search_chains(db, q.strip())
    return chain_service.list_chains(db)


@router.post("/chains", response_model=ChainResponse, status_code=status.HTTP_201_CREATED)
async def create_chain(
    data: ChainCreate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return chain_service.create_chain(db, data.model_dump(mode="json"))


@router.post("/chains/assign")
async def assign_stores(
    assignment: ChainAssignment,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Move stores into a chain, or out of any chain."""
    updated = chain_service.assign_stores_to_chain(db, assignment.store_ids, assignment.chain_id)
    return {"updated": updated}


@router.get("/chains/slug/{slug}", response_model=ChainResponse)
async def get_chain_by_slug(
    slug: str,
    db: Annotated[Session, Depends(get_db)],
):
    chain = chain_service.get_chain_by_slug(db, slug)
    if chain is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chain not found")
    return chain


@router.get("/chains/{chain_id}", response_model=ChainResponse)
async def get_chain(
    chain_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    return _get_chain_or_404(db, chain_id)


@router.put("/chains/{chain_id}", response_model=ChainResponse)
async def update_chain(
    chain_id: int,
    data: ChainUpdate,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    return chain_service.update_chain(db, chain_id, data.model_dump(mode="json", exclude_unset=True))


@router.delete("/chains/{chain_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chain(
    chain_id: int,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    chain_service.delete_chain(db, chain_id)


@router.get("/chains/{chain_id}/locations", response_model=ChainLocationsResponse)
async def get_chain_locations(
    chain_id: int,
    db: Annotated[Session, Depends(get_db)],
    city: str | None = None,
    state: str | None = None,
):
    """A chain's confirmed stores, optionally in one city or state."""
    chain = _get_chain_or_404(db, chain_id)
    stores = chain_service.get_chain_stores(db, chain_id, city=city, state=state)
    return {
        "chain": chain,
        "stores": stores,
        "total_count": len(stores),
        "related_chains": chain_service.get_related_chain_names(db, chain_id),
    }


# Google Places. These must stay above /{store_id}.


@router.get("/places/autocomplete", response_model=list[PlacePrediction])
async def autocomplete_places(
    places: Annotated[GooglePlacesService, Depends(get_google_places_service)],
    input: str = Query(..., max_length=200),
    types: str | None = None,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: int | None = Query(None, gt=0),
):
    if len(input.strip()) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Input query must be at least 2 characters",
        )
    location = (lat, lng) if lat is not None and lng is not None else None
    return await places.autocomplete(
        input.strip(),
        types=types.split(",") if types else None,
        location=location,
        radius=radius,
    )


@router.get("/places/details/{place_id}", response_model=PlaceDetails)
async def get_place_details(
    place_id: str,
    places: Annotated[GooglePlacesService, Depends(get_google_places_service)],
):
    details = await places.place_details(place_id)
    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Place not found or API error"
        )
    return details


# Stores


@router.post("", response_model=StoreCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    data: StoreCreate,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Add a store. Likely duplicates are returned instead of created."""
    store, duplicates = store_service.create_store(db, current_user, data.model_dump(mode="json"))
    if store is not None:
        return StoreCreateResponse(store=store)

    response.status_code = status.HTTP_200_OK
    if duplicates.exact_match is not None:
        return StoreCreateResponse(
            store=duplicates.exact_match,
            is_duplicate=True,
            duplicate_type="exact",
            message="An identical store already exists",
        )
    return StoreCreateResponse(
        is_duplicate=True,
        duplicate_type="similar",
        similar_stores=duplicates.similar,
        message="Similar stores found. Please review before creating.",
    )


@router.get("/{store_id}", response_model=StoreWithChainResponse)
async def get_store(
    store_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    return store_service.with_chain_info(store_service.get_store(db, store_id))
