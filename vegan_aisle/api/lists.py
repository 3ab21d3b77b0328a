"""Shopping list API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user
from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.schemas.shopping_list import (
    ListItemCreate,
    ListItemUpdate,
    ShoppingListCreate,
    ShoppingListDetail,
    ShoppingListResponse,
)
from vegan_aisle.services.shopping_lists import ShoppingListService

router = APIRouter(prefix="/api/lists", tags=["lists"])


def get_list_service(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ShoppingListService:
    """Get shopping list service for the current user."""
    return ShoppingListService(db, current_user)


@router.get("", response_model=list[ShoppingListResponse])
async def get_lists(service: Annotated[ShoppingListService, Depends(get_list_service)]):
    """Get the current user's lists, newest first."""
    return service.get_lists()


@router.post("", response_model=ShoppingListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    list_data: ShoppingListCreate,
    service: Annotated[ShoppingListService, Depends(get_list_service)],
):
    return service.create_list(list_data.name)


@router.get("/default", response_model=ShoppingListDetail)
async def get_default_list(service: Annotated[ShoppingListService, Depends(get_list_service)]):
    """Get the user's default list, creating it on first use."""
    default = service.get_or_create_default_list()
    return service.get_list(default.id)


@router.get("/{list_id}", response_model=ShoppingListDetail)
async def get_list(
    list_id: int,
    service: Annotated[ShoppingListService, Depends(get_list_service)],
):
    """Get a list with its products and where to buy them."""
    return service.get_list(list_id)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    list_id: int,
    service: Annotated[ShoppingListService, Depends(get_list_service)],
):
    service.delete_list(list_id)


@router.post("/{list_id}/items", response_model=ShoppingListDetail, status_code=status.HTTP_201_CREATED)
async def add_item(
    list_id: int,
    item: ListItemCreate,
    service: Annotated[ShoppingListService, Depends(get_list_service)],
):
    """Add a product to a list. Adding it again increases the quantity."""
    service.add_item(list_id, item.product_id, item.quantity, item.note)
    return service.get_list(list_id)


@router.put("/{list_id}/items/{item_id}", response_model=ShoppingListDetail)
async def update_item(
    list_id: int,
    item_id: int,
    item: ListItemUpdate,
    service: Annotated[ShoppingListService, Depends(get_list_service)],
):
    service.update_item(list_id, item_id, item.model_dump(exclude_unset=True))
    return service.get_list(list_id)


@router.delete("/{list_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(
    list_id: int,
    item_id: int,
    service: Annotated[ShoppingListService, Depends(get_list_service)],
):
    service.remove_item(list_id, item_id)
