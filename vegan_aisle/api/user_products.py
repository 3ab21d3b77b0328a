"""User-contributed product endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user
from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.schemas.product import (
    EditSuggestionCreate,
    UserProductCreate,
    UserProductResponse,
    UserProductUpdate,
)
from vegan_aisle.services import user_products as user_product_service
from vegan_aisle.services.trust import can_moderate

router = APIRouter(prefix="/api/user-products", tags=["user-products"])


@router.post("", response_model=UserProductResponse, status_code=status.HTTP_201_CREATED)
async def create_user_product(
    data: UserProductCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Contribute a product. Trusted contributors publish immediately."""
    return user_product_service.create_user_product(db, current_user, data.model_dump())


@router.get("", response_model=list[UserProductResponse])
async def list_my_products(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Everything the current user contributed."""
    return user_product_service.list_my_products(db, current_user)


@router.post(
    "/edit-api-product", response_model=UserProductResponse, status_code=status.HTTP_201_CREATED
)
async def suggest_edit(
    data: EditSuggestionCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Suggest changes to an existing catalog product."""
    return user_product_service.suggest_edit(db, current_user, data.model_dump())


@router.get("/{product_id}", response_model=UserProductResponse)
async def get_user_product(
    product_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    product = user_product_service.get_user_product(db, product_id)
    if product.user_id != current_user.id and not can_moderate(current_user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.put("/{product_id}", response_model=UserProductResponse)
async def update_user_product(
    product_id: str,
    data: UserProductUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    return user_product_service.update_user_product(
        db, current_user, product_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_product(
    product_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    user_product_service.delete_user_product(db, current_user, product_id)
