"""Brand page endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vegan_aisle.api.dependencies import get_current_user
from vegan_aisle.database import get_db
from vegan_aisle.models.user import User
from vegan_aisle.schemas.pages import (
    BrandEditCreate,
    BrandPageResponse,
    EditSubmitted,
    EditSummary,
)
from vegan_aisle.services import brands as brand_service

router = APIRouter(prefix="/api/brands", tags=["brands"])


@router.get("/{brand_name}/page", response_model=BrandPageResponse)
async def get_brand_page(
    brand_name: str,
    db: Annotated[Session, Depends(get_db)],
):
    """Brand page by slug or brand name."""
    return brand_service.get_brand_page(db, brand_name)


@router.post(
    "/{brand_name}/suggest-edit",
    response_model=EditSubmitted,
    status_code=status.HTTP_201_CREATED,
)
async def suggest_brand_edit(
    brand_name: str,
    data: BrandEditCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Suggest new brand page text. Trusted users' edits apply immediately."""
    outcome = brand_service.suggest_brand_edit(
        db, brand_name, current_user, data.field, data.suggested_value, data.reason
    )
    return EditSubmitted(
        message=outcome.message,
        edit=EditSummary.model_validate(outcome.edit),
        auto_applied=outcome.auto_applied,
    )
