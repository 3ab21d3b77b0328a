"""Brand pages, matched to catalog products by brand name."""

import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from vegan_aisle.errors import NotFoundError
from vegan_aisle.models.brand import BrandContentEdit, BrandPage
from vegan_aisle.models.enums import BrandEditField, ProductStatus
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.user import User
from vegan_aisle.services.chains import slugify
from vegan_aisle.services.content_edits import EditOutcome, submit_edit

logger = logging.getLogger(__name__)


def find_brand_page(db: Session, brand_name: str) -> BrandPage | None:
    """Page whose slug or brand name (case-insensitive) matches."""
    name = brand_name.strip()
    return (
        db.query(BrandPage)
        .filter(or_(BrandPage.slug == slugify(name), func.lower(BrandPage.brand_name) == name.lower()))
        .first()
    )


def brand_has_products(db: Session, brand_name: str) -> bool:
    """Whether any visible product carries this brand."""
    name = brand_name.strip().lower()
    curated = (
        db.query(Product.id)
        .filter(func.lower(Product.brand) == name, Product.archived.is_(False))
        .first()
    )
    if curated is not None:
        return True
    contributed = (
        db.query(UserProduct.id)
        .filter(
            func.lower(UserProduct.brand) == name,
            UserProduct.status == ProductStatus.APPROVED.value,
            UserProduct.archived.is_(False),
        )
        .first()
    )
    return contributed is not None


def _serialize(page: BrandPage) -> dict:
    return {
        "id": page.id,
        "brand_name": page.brand_name,
        "slug": page.slug,
        "display_name": page.display_name,
        "description": page.description,
        "logo_url": page.logo_url,
        "website_url": page.website_url,
        "is_active": page.is_active,
        "exists": True,
    }


def get_brand_page(db: Session, brand_name: str) -> dict:
    """Saved page for a brand, or a placeholder built from its name.

    A brand with no saved page still has one as long as some visible
    product carries it.
    """
    page = find_brand_page(db, brand_name)
    if page is not None:
        return _serialize(page)

    name = brand_name.strip()
    if not brand_has_products(db, name):
        raise NotFoundError("Brand not found")
    return {
        "id": None,
        "brand_name": name,
        "slug": slugify(name),
        "display_name": name,
        "description": None,
        "logo_url": None,
        "website_url": None,
        "is_active": True,
        "exists": False,
    }


def suggest_brand_edit(
    db: Session,
    brand_name: str,
    user: User,
    field: BrandEditField,
    suggested_value: str,
    reason: str | None = None,
) -> EditOutcome:
    """Suggest new text for a brand page, creating the page on first edit."""
    page = find_brand_page(db, brand_name)
    if page is None:
        name = brand_name.strip()
        if not brand_has_products(db, name):
            raise NotFoundError("Brand not found")
        page = BrandPage(brand_name=name, slug=slugify(name), display_name=name, created_by=user.id)
        db.add(page)
        db.flush()
        logger.info(f"Created brand page {page.slug} for user {user.id}")

    edit = BrandContentEdit(brand_page_id=page.id, brand_name=page.brand_name, brand_slug=page.slug)
    return submit_edit(db, page, edit, user, field.value, suggested_value, reason)
