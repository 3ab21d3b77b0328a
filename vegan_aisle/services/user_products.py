"""User contributions: new products and edit suggestions."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from vegan_aisle.errors import NotFoundError, PermissionDeniedError
from vegan_aisle.models.enums import ProductStatus
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.user import User
from vegan_aisle.services.availability import (
    ChainSelection,
    StoreSelection,
    delete_product_availability,
    save_product_availability,
)
from vegan_aisle.services.catalog import resolve_product
from vegan_aisle.services.trust import is_admin, product_status_for, trust_level_for

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "name",
    "brand",
    "description",
    "size_or_variant",
    "categories",
    "tags",
    "is_strict_vegan",
    "image_url",
    "nutrition_summary",
    "ingredient_summary",
)


def _selections(data: dict) -> tuple[list[StoreSelection], list[ChainSelection]]:
    stores = [StoreSelection(**s) for s in data.get("store_availabilities") or []]
    chains = [ChainSelection(**c) for c in data.get("chain_availabilities") or []]
    return stores, chains


def _product_fields(data: dict) -> dict:
    fields = {key: data[key] for key in PRODUCT_FIELDS if key in data}
    fields.setdefault("size_or_variant", "Standard")
    if not fields.get("size_or_variant"):
        fields["size_or_variant"] = "Standard"
    if fields.get("tags") is None:
        fields["tags"] = ["vegan"]
    fields.setdefault("categories", [])
    return fields


def get_user_product(db: Session, product_id: str) -> UserProduct:
    product = db.query(UserProduct).filter(UserProduct.id == product_id).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _get_owned(db: Session, user: User, product_id: str) -> UserProduct:
    product = get_user_product(db, product_id)
    if product.user_id != user.id and not is_admin(user):
        raise PermissionDeniedError("You can only change your own products")
    return product


def create_user_product(db: Session, user: User, data: dict) -> UserProduct:
    """Contribute a product; trusted contributors publish immediately."""
    trust = trust_level_for(user)
    now = datetime.now(UTC)

    product = UserProduct(
        **_product_fields(data),
        user_id=user.id,
        status=product_status_for(trust),
        trusted_contribution=trust.is_trusted,
        needs_review=trust.needs_review,
        reviewed_at=now if trust.is_trusted else None,
    )
    db.add(product)
    db.flush()

    stores, chains = _selections(data)
    if stores or chains:
        save_product_availability(db, product.id, user, stores, chains, commit=False)

    db.commit()
    db.refresh(product)
    logger.info(f"User {user.id} contributed product {product.id} ({product.status})")
    return product


def approve_user_product(db: Session, product: UserProduct, reviewer_id: int | None) -> UserProduct:
    """Publish a contribution.

    An edit of another contribution is copied onto that contribution and the
    edit row is removed. An edit of a curated product becomes its overlay and
    older approved overlays of the same product are retired. Anything else is
    simply approved. Returns the row that now carries the change.
    """
    now = datetime.now(UTC)

    if product.source_product_id is not None:
        source = (
            db.query(UserProduct).filter(UserProduct.id == product.source_product_id).first()
        )
        if source is not None:
            for field in PRODUCT_FIELDS:
                setattr(source, field, getattr(product, field))
            source.reviewed_by = reviewer_id
            source.reviewed_at = now
            edit_id = product.id
            db.delete(product)
            db.commit()
            db.refresh(source)
            logger.info(f"Applied edit {edit_id} to user product {source.id}")
            return source

        db.query(UserProduct).filter(
            UserProduct.source_product_id == product.source_product_id,
            UserProduct.status == ProductStatus.APPROVED.value,
            UserProduct.id != product.id,
        ).delete(synchronize_session=False)

    product.status = ProductStatus.APPROVED.value
    product.reviewed_by = reviewer_id
    product.reviewed_at = now
    product.rejection_reason = None
    product.rejected_at = None
    db.commit()
    db.refresh(product)
    logger.info(f"Approved user product {product.id}")
    return product


def reject_user_product(
    db: Session, product: UserProduct, reviewer_id: int | None, reason: str | None = None
) -> UserProduct:
    now = datetime.now(UTC)
    product.status = ProductStatus.REJECTED.value
    product.rejection_reason = reason
    product.rejected_at = now
    product.reviewed_by = reviewer_id
    product.reviewed_at = now
    product.needs_review = False
    db.commit()
    db.refresh(product)
    logger.info(f"Rejected user product {product.id}")
    return product


def suggest_edit(db: Session, user: User, data: dict) -> UserProduct:
    """Suggest changes to a catalog product.

    Trusted users' edits go live at once through the same path as admin
    approval; other edits wait for moderation.
    """
    source_id = data["source_product_id"]
    if resolve_product(db, source_id, viewer=user) is None:
        raise NotFoundError("Product not found")

    trust = trust_level_for(user)
    edit = UserProduct(
        **_product_fields(data),
        user_id=user.id,
        source_product_id=source_id,
        status=ProductStatus.PENDING.value,
        trusted_contribution=trust.is_trusted,
        needs_review=trust.needs_review,
    )
    db.add(edit)
    db.commit()
    db.refresh(edit)
    logger.info(f"User {user.id} suggested edit {edit.id} for product {source_id}")

    if trust.is_trusted:
        return approve_user_product(db, edit, user.id)
    return edit


def update_user_product(db: Session, user: User, product_id: str, updates: dict) -> UserProduct:
    """Change a contribution. Owner or admin only.

    A non-trusted owner editing a published product sends it back to the
    pending queue.
    """
    product = _get_owned(db, user, product_id)
    trust = trust_level_for(user)

    for field in PRODUCT_FIELDS:
        if field in updates and updates[field] is not None:
            setattr(product, field, updates[field])

    if not trust.is_trusted and product.status == ProductStatus.APPROVED.value:
        product.status = ProductStatus.PENDING.value
        product.needs_review = True

    if updates.get("store_availabilities") is not None or updates.get("chain_availabilities") is not None:
        stores, chains = _selections(updates)
        save_product_availability(db, product.id, user, stores, chains, commit=False)

    db.commit()
    db.refresh(product)
    return product


def delete_user_product(db: Session, user: User, product_id: str) -> None:
    """Delete a contribution and its availability. Owner or admin only."""
    product = _get_owned(db, user, product_id)
    if product.source_product_id is None:
        delete_product_availability(db, product_id)
    db.delete(product)
    db.commit()
    logger.info(f"User {user.id} deleted user product {product_id}")


def list_my_products(db: Session, user: User) -> list[UserProduct]:
    """Everything the user contributed, newest first."""
    return (
        db.query(UserProduct)
        .filter(UserProduct.user_id == user.id)
        .order_by(UserProduct.created_at.desc())
        .all()
    )


def get_source_product(db: Session, source_id: str) -> Product | UserProduct | None:
    """The product an edit suggestion targets."""
    product = db.query(Product).filter(Product.id == source_id).first()
    if product is not None:
        return product
    return db.query(UserProduct).filter(UserProduct.id == source_id).first()
