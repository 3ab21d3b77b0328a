"""Administration and moderation operations."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from vegan_aisle.errors import BadRequestError, NotFoundError
from vegan_aisle.models.availability import Availability
from vegan_aisle.models.brand import BrandContentEdit
from vegan_aisle.models.city import CityContentEdit
from vegan_aisle.models.enums import (
    AvailabilitySource,
    ModerationStatus,
    ProductStatus,
    StoreType,
    UserRole,
)
from vegan_aisle.models.mixins import as_utc
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.review import Review
from vegan_aisle.models.store import Store
from vegan_aisle.models.user import User
from vegan_aisle.services import content_edits
from vegan_aisle.services import stores as store_service
from vegan_aisle.services.catalog import SOURCE_CURATED, SOURCE_USER_CONTRIBUTION
from vegan_aisle.services.user_products import (
    approve_user_product,
    get_source_product,
    get_user_product,
    reject_user_product,
)

logger = logging.getLogger(__name__)

TRUSTED_QUEUE_LIMIT = 100
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _page(query, page: int, page_size: int, order_by) -> tuple[list, int]:
    total = query.count()
    items = query.order_by(*order_by).offset((page - 1) * page_size).limit(page_size).all()
    return items, total


def get_dashboard_stats(db: Session) -> dict:
    """Counters for the moderation dashboard."""
    week_ago = datetime.now(UTC) - timedelta(days=7)

    def count(model, *criteria) -> int:
        return db.query(func.count(model.id)).filter(*criteria).scalar() or 0

    curated = count(Product)
    user_products = count(UserProduct)
    users_by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())

    return {
        "products": {
            "total": curated + user_products,
            "curated": curated,
            "user_contributed": user_products,
            "pending_approval": count(UserProduct, UserProduct.status == ProductStatus.PENDING.value),
            "trusted_pending_review": count(
                UserProduct,
                UserProduct.trusted_contribution.is_(True),
                UserProduct.needs_review.is_(True),
            ),
        },
        "stores": {
            "total": count(Store),
            "physical": count(Store, Store.type == StoreType.BRICK_AND_MORTAR.value),
            "online": count(Store, Store.type == StoreType.ONLINE_RETAILER.value),
            "brand_direct": count(Store, Store.type == StoreType.BRAND_DIRECT.value),
            "pending_approval": count(Store, Store.moderation_status == ModerationStatus.PENDING.value),
            "trusted_pending_review": count(
                Store, Store.trusted_contribution.is_(True), Store.needs_review.is_(True)
            ),
        },
        "users": {
            "total": sum(users_by_role.values()),
            "admins": users_by_role.get(UserRole.ADMIN.value, 0),
            "moderators": users_by_role.get(UserRole.MODERATOR.value, 0),
            "regular_users": users_by_role.get(UserRole.USER.value, 0),
            "trusted_contributors": count(User, User.trusted_contributor.is_(True)),
        },
        "availability": {
            "total": count(Availability),
            "user_contributed": count(
                Availability, Availability.source == AvailabilitySource.USER_CONTRIBUTION.value
            ),
            "pending_approval": count(
                Availability, Availability.moderation_status == ModerationStatus.PENDING.value
            ),
            "trusted_pending_review": count(
                Availability,
                Availability.trusted_contribution.is_(True),
                Availability.needs_review.is_(True),
            ),
        },
        "reviews": {
            "pending_approval": count(Review, Review.status == ProductStatus.PENDING.value),
        },
        "recent_activity": {
            "new_products_this_week": count(UserProduct, UserProduct.created_at >= week_ago)
            + count(Product, Product.created_at >= week_ago),
            "new_users_this_week": count(User, User.created_at >= week_ago),
            "new_stores_this_week": count(Store, Store.created_at >= week_ago),
        },
    }


# Products


def _original_product(db: Session, source_id: str) -> dict | None:
    source = get_source_product(db, source_id)
    if source is None:
        return None
    return {
        "id": source.id,
        "name": source.name,
        "brand": source.brand,
        "description": source.description,
        "size_or_variant": source.size_or_variant,
        "categories": list(source.categories or []),
        "tags": list(source.tags or []),
        "image_url": source.image_url,
    }


def serialize_pending_product(db: Session, product: UserProduct) -> dict:
    data = {c.name: getattr(product, c.name) for c in UserProduct.__table__.columns}
    data["user_email"] = product.user.email if product.user else None
    data["user_display_name"] = product.user.display_name if product.user else None
    data["is_edit_suggestion"] = product.is_edit
    data["original_product"] = (
        _original_product(db, product.source_product_id) if product.is_edit else None
    )
    return data


def get_pending_products(db: Session, page: int = 1, page_size: int = 20) -> dict:
    """Contributions and edit suggestions awaiting moderation, oldest first."""
    query = (
        db.query(UserProduct)
        .options(joinedload(UserProduct.user))
        .filter(UserProduct.status == ProductStatus.PENDING.value)
    )
    items, total = _page(query, page, page_size, (UserProduct.created_at.asc(), UserProduct.id.asc()))
    return {
        "items": [serialize_pending_product(db, p) for p in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


def approve_product(db: Session, product_id: str, admin: User) -> UserProduct:
    product = get_user_product(db, product_id)
    if product.status == ProductStatus.APPROVED.value:
        raise BadRequestError("Product is already approved")
    return approve_user_product(db, product, admin.id)


def reject_product(db: Session, product_id: str, admin: User, reason: str | None = None) -> UserProduct:
    product = get_user_product(db, product_id)
    return reject_user_product(db, product, admin.id, reason)


def _find_catalog_row(db: Session, product_id: str) -> tuple[Product | UserProduct, str]:
    """User product first, then curated."""
    product = db.query(UserProduct).filter(UserProduct.id == product_id).first()
    if product is not None:
        return product, SOURCE_USER_CONTRIBUTION
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is not None:
        return product, SOURCE_CURATED
    raise NotFoundError("Product not found")


def archive_product(db: Session, product_id: str, admin: User) -> dict:
    product, source = _find_catalog_row(db, product_id)
    if product.archived:
        raise BadRequestError("Product is already archived")
    product.archive(admin.id)
    db.commit()
    logger.info(f"Admin {admin.id} archived {source} product {product_id}")
    return _archived_summary(product, source)


def unarchive_product(db: Session, product_id: str, admin: User) -> dict:
    product, source = _find_catalog_row(db, product_id)
    if not product.archived:
        raise BadRequestError("Product is not archived")
    product.unarchive()
    db.commit()
    logger.info(f"Admin {admin.id} restored {source} product {product_id}")
    return _archived_summary(product, source)


def _archived_summary(product: Product | UserProduct, source: str) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "source": source,
        "archived_at": product.archived_at,
        "archived_by": product.archived_by,
    }


def get_archived_products(db: Session, page: int = 1, page_size: int = 20) -> dict:
    """Archived products from both tables, most recently archived first."""
    rows = [
        _archived_summary(p, SOURCE_CURATED)
        for p in db.query(Product).filter(Product.archived.is_(True)).all()
    ]
    rows += [
        _archived_summary(p, SOURCE_USER_CONTRIBUTION)
        for p in db.query(UserProduct).filter(UserProduct.archived.is_(True)).all()
    ]
    rows.sort(key=lambda r: as_utc(r["archived_at"]) or EPOCH, reverse=True)
    start = (page - 1) * page_size
    return {
        "items": rows[start : start + page_size],
        "total": len(rows),
        "page": page,
        "page_size": page_size,
    }


def get_user_generated_products(
    db: Session, status: ProductStatus | None = None, page: int = 1, page_size: int = 20
) -> dict:
    query = db.query(UserProduct).options(joinedload(UserProduct.user))
    if status is not None:
        query = query.filter(UserProduct.status == status.value)
    items, total = _page(query, page, page_size, (UserProduct.created_at.desc(), UserProduct.id.desc()))
    return {
        "items": [serialize_pending_product(db, p) for p in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


def set_featured(db: Session, product_id: str, featured: bool, featured_order: int = 0) -> Product:
    """Feature or unfeature a curated product."""
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise NotFoundError("Product not found")
    if featured and product.archived:
        raise BadRequestError("Archived products cannot be featured")

    product.featured = featured
    product.featured_order = featured_order if featured else 0
    product.featured_at = datetime.now(UTC) if featured else None
    db.commit()
    db.refresh(product)
    return product


# Users


def get_users(db: Session, search: str | None = None, page: int = 1, page_size: int = 20) -> dict:
    """Users with how many products each contributed."""
    query = db.query(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(User.email.ilike(pattern) | User.display_name.ilike(pattern))
    users, total = _page(query, page, page_size, (User.created_at.desc(), User.id.desc()))

    counts = dict(
        db.query(UserProduct.user_id, func.count(UserProduct.id))
        .filter(UserProduct.user_id.in_([u.id for u in users]))
        .group_by(UserProduct.user_id)
        .all()
    )
    return {
        "items": [
            {
                "id": u.id,
                "email": u.email,
                "display_name": u.display_name,
                "role": u.role,
                "trusted_contributor": u.trusted_contributor,
                "trusted_at": u.trusted_at,
                "created_at": u.created_at,
                "last_login": u.last_login,
                "products_contributed": counts.get(u.id, 0),
            }
            for u in users
        ],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def set_user_role(db: Session, user_id: int, role: UserRole, admin: User) -> User:
    if user_id == admin.id and role != UserRole.ADMIN:
        raise BadRequestError("You cannot remove your own admin role")
    user = _get_user(db, user_id)
    user.role = role.value
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} set role of user {user_id} to {role.value}")
    return user


def set_trusted_contributor(db: Session, user_id: int, trusted: bool, admin: User) -> User:
    user = _get_user(db, user_id)
    user.trusted_contributor = trusted
    user.trusted_at = datetime.now(UTC) if trusted else None
    user.trusted_by = admin.id if trusted else None
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} set trusted={trusted} for user {user_id}")
    return user


# Stores


def get_stores(db: Session, search: str | None = None, page: int = 1, page_size: int = 50) -> dict:
    query = db.query(Store).options(joinedload(Store.chain))
    if search:
        query = query.filter(Store.name.ilike(f"%{search.strip()}%"))
    items, total = _page(query, page, page_size, (Store.name.asc(), Store.id.asc()))
    return {
        "items": [store_service.with_chain_info(s) for s in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


def get_pending_stores(db: Session) -> list[Store]:
    return (
        db.query(Store)
        .filter(Store.moderation_status == ModerationStatus.PENDING.value)
        .order_by(Store.created_at.asc(), Store.id.asc())
        .all()
    )


def _moderate_store(db: Session, store_id: int, status: ModerationStatus) -> Store:
    store = store_service.get_store(db, store_id)
    store.moderation_status = status.value
    store.needs_review = False
    db.commit()
    db.refresh(store)
    logger.info(f"Store {store_id} moderated to {status.value}")
    return store


def approve_store(db: Session, store_id: int) -> Store:
    return _moderate_store(db, store_id, ModerationStatus.CONFIRMED)


def reject_store(db: Session, store_id: int) -> Store:
    return _moderate_store(db, store_id, ModerationStatus.REJECTED)


def delete_store(db: Session, store_id: int) -> None:
    store_service.delete_store(db, store_id)


# Availability


def get_pending_availability(db: Session) -> list[Availability]:
    return (
        db.query(Availability)
        .filter(Availability.moderation_status == ModerationStatus.PENDING.value)
        .order_by(Availability.created_at.asc(), Availability.id.asc())
        .all()
    )


def _get_availability(db: Session, availability_id: int) -> Availability:
    row = db.query(Availability).filter(Availability.id == availability_id).first()
    if row is None:
        raise NotFoundError("Availability not found")
    return row


def _moderate_availability(
    db: Session, availability_id: int, status: ModerationStatus, admin: User
) -> Availability:
    row = _get_availability(db, availability_id)
    row.moderation_status = status.value
    row.needs_review = False
    row.reviewed_by = admin.id
    row.reviewed_at = datetime.now(UTC)
    db.commit()
    db.refresh(row)
    logger.info(f"Admin {admin.id} moderated availability {availability_id} to {status.value}")
    return row


def approve_availability(db: Session, availability_id: int, admin: User) -> Availability:
    return _moderate_availability(db, availability_id, ModerationStatus.CONFIRMED, admin)


def reject_availability(db: Session, availability_id: int, admin: User) -> Availability:
    return _moderate_availability(db, availability_id, ModerationStatus.REJECTED, admin)


# Trusted review queue


def get_trusted_review_queue(db: Session) -> dict:
    """Trusted contributions that went live but have not been looked at."""

    def needing_review(model):
        return (
            db.query(model)
            .filter(model.trusted_contribution.is_(True), model.needs_review.is_(True))
            .order_by(model.created_at.desc(), model.id.desc())
            .limit(TRUSTED_QUEUE_LIMIT)
            .all()
        )

    return {
        "products": needing_review(UserProduct),
        "stores": needing_review(Store),
        "availability": needing_review(Availability),
        "brand_edits": needing_review(BrandContentEdit),
        "city_edits": needing_review(CityContentEdit),
    }


TRUSTED_CONTENT = {
    "product": UserProduct,
    "store": Store,
    "availability": Availability,
    "brand_edit": BrandContentEdit,
    "city_edit": CityContentEdit,
}


def _trusted_item(db: Session, content_type: str, item_id: str):
    model = TRUSTED_CONTENT.get(content_type)
    if model is None:
        raise BadRequestError(f"Unknown content type: {content_type}")
    key = item_id if model is UserProduct else _int_id(item_id)
    item = db.query(model).filter(model.id == key).first()
    if item is None:
        raise NotFoundError(f"{content_type.replace('_', ' ').capitalize()} not found")
    return item


def _int_id(item_id: str) -> int:
    try:
        return int(item_id)
    except ValueError:
        raise NotFoundError("Item not found") from None


def mark_trusted_reviewed(db: Session, content_type: str, item_id: str, admin: User) -> None:
    item = _trusted_item(db, content_type, item_id)
    item.needs_review = False
    if hasattr(item, "reviewed_by"):
        item.reviewed_by = admin.id
        item.reviewed_at = datetime.now(UTC)
    db.commit()
    logger.info(f"Admin {admin.id} reviewed trusted {content_type} {item_id}")


def reject_trusted_content(
    db: Session, content_type: str, item_id: str, admin: User, reason: str | None = None
) -> None:
    item = _trusted_item(db, content_type, item_id)
    if isinstance(item, UserProduct):
        reject_user_product(db, item, admin.id, reason)
        return
    if isinstance(item, (BrandContentEdit, CityContentEdit)):
        content_edits.reject_edit(db, item, admin, reason)
        return
    item.moderation_status = ModerationStatus.REJECTED.value
    item.needs_review = False
    db.commit()
    logger.info(f"Admin {admin.id} rejected trusted {content_type} {item_id}")
