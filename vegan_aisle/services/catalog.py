"""Catalog resolution across curated products and user contributions.

A product id can name a curated ``Product`` or a standalone ``UserProduct``
(both use UUIDs, so ids never collide). Approved edit suggestions are stored
as ``UserProduct`` rows pointing at their source and replace the source's
fields wherever the source is shown.
"""

import logging
import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from vegan_aisle.models.enums import FilterType, ProductStatus
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.user import User
from vegan_aisle.services import taxonomy
from vegan_aisle.services.availability import get_product_availability
from vegan_aisle.services.trust import can_moderate

logger = logging.getLogger(__name__)

SOURCE_CURATED = "curated"
SOURCE_EDIT_OVERLAY = "edit_overlay"
SOURCE_USER_CONTRIBUTION = "user_contribution"


@dataclass
class ResolvedProduct:
    """What a product id currently shows.

    ``id`` is always the id that was looked up, even when the fields come
    from an edit overlay.
    """

    id: str
    record: Product | UserProduct
    source: str
    base: Product | UserProduct

    @property
    def status(self) -> str:
        if isinstance(self.record, UserProduct):
            return self.record.status
        return ProductStatus.APPROVED.value

    @property
    def featured(self) -> bool:
        return bool(getattr(self.base, "featured", False))


def _find_edit_overlay(
    db: Session, product_id: str, viewer: User | None, allow_archived: bool
) -> UserProduct | None:
    """The viewer's own pending edit, else the latest approved edit."""
    query = db.query(UserProduct).filter(UserProduct.source_product_id == product_id)
    if not allow_archived:
        query = query.filter(UserProduct.archived.is_(False))

    if viewer is not None:
        own = (
            query.filter(
                UserProduct.user_id == viewer.id,
                UserProduct.status == ProductStatus.PENDING.value,
            )
            .order_by(UserProduct.updated_at.desc(), UserProduct.created_at.desc())
            .first()
        )
        if own:
            return own

    return (
        query.filter(UserProduct.status == ProductStatus.APPROVED.value)
        .order_by(UserProduct.reviewed_at.desc().nulls_last(), UserProduct.updated_at.desc())
        .first()
    )


def _can_view_contribution(product: UserProduct, viewer: User | None) -> bool:
    if product.status == ProductStatus.APPROVED.value:
        return True
    if can_moderate(viewer):
        return True
    return (
        viewer is not None
        and product.user_id == viewer.id
        and product.status == ProductStatus.PENDING.value
    )


def resolve_product(
    db: Session, product_id: str, viewer: User | None = None, allow_archived: bool = False
) -> ResolvedProduct | None:
    """Look up what a product id shows to ``viewer``.

    Resolution order: an edit overlay of the id, the curated product, then a
    standalone contribution. Archived rows resolve only with
    ``allow_archived``.
    """
    base: Product | UserProduct | None = db.query(Product).filter(Product.id == product_id).first()
    source = SOURCE_CURATED

    if base is None:
        contribution = db.query(UserProduct).filter(UserProduct.id == product_id).first()
        if contribution is None or not _can_view_contribution(contribution, viewer):
            return None
        base = contribution
        source = SOURCE_USER_CONTRIBUTION

    if base.archived and not allow_archived:
        return None

    overlay = _find_edit_overlay(db, product_id, viewer, allow_archived)
    if overlay is not None:
        return ResolvedProduct(id=product_id, record=overlay, source=SOURCE_EDIT_OVERLAY, base=base)
    return ResolvedProduct(id=product_id, record=base, source=source, base=base)


def to_summary(resolved: ResolvedProduct) -> dict:
    record = resolved.record
    return {
        "id": resolved.id,
        "name": record.name,
        "brand": record.brand,
        "size_or_variant": record.size_or_variant,
        "categories": list(record.categories or []),
        "tags": list(record.tags or []),
        "is_strict_vegan": record.is_strict_vegan,
        "image_url": record.image_url,
        "source": resolved.source,
        "status": resolved.status,
        "featured": resolved.featured,
    }


def to_detail(db: Session, resolved: ResolvedProduct, viewer: User | None = None) -> dict:
    record = resolved.record
    return {
        **to_summary(resolved),
        "description": record.description,
        "nutrition_summary": record.nutrition_summary,
        "ingredient_summary": record.ingredient_summary,
        "user_id": getattr(record, "user_id", None),
        "source_product_id": getattr(record, "source_product_id", None),
        "archived": bool(resolved.base.archived),
        "created_at": resolved.base.created_at,
        "updated_at": record.updated_at,
        "availability": get_product_availability(db, resolved.id, viewer),
    }


def get_product(
    db: Session, product_id: str, viewer: User | None = None, allow_archived: bool = False
) -> dict | None:
    """Resolved product detail with availability, or None."""
    resolved = resolve_product(db, product_id, viewer, allow_archived)
    if resolved is None:
        return None
    return to_detail(db, resolved, viewer)


def _approved_overlays(db: Session, source_ids: list[str]) -> dict[str, UserProduct]:
    """Latest approved, unarchived overlay per source id."""
    if not source_ids:
        return {}
    overlays = (
        db.query(UserProduct)
        .filter(
            UserProduct.source_product_id.in_(source_ids),
            UserProduct.status == ProductStatus.APPROVED.value,
            UserProduct.archived.is_(False),
        )
        .order_by(UserProduct.reviewed_at.asc().nulls_first(), UserProduct.updated_at.asc())
        .all()
    )
    # Later rows overwrite earlier ones
    return {o.source_product_id: o for o in overlays}


def visible_catalog(db: Session) -> list[ResolvedProduct]:
    """Every product shoppers can see, with approved edits applied."""
    curated = db.query(Product).filter(Product.archived.is_(False)).all()
    contributions = (
        db.query(UserProduct)
        .filter(
            UserProduct.source_product_id.is_(None),
            UserProduct.status == ProductStatus.APPROVED.value,
            UserProduct.archived.is_(False),
        )
        .all()
    )
    overlays = _approved_overlays(db, [p.id for p in [*curated, *contributions]])

    resolved = []
    for product in curated:
        overlay = overlays.get(product.id)
        if overlay:
            resolved.append(ResolvedProduct(product.id, overlay, SOURCE_EDIT_OVERLAY, product))
        else:
            resolved.append(ResolvedProduct(product.id, product, SOURCE_CURATED, product))
    for product in contributions:
        overlay = overlays.get(product.id)
        if overlay:
            resolved.append(ResolvedProduct(product.id, overlay, SOURCE_EDIT_OVERLAY, product))
        else:
            resolved.append(ResolvedProduct(product.id, product, SOURCE_USER_CONTRIBUTION, product))
    return resolved


def search_products(
    db: Session,
    q: str | None = None,
    category: str | None = None,
    tag: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    """Search the visible catalog by text, category and tag.

    Results are sorted by name and then paginated; ``total_count`` counts
    every match.
    """
    results = visible_catalog(db)

    if q and q.strip():
        needle = q.strip().lower()
        results = [
            r
            for r in results
            if needle in r.record.name.lower() or needle in r.record.brand.lower()
        ]
    if category:
        keys = taxonomy.resolve_filter_keys(db, FilterType.CATEGORY, category)
        results = [r for r in results if taxonomy.matches_any(r.record.categories, keys)]
    if tag:
        keys = taxonomy.resolve_filter_keys(db, FilterType.TAG, tag)
        results = [r for r in results if taxonomy.matches_any(r.record.tags, keys)]

    results.sort(key=lambda r: (r.record.name.lower(), r.record.brand.lower()))

    total_count = len(results)
    start = (page - 1) * page_size
    return {
        "items": [to_summary(r) for r in results[start : start + page_size]],
        "total_count": total_count,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total_count / page_size) if total_count else 0,
    }


def list_featured_products(db: Session, limit: int = 12) -> list[dict]:
    """Featured curated products in admin-chosen order."""
    featured = (
        db.query(Product)
        .filter(Product.featured.is_(True), Product.archived.is_(False))
        .order_by(Product.featured_order.asc(), Product.featured_at.desc())
        .limit(limit)
        .all()
    )
    overlays = _approved_overlays(db, [p.id for p in featured])
    items = []
    for product in featured:
        overlay = overlays.get(product.id)
        if overlay:
            items.append(to_summary(ResolvedProduct(product.id, overlay, SOURCE_EDIT_OVERLAY, product)))
        else:
            items.append(to_summary(ResolvedProduct(product.id, product, SOURCE_CURATED, product)))
    return items
