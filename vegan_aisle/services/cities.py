"""City landing pages: local stores and the products confirmed there."""

import logging
import math

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from vegan_aisle.errors import ConflictError, NotFoundError
from vegan_aisle.models.availability import Availability
from vegan_aisle.models.city import CityContentEdit, CityLandingPage
from vegan_aisle.models.enums import CityEditField, ModerationStatus, StoreType
from vegan_aisle.models.store import Store
from vegan_aisle.models.user import User
from vegan_aisle.services.catalog import to_summary, visible_catalog
from vegan_aisle.services.content_edits import EditOutcome, submit_edit
from vegan_aisle.services.reviews import get_rating_stats

logger = logging.getLogger(__name__)


# Pages


def get_city_page(db: Session, slug: str, include_inactive: bool = False) -> CityLandingPage | None:
    query = db.query(CityLandingPage).filter(CityLandingPage.slug == slug.strip().lower())
    if not include_inactive:
        query = query.filter(CityLandingPage.is_active.is_(True))
    return query.first()


def require_city_page(db: Session, slug: str, include_inactive: bool = False) -> CityLandingPage:
    page = get_city_page(db, slug, include_inactive)
    if page is None:
        raise NotFoundError("City page not found")
    return page


def list_city_pages(db: Session, active_only: bool = True) -> list[CityLandingPage]:
    query = db.query(CityLandingPage)
    if active_only:
        query = query.filter(CityLandingPage.is_active.is_(True))
    return query.order_by(CityLandingPage.city_name, CityLandingPage.state).all()


def _normalize(data: dict) -> dict:
    if data.get("slug") is not None:
        data["slug"] = data["slug"].strip().lower()
    if data.get("state") is not None:
        data["state"] = data["state"].strip().upper()
    return data


def create_city_page(db: Session, data: dict) -> CityLandingPage:
    data = _normalize(dict(data))
    if get_city_page(db, data["slug"], include_inactive=True) is not None:
        raise ConflictError("A city page with this slug already exists", field="slug")
    page = CityLandingPage(**data)
    db.add(page)
    db.commit()
    db.refresh(page)
    logger.info(f"Created city page {page.slug}")
    return page


def update_city_page(db: Session, slug: str, data: dict) -> CityLandingPage:
    """Update a page. Omitted fields are left unchanged; the slug is fixed."""
    page = require_city_page(db, slug, include_inactive=True)
    data = _normalize(dict(data))
    data.pop("slug", None)
    for key, value in data.items():
        setattr(page, key, value)
    db.commit()
    db.refresh(page)
    logger.info(f"Updated city page {page.slug}")
    return page


def delete_city_page(db: Session, slug: str) -> None:
    page = require_city_page(db, slug, include_inactive=True)
    db.delete(page)
    db.commit()
    logger.info(f"Deleted city page {slug}")


# Stores


def _city_stores_query(db: Session, page: CityLandingPage):
    """Confirmed physical stores whose city and state match the page."""
    return (
        db.query(Store)
        .options(joinedload(Store.chain))
        .filter(
            func.lower(Store.city) == page.city_name.lower(),
            func.lower(Store.state) == page.state.lower(),
            Store.type == StoreType.BRICK_AND_MORTAR.value,
            Store.moderation_status == ModerationStatus.CONFIRMED.value,
        )
    )


def _confirmed_counts(db: Session, store_ids: list[int]) -> dict[int, int]:
    if not store_ids:
        return {}
    rows = (
        db.query(Availability.store_id, func.count(Availability.id))
        .filter(
            Availability.store_id.in_(store_ids),
            Availability.moderation_status == ModerationStatus.CONFIRMED.value,
        )
        .group_by(Availability.store_id)
        .all()
    )
    return dict(rows)


def _store_entry(store: Store, product_count: int) -> dict:
    chain = store.chain if store.chain and store.chain.is_active else None
    return {
        "id": store.id,
        "name": store.name,
        "type": store.type,
        "address": store.address,
        "city": store.city,
        "state": store.state,
        "zip_code": store.zip_code,
        "latitude": store.latitude,
        "longitude": store.longitude,
        "website_url": store.website_url,
        "phone_number": store.phone_number,
        "product_count": product_count,
        "chain_id": store.chain_id,
        "location_identifier": store.location_identifier,
        "chain": (
            {"id": chain.id, "name": chain.name, "slug": chain.slug, "logo_url": chain.logo_url}
            if chain
            else None
        ),
    }


def get_city_stores(db: Session, page: CityLandingPage) -> list[dict]:
    """Stores in the city, each with its count of confirmed products."""
    stores = _city_stores_query(db, page).order_by(Store.name).all()
    counts = _confirmed_counts(db, [s.id for s in stores])
    return [_store_entry(store, counts.get(store.id, 0)) for store in stores]


def _by_product_count(entry: dict):
    return (-entry["product_count"], entry["name"].lower())


def group_city_stores(stores: list[dict]) -> dict:
    """Bucket city stores by chain, busiest chains and stores first."""
    groups: dict[int, dict] = {}
    independent = []
    for store in stores:
        if store["chain"] is None:
            independent.append(store)
            continue
        group = groups.setdefault(
            store["chain"]["id"], {"chain": store["chain"], "stores": [], "total_product_count": 0}
        )
        group["stores"].append(store)
        group["total_product_count"] += store["product_count"]

    for group in groups.values():
        group["stores"].sort(key=_by_product_count)
    return {
        "chain_groups": sorted(
            groups.values(), key=lambda g: (-g["total_product_count"], g["chain"]["name"].lower())
        ),
        "independent_stores": sorted(independent, key=_by_product_count),
    }


# Products


def _with_rating(db: Session, entry: dict) -> dict:
    stats = get_rating_stats(db, entry["id"])
    entry["review_count"] = stats["review_count"]
    entry["average_rating"] = stats["average_rating"] if stats["review_count"] else None
    return entry


def get_city_products(db: Session, page: CityLandingPage, page_number: int = 1, limit: int = 20) -> dict:
    """Visible products with confirmed availability at the city's stores.

    Sorted by name and paginated; each product lists the city stores that
    carry it.
    """
    store_names = {s.id: s.name for s in _city_stores_query(db, page).all()}
    carried_at: dict[str, set[str]] = {}
    if store_names:
        rows = (
            db.query(Availability.product_id, Availability.store_id)
            .filter(
                Availability.store_id.in_(list(store_names)),
                Availability.moderation_status == ModerationStatus.CONFIRMED.value,
            )
            .all()
        )
        for product_id, store_id in rows:
            carried_at.setdefault(product_id, set()).add(store_names[store_id])

    products = [r for r in visible_catalog(db) if r.id in carried_at]
    products.sort(key=lambda r: (r.record.name.lower(), r.record.brand.lower()))

    total_count = len(products)
    start = (page_number - 1) * limit
    items = [
        _with_rating(db, {**to_summary(r), "store_names": sorted(carried_at[r.id])})
        for r in products[start : start + limit]
    ]
    return {
        "products": items,
        "total_count": total_count,
        "page": page_number,
        "total_pages": math.ceil(total_count / limit) if total_count else 0,
    }


def get_store_products(db: Session, page: CityLandingPage, store_id: int) -> list[dict]:
    """Visible products confirmed at one of the city's stores, with its prices."""
    store = _city_stores_query(db, page).filter(Store.id == store_id).first()
    if store is None:
        raise NotFoundError("Store not found")

    prices = dict(
        db.query(Availability.product_id, Availability.price_range)
        .filter(
            Availability.store_id == store.id,
            Availability.moderation_status == ModerationStatus.CONFIRMED.value,
        )
        .all()
    )
    products = [r for r in visible_catalog(db) if r.id in prices]
    products.sort(key=lambda r: (r.record.name.lower(), r.record.brand.lower()))
    return [_with_rating(db, {**to_summary(r), "price_range": prices[r.id]}) for r in products]


# Edits


def suggest_city_edit(
    db: Session,
    slug: str,
    user: User,
    field: CityEditField,
    suggested_value: str,
    reason: str | None = None,
) -> EditOutcome:
    page = require_city_page(db, slug)
    edit = CityContentEdit(city_page_id=page.id, city_slug=page.slug)
    return submit_edit(db, page, edit, user, field.value, suggested_value, reason)
