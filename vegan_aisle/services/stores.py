"""Store listing, search and creation."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from vegan_aisle.errors import NotFoundError
from vegan_aisle.models.availability import Availability
from vegan_aisle.models.enums import ModerationStatus
from vegan_aisle.models.store import Store
from vegan_aisle.models.user import User
from vegan_aisle.services.chains import get_chain, update_location_count
from vegan_aisle.services.trust import can_moderate, moderation_status_for, trust_level_for

logger = logging.getLogger(__name__)


@dataclass
class DuplicateCheck:
    """Existing stores that look like the one being added."""

    exact_match: Store | None = None
    similar: list[Store] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        return self.exact_match is not None or bool(self.similar)


def _visible(query, viewer: User | None):
    if can_moderate(viewer):
        return query
    visible = Store.moderation_status == ModerationStatus.CONFIRMED.value
    if viewer is not None:
        visible = visible | (Store.created_by == viewer.id)
    return query.filter(visible)


def with_chain_info(store: Store) -> dict:
    data = {c.name: getattr(store, c.name) for c in Store.__table__.columns}
    data["chain_name"] = store.chain.name if store.chain else None
    data["chain_slug"] = store.chain.slug if store.chain else None
    return data


def list_stores(db: Session, viewer: User | None = None) -> list[Store]:
    query = db.query(Store).options(joinedload(Store.chain))
    return _visible(query, viewer).order_by(Store.name).all()


def search_stores(db: Session, q: str, viewer: User | None = None, limit: int = 50) -> list[Store]:
    query = db.query(Store).options(joinedload(Store.chain)).filter(Store.name.ilike(f"%{q.strip()}%"))
    return _visible(query, viewer).order_by(Store.name).limit(limit).all()


def get_store(db: Session, store_id: int) -> Store:
    store = db.query(Store).filter(Store.id == store_id).first()
    if store is None:
        raise NotFoundError("Store not found")
    return store


def check_for_duplicates(db: Session, data: dict) -> DuplicateCheck:
    """Look for an identical store (same place id, or same name and address)
    and for same-named stores in the same city."""
    result = DuplicateCheck()

    if data.get("google_place_id"):
        result.exact_match = (
            db.query(Store).filter(Store.google_place_id == data["google_place_id"]).first()
        )
        if result.exact_match:
            return result

    name = data["name"].strip().lower()
    address = (data.get("address") or "").strip().lower()
    if address:
        result.exact_match = (
            db.query(Store)
            .filter(func.lower(Store.name) == name, func.lower(Store.address) == address)
            .first()
        )
        if result.exact_match:
            return result

    if data.get("city"):
        result.similar = (
            db.query(Store)
            .filter(
                func.lower(Store.name) == name,
                func.lower(Store.city) == data["city"].strip().lower(),
            )
            .limit(10)
            .all()
        )
    return result


def create_store(db: Session, user: User, data: dict) -> tuple[Store | None, DuplicateCheck]:
    """Create a store unless it looks like a duplicate.

    Returns the new store, or None together with the duplicates found.
    """
    if not data.pop("skip_duplicate_check", False):
        duplicates = check_for_duplicates(db, data)
        if duplicates.has_duplicates:
            return None, duplicates

    chain_id = data.get("chain_id")
    if chain_id is not None and get_chain(db, chain_id) is None:
        raise NotFoundError("Chain not found")

    trust = trust_level_for(user)
    store = Store(
        **data,
        moderation_status=moderation_status_for(trust),
        created_by=user.id,
        trusted_contribution=trust.is_trusted,
        needs_review=trust.needs_review,
    )
    db.add(store)
    db.flush()
    if chain_id is not None:
        update_location_count(db, chain_id)
    db.commit()
    db.refresh(store)
    logger.info(f"User {user.id} added store {store.id} ({store.moderation_status})")
    return store, DuplicateCheck()


def delete_store(db: Session, store_id: int) -> None:
    """Delete a store and its availability rows."""
    store = get_store(db, store_id)
    chain_id = store.chain_id
    db.query(Availability).filter(Availability.store_id == store_id).delete(
        synchronize_session=False
    )
    db.delete(store)
    db.flush()
    if chain_id is not None:
        update_location_count(db, chain_id)
    db.commit()
    logger.info(f"Deleted store {store_id}")


def group_stores_by_chain(db: Session, viewer: User | None = None) -> dict:
    """Visible stores bucketed by chain, plus the ones with no chain."""
    groups: dict[int, dict] = {}
    independent = []
    for store in list_stores(db, viewer):
        if store.chain is None or not store.chain.is_active:
            independent.append(store)
            continue
        group = groups.setdefault(store.chain_id, {"chain": store.chain, "stores": []})
        group["stores"].append(store)
    return {
        "chains": sorted(groups.values(), key=lambda g: g["chain"].name.lower()),
        "independent_stores": independent,
    }
