"""Store chain management and related-company grouping."""

import logging
import re

from sqlalchemy.orm import Session

from vegan_aisle.errors import BadRequestError, ConflictError, NotFoundError
from vegan_aisle.models.store import Store, StoreChain

logger = logging.getLogger(__name__)

# Store-format words that don't change who owns the chain
_VARIANT_WORDS = re.compile(
    r"\b(supercenter|neighborhood|market|marketplace|fresh|fare|greatland|super|pharmacy|store)\b"
)


def normalize_company_key(name: str) -> str:
    """Reduce a chain name to the company that owns it.

    "Walmart Supercenter" and "Walmart Neighborhood Market" both become
    "walmart".
    """
    raw = name.lower().replace("&", " and ")
    raw = re.sub(r"[^a-z0-9\s-]", " ", raw)
    raw = _VARIANT_WORDS.sub(" ", raw)
    raw = re.sub(r"\s+", " ", raw).strip()

    if raw == "wal mart":
        return "walmart"
    if raw in ("h e b", "heb"):
        return "h-e-b"
    return raw


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def get_chain(db: Session, chain_id: int) -> StoreChain | None:
    return db.query(StoreChain).filter(StoreChain.id == chain_id).first()


def get_chain_by_slug(db: Session, slug: str) -> StoreChain | None:
    return db.query(StoreChain).filter(StoreChain.slug == slug.lower()).first()


def get_related_chain_ids(db: Session, chain_id: int, include_related_company: bool) -> list[int]:
    """Chain ids an availability selection for ``chain_id`` covers."""
    chain = get_chain(db, chain_id)
    if chain is None:
        return []
    if not include_related_company:
        return [chain.id]

    company_key = normalize_company_key(chain.name)
    if not company_key:
        return [chain.id]

    active = db.query(StoreChain).filter(StoreChain.is_active.is_(True)).all()
    related = [c.id for c in active if normalize_company_key(c.name) == company_key]
    # An inactive chain still covers itself
    if chain.id not in related:
        related.insert(0, chain.id)
    return related


def get_related_chain_names(db: Session, chain_id: int) -> list[str]:
    ids = get_related_chain_ids(db, chain_id, True)
    if not ids:
        return []
    chains = db.query(StoreChain).filter(StoreChain.id.in_(ids)).order_by(StoreChain.name).all()
    return [c.name for c in chains]


def list_chains(db: Session, include_inactive: bool = False) -> list[StoreChain]:
    query = db.query(StoreChain)
    if not include_inactive:
        query = query.filter(StoreChain.is_active.is_(True))
    return query.order_by(StoreChain.name).all()


def search_chains(db: Session, q: str, limit: int = 10) -> list[StoreChain]:
    return (
        db.query(StoreChain)
        .filter(StoreChain.is_active.is_(True), StoreChain.name.ilike(f"%{q}%"))
        .order_by(StoreChain.location_count.desc(), StoreChain.name)
        .limit(limit)
        .all()
    )


def _ensure_unique(db: Session, name: str, slug: str, exclude_id: int | None = None) -> None:
    query = db.query(StoreChain).filter((StoreChain.name == name) | (StoreChain.slug == slug))
    if exclude_id is not None:
        query = query.filter(StoreChain.id != exclude_id)
    if query.first():
        raise ConflictError(f"A chain named '{name}' already exists", field="name")


def create_chain(db: Session, data: dict) -> StoreChain:
    """Create a chain; the slug is derived from the name."""
    name = data["name"].strip()
    slug = slugify(name)
    if not slug:
        raise BadRequestError("Chain name must contain letters or digits", field="name")
    _ensure_unique(db, name, slug)

    chain = StoreChain(
        name=name,
        slug=slug,
        logo_url=data.get("logo_url"),
        website_url=data.get("website_url"),
        type=data.get("type") or "regional",
        is_active=data.get("is_active", True),
        location_count=0,
    )
    db.add(chain)
    db.commit()
    db.refresh(chain)
    logger.info(f"Created store chain {chain.id} ({chain.slug})")
    return chain


def update_chain(db: Session, chain_id: int, updates: dict) -> StoreChain:
    chain = get_chain(db, chain_id)
    if chain is None:
        raise NotFoundError("Chain not found")

    if updates.get("name"):
        name = updates["name"].strip()
        slug = slugify(name)
        _ensure_unique(db, name, slug, exclude_id=chain.id)
        chain.name = name
        chain.slug = slug
    for field in ("logo_url", "website_url", "type", "is_active"):
        if field in updates and updates[field] is not None:
            setattr(chain, field, updates[field])

    db.commit()
    db.refresh(chain)
    return chain


def delete_chain(db: Session, chain_id: int) -> None:
    """Delete a chain; refused while stores still belong to it."""
    chain = get_chain(db, chain_id)
    if chain is None:
        raise NotFoundError("Chain not found")

    store_count = db.query(Store).filter(Store.chain_id == chain_id).count()
    if store_count > 0:
        raise ConflictError(
            f"Cannot delete chain: {store_count} stores are still assigned to it. "
            "Reassign or remove stores first."
        )
    db.delete(chain)
    db.commit()
    logger.info(f"Deleted store chain {chain_id}")


def update_location_count(db: Session, chain_id: int) -> None:
    chain = get_chain(db, chain_id)
    if chain is not None:
        chain.location_count = db.query(Store).filter(Store.chain_id == chain_id).count()


def assign_stores_to_chain(db: Session, store_ids: list[int], chain_id: int | None) -> int:
    """Move stores into a chain (or out of any chain). Returns stores updated."""
    if chain_id is not None and get_chain(db, chain_id) is None:
        raise NotFoundError("Chain not found")

    stores = db.query(Store).filter(Store.id.in_(store_ids)).all()
    if not stores:
        raise NotFoundError("No matching stores")

    touched = {s.chain_id for s in stores if s.chain_id is not None}
    updated = 0
    for store in stores:
        if store.chain_id != chain_id:
            store.chain_id = chain_id
            updated += 1
    db.flush()

    if chain_id is not None:
        touched.add(chain_id)
    for touched_id in touched:
        update_location_count(db, touched_id)
    db.commit()
    return updated


def get_chain_stores(
    db: Session, chain_id: int, city: str | None = None, state: str | None = None
) -> list[Store]:
    """Confirmed stores of a chain, optionally narrowed to a city/state."""
    query = db.query(Store).filter(Store.chain_id == chain_id, Store.moderation_status == "confirmed")
    if city:
        query = query.filter(Store.city.ilike(city))
    if state:
        query = query.filter(Store.state.ilike(state))
    return query.order_by(Store.city, Store.name).all()
