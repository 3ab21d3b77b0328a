"""Category and tag normalization, archiving and display names.

Imported product data uses Open Food Facts style taxonomy values such as
``en:plant-based-foods``. Shoppers see ``plant based foods`` (or an admin
chosen display name), and matching is case-insensitive on the normalized
form.
"""

import logging
import re
from collections.abc import Iterable

from sqlalchemy.orm import Session

from vegan_aisle.models.enums import FilterType, ProductStatus
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.taxonomy import ArchivedFilter, FilterDisplayName

logger = logging.getLogger(__name__)

# Hardcoded in the storefront UI, so always listed and manageable
SYSTEM_TAGS = [
    "organic",
    "gluten-free",
    "no-sugar-added",
    "fair-trade",
    "palm-oil-free",
    "raw",
    "vegan",
]

NON_ENGLISH_PREFIX = re.compile(r"^(de|el|es|fr|nl|pt|zh):", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_filter_value(value: str) -> str:
    """Strip the ``en:`` prefix, turn dashes into spaces, collapse whitespace."""
    value = value.strip()
    if value.lower().startswith("en:"):
        value = value[3:]
    return _WHITESPACE.sub(" ", value.replace("-", " ")).strip()


def filter_key(value: str) -> str:
    """Case-insensitive comparison key for a category or tag."""
    return normalize_filter_value(value).lower()


def is_non_english(value: str) -> bool:
    return bool(NON_ENGLISH_PREFIX.match(value.strip()))


def archive_variants(value: str) -> list[str]:
    """Stored forms an archived filter is recorded under."""
    normalized = normalize_filter_value(value)
    dashed = normalized.replace(" ", "-")
    return list(dict.fromkeys([normalized, dashed, f"en:{dashed}"]))


def _field_name(filter_type: FilterType) -> str:
    return "categories" if filter_type == FilterType.CATEGORY else "tags"


def collect_raw_values(db: Session, filter_type: FilterType) -> list[str]:
    """Raw category/tag values on visible catalog rows."""
    field = _field_name(filter_type)
    values: list[str] = []

    products = db.query(Product).filter(Product.archived.is_(False)).all()
    user_products = (
        db.query(UserProduct)
        .filter(
            UserProduct.archived.is_(False),
            UserProduct.status == ProductStatus.APPROVED.value,
        )
        .all()
    )
    for row in [*products, *user_products]:
        values.extend(getattr(row, field) or [])

    if filter_type == FilterType.TAG:
        values.extend(SYSTEM_TAGS)
    return values


def get_archived_keys(db: Session, filter_type: FilterType) -> set[str]:
    rows = db.query(ArchivedFilter).filter(ArchivedFilter.type == filter_type.value).all()
    return {filter_key(row.value) for row in rows}


def get_display_names(db: Session, filter_type: FilterType) -> dict[str, str]:
    """Map of normalized key to display name override."""
    rows = db.query(FilterDisplayName).filter(FilterDisplayName.type == filter_type.value).all()
    return {filter_key(row.value): row.display_name for row in rows}


def unique_normalized(values: Iterable[str]) -> dict[str, str]:
    """Map of key to the first normalized spelling seen, skipping non-English values."""
    seen: dict[str, str] = {}
    for value in values:
        if not value or is_non_english(value):
            continue
        normalized = normalize_filter_value(value)
        if normalized:
            seen.setdefault(normalized.lower(), normalized)
    return seen


def list_filters(db: Session, filter_type: FilterType) -> list[dict]:
    """Filter values shoppers can pick from, sorted by label."""
    archived = get_archived_keys(db, filter_type)
    display_names = get_display_names(db, filter_type)

    items = [
        {"value": value, "display_name": display_names.get(key, value)}
        for key, value in unique_normalized(collect_raw_values(db, filter_type)).items()
        if key not in archived
    ]
    return sorted(items, key=lambda item: item["display_name"].lower())


def resolve_filter_keys(db: Session, filter_type: FilterType, value: str) -> set[str]:
    """Keys a shopper's filter value should match.

    The value may be a raw taxonomy value, its normalized form, or an admin
    display name.
    """
    keys = {filter_key(value)}
    wanted = value.strip().lower()
    for key, display_name in get_display_names(db, filter_type).items():
        if display_name.strip().lower() == wanted:
            keys.add(key)
    return keys


def matches_any(values: Iterable[str] | None, keys: set[str]) -> bool:
    return any(filter_key(v) in keys for v in values or [])


def admin_list_filters(
    db: Session, filter_type: FilterType, page: int = 1, page_size: int = 50
) -> dict:
    """All filter values with archived state, archived ones last."""
    archived_rows = db.query(ArchivedFilter).filter(ArchivedFilter.type == filter_type.value).all()
    archived_at = {}
    for row in archived_rows:
        archived_at.setdefault(filter_key(row.value), row.archived_at)
    display_names = get_display_names(db, filter_type)

    values = unique_normalized(collect_raw_values(db, filter_type))
    # Archived filters stay listed even after their products are gone
    for key, value in unique_normalized(row.value for row in archived_rows).items():
        values.setdefault(key, value)

    items = [
        {
            "value": value,
            "display_name": display_names.get(key),
            "archived": key in archived_at,
            "archived_at": archived_at.get(key),
        }
        for key, value in values.items()
    ]
    items.sort(key=lambda i: (i["archived"], (i["display_name"] or i["value"]).lower()))

    start = (page - 1) * page_size
    return {
        "items": items[start : start + page_size],
        "total": len(items),
        "page": page,
        "page_size": page_size,
    }


def archive_filter(db: Session, filter_type: FilterType, value: str, user_id: int) -> None:
    """Hide a filter value (all of its stored spellings) from shoppers."""
    existing = {
        row.value
        for row in db.query(ArchivedFilter)
        .filter(ArchivedFilter.type == filter_type.value)
        .all()
    }
    for variant in archive_variants(value):
        if variant not in existing:
            db.add(ArchivedFilter(type=filter_type.value, value=variant, archived_by=user_id))
    db.commit()
    logger.info(f"User {user_id} archived {filter_type.value} '{value}'")


def unarchive_filter(db: Session, filter_type: FilterType, value: str) -> bool:
    """Restore a filter value. Returns False if it was not archived."""
    variants = set(archive_variants(value))
    variants.add(value)
    variants.add(f"en:{value}")
    deleted = (
        db.query(ArchivedFilter)
        .filter(ArchivedFilter.type == filter_type.value, ArchivedFilter.value.in_(variants))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def set_display_name(
    db: Session, filter_type: FilterType, value: str, display_name: str, user_id: int
) -> FilterDisplayName:
    """Create or replace the display name for a filter value."""
    normalized = normalize_filter_value(value)
    row = (
        db.query(FilterDisplayName)
        .filter(
            FilterDisplayName.type == filter_type.value,
            FilterDisplayName.value == normalized,
        )
        .first()
    )
    if row is None:
        row = FilterDisplayName(type=filter_type.value, value=normalized)
        db.add(row)
    row.display_name = display_name.strip()
    row.updated_by = user_id
    db.commit()
    db.refresh(row)
    return row


def remove_display_name(db: Session, filter_type: FilterType, value: str) -> bool:
    deleted = (
        db.query(FilterDisplayName)
        .filter(
            FilterDisplayName.type == filter_type.value,
            FilterDisplayName.value == normalize_filter_value(value),
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0
