"""Where products can be bought: aggregation, moderation-aware reads, stock reports."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from vegan_aisle.config import get_settings
from vegan_aisle.errors import NotFoundError
from vegan_aisle.models.availability import Availability, AvailabilityReport
from vegan_aisle.models.enums import (
    AvailabilitySource,
    AvailabilityStatus,
    ModerationStatus,
    StockStatus,
)
from vegan_aisle.models.mixins import as_utc
from vegan_aisle.models.store import Store
from vegan_aisle.models.user import User
from vegan_aisle.services.chains import get_related_chain_ids
from vegan_aisle.services.trust import is_admin, moderation_status_for, trust_level_for

logger = logging.getLogger(__name__)

STOCK_REPORT_WINDOW_DAYS = 7


@dataclass
class StoreSelection:
    store_id: int
    price_range: str | None = None


@dataclass
class ChainSelection:
    chain_id: int
    price_range: str | None = None
    include_related_company: bool = False


def resolve_store_prices(
    db: Session,
    store_selections: list[StoreSelection],
    chain_selections: list[ChainSelection],
) -> dict[int, str | None]:
    """Expand selections into one price per store.

    Chain selections cover every store of the chain (and, if asked, of its
    sister chains). Explicit store selections win over chain-derived prices.
    Store ids that don't exist are dropped.
    """
    prices: dict[int, str | None] = {}

    for selection in chain_selections:
        chain_ids = get_related_chain_ids(
            db, selection.chain_id, selection.include_related_company
        )
        if not chain_ids:
            continue
        store_ids = db.query(Store.id).filter(Store.chain_id.in_(chain_ids)).all()
        for (store_id,) in store_ids:
            prices[store_id] = selection.price_range

    if store_selections:
        wanted = {s.store_id for s in store_selections}
        existing = {sid for (sid,) in db.query(Store.id).filter(Store.id.in_(list(wanted))).all()}
        for selection in store_selections:
            if selection.store_id in existing:
                prices[selection.store_id] = selection.price_range

    return prices


def save_product_availability(
    db: Session,
    product_id: str,
    user: User | None,
    store_selections: list[StoreSelection],
    chain_selections: list[ChainSelection],
    commit: bool = True,
) -> list[Availability]:
    """Upsert one availability row per resolved store.

    Rows are moderated through the trust gate. An untrusted report never
    pulls an already confirmed row back to pending, nor takes over another
    user's pending row; it only refreshes when the row was last confirmed.
    """
    prices = resolve_store_prices(db, store_selections, chain_selections)
    if not prices:
        return []

    trust = trust_level_for(user)
    moderation_status = moderation_status_for(trust)
    source = (
        AvailabilitySource.ADMIN.value if is_admin(user) else AvailabilitySource.USER_CONTRIBUTION.value
    )
    now = datetime.now(UTC)
    reporter_id = user.id if user else None

    existing = {
        row.store_id: row
        for row in db.query(Availability)
        .filter(Availability.product_id == product_id, Availability.store_id.in_(list(prices)))
        .all()
    }

    rows = []
    for store_id, price_range in prices.items():
        row = existing.get(store_id)
        if row is None:
            row = Availability(product_id=product_id, store_id=store_id)
            db.add(row)
        elif not trust.is_trusted and (
            row.moderation_status == ModerationStatus.CONFIRMED.value
            or (
                row.moderation_status == ModerationStatus.PENDING.value
                and row.reported_by not in (None, reporter_id)
            )
        ):
            row.last_confirmed_at = now
            row.is_stale = False
            rows.append(row)
            continue

        row.status = AvailabilityStatus.USER_REPORTED.value
        row.price_range = price_range
        row.source = source
        row.moderation_status = moderation_status
        row.reported_by = reporter_id
        row.trusted_contribution = trust.is_trusted
        row.needs_review = trust.needs_review
        row.last_confirmed_at = now
        row.is_stale = False
        rows.append(row)

    if commit:
        db.commit()
    else:
        db.flush()
    logger.info(f"Saved availability for product {product_id} at {len(rows)} stores")
    return rows


def get_product_availability(
    db: Session, product_id: str, viewer: User | None = None
) -> list[dict]:
    """Confirmed rows plus the viewer's own pending rows, with store details."""
    visibility = [Availability.moderation_status == ModerationStatus.CONFIRMED.value]
    if viewer is not None:
        visibility.append(
            (Availability.moderation_status == ModerationStatus.PENDING.value)
            & (Availability.reported_by == viewer.id)
        )

    rows = (
        db.query(Availability)
        .options(joinedload(Availability.store).joinedload(Store.chain))
        .filter(Availability.product_id == product_id, or_(*visibility))
        .all()
    )
    results = [serialize_availability(row) for row in rows if row.store is not None]
    return sorted(results, key=lambda r: r["store_name"].lower())


def serialize_availability(row: Availability) -> dict:
    store = row.store
    chain = store.chain
    return {
        "id": row.id,
        "product_id": row.product_id,
        "store_id": store.id,
        "store_name": store.name,
        "store_type": store.type,
        "region_or_scope": store.region_or_scope,
        "address": store.address,
        "city": store.city,
        "state": store.state,
        "website_url": store.website_url,
        "chain_id": chain.id if chain else None,
        "chain_name": chain.name if chain else None,
        "chain_slug": chain.slug if chain else None,
        "status": row.status,
        "moderation_status": row.moderation_status,
        "price_range": row.price_range,
        "source": row.source,
        "last_confirmed_at": row.last_confirmed_at,
        "is_stale": row.is_stale,
        "stock_status": row.stock_status,
        "last_stock_report_at": row.last_stock_report_at,
        "recent_in_stock_count": row.recent_in_stock_count,
        "recent_out_of_stock_count": row.recent_out_of_stock_count,
    }


def _summarize_stock(reports: list[AvailabilityReport]) -> str:
    """Majority status of recent reports; the latest report breaks ties."""
    if not reports:
        return StockStatus.UNKNOWN.value
    in_stock = sum(1 for r in reports if r.status == StockStatus.IN_STOCK.value)
    out_of_stock = len(reports) - in_stock
    if in_stock > out_of_stock:
        return StockStatus.IN_STOCK.value
    if out_of_stock > in_stock:
        return StockStatus.OUT_OF_STOCK.value
    latest = max(reports, key=lambda r: as_utc(r.reported_at))
    return latest.status


def report_stock_status(
    db: Session,
    product_id: str,
    store_id: int,
    user: User,
    status: StockStatus,
    notes: str | None = None,
) -> Availability:
    """Record a shopper's shelf report and refresh the row's stock summary.

    Each user gets one report per product, store and day; reporting again
    the same day replaces the earlier one.
    """
    row = (
        db.query(Availability)
        .filter(Availability.product_id == product_id, Availability.store_id == store_id)
        .first()
    )
    if row is None:
        raise NotFoundError("This product is not listed at that store")

    now = datetime.now(UTC)
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    todays = (
        db.query(AvailabilityReport)
        .filter(
            AvailabilityReport.product_id == product_id,
            AvailabilityReport.store_id == store_id,
            AvailabilityReport.user_id == user.id,
            AvailabilityReport.reported_at >= day_start,
        )
        .first()
    )
    if todays is None:
        todays = AvailabilityReport(product_id=product_id, store_id=store_id, user_id=user.id)
        db.add(todays)
    todays.status = status.value
    todays.notes = notes
    todays.reported_at = now
    db.flush()

    window_start = now - timedelta(days=STOCK_REPORT_WINDOW_DAYS)
    recent = (
        db.query(AvailabilityReport)
        .filter(
            AvailabilityReport.product_id == product_id,
            AvailabilityReport.store_id == store_id,
            AvailabilityReport.reported_at >= window_start,
        )
        .all()
    )

    row.recent_in_stock_count = sum(1 for r in recent if r.status == StockStatus.IN_STOCK.value)
    row.recent_out_of_stock_count = len(recent) - row.recent_in_stock_count
    row.stock_status = _summarize_stock(recent)
    row.last_stock_report_at = now
    db.commit()
    db.refresh(row)
    return row


def mark_stale(db: Session, product_id: str | None = None) -> int:
    """Flag rows not confirmed within the stale window. Returns rows flagged."""
    hours = get_settings().availability_stale_hours
    cutoff = datetime.now(UTC) - timedelta(hours=hours)

    query = db.query(Availability).filter(
        Availability.is_stale.is_(False),
        Availability.last_confirmed_at.isnot(None),
        Availability.last_confirmed_at < cutoff,
    )
    if product_id is not None:
        query = query.filter(Availability.product_id == product_id)

    flagged = query.update({Availability.is_stale: True}, synchronize_session=False)
    db.commit()
    return flagged


def delete_product_availability(db: Session, product_id: str) -> None:
    db.query(Availability).filter(Availability.product_id == product_id).delete(
        synchronize_session=False
    )
