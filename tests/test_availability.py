"""Tests for product availability, stock reports and stale flagging."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from vegan_aisle.models import Availability, AvailabilityReport, User
from vegan_aisle.services.availability import (
    ChainSelection,
    StoreSelection,
    mark_stale,
    resolve_store_prices,
    save_product_availability,
)
from vegan_aisle.tasks.availability import mark_stale_availability


def add_availability(client, headers, product_id, stores=(), chains=()):
    return client.post(
        f"/api/products/{product_id}/availability",
        headers=headers,
        json={"store_availabilities": list(stores), "chain_availabilities": list(chains)},
    )


def test_chain_selection_covers_every_store(db, make_chain, make_store):
    chain = make_chain()
    first = make_store("WF Austin", chain=chain)
    second = make_store("WF Dallas", chain=chain)
    make_store("Corner Co-op")

    prices = resolve_store_prices(db, [], [ChainSelection(chain_id=chain.id, price_range="$$")])
    assert prices == {first.id: "$$", second.id: "$$"}


def test_store_price_wins_over_chain_price(db, make_chain, make_store):
    chain = make_chain()
    first = make_store("WF Austin", chain=chain)
    second = make_store("WF Dallas", chain=chain)

    prices = resolve_store_prices(
        db,
        [StoreSelection(store_id=first.id, price_range="$4.99"), StoreSelection(store_id=99999)],
        [ChainSelection(chain_id=chain.id, price_range="$$")],
    )
    assert prices == {first.id: "$4.99", second.id: "$$"}


def test_related_company_selection(db, make_chain, make_store):
    supercenter = make_chain("Walmart Supercenter")
    neighborhood = make_chain("Walmart Neighborhood Market")
    a = make_store("Walmart #1", chain=supercenter)
    b = make_store("Walmart #2", chain=neighborhood)

    only_chain = resolve_store_prices(db, [], [ChainSelection(chain_id=supercenter.id)])
    assert set(only_chain) == {a.id}

    related = resolve_store_prices(
        db, [], [ChainSelection(chain_id=supercenter.id, include_related_company=True)]
    )
    assert set(related) == {a.id, b.id}


def test_one_row_per_product_and_store(client, db, make_product, make_store, trusted_headers):
    product = make_product()
    store = make_store()

    add_availability(client, trusted_headers, product.id, stores=[{"store_id": store.id, "price_range": "$3"}])
    response = add_availability(
        client, trusted_headers, product.id, stores=[{"store_id": store.id, "price_range": "$4"}]
    )

    assert response.status_code == 201
    rows = db.query(Availability).all()
    assert len(rows) == 1
    assert rows[0].price_range == "$4"
    assert rows[0].status == "user_reported"
    assert rows[0].source == "user_contribution"


def test_untrusted_availability_pending_and_private(
    client, make_product, make_store, auth_headers, other_headers
):
    product = make_product()
    store = make_store()

    response = add_availability(client, auth_headers, product.id, stores=[{"store_id": store.id}])
    assert response.status_code == 201
    assert response.json()[0]["moderation_status"] == "pending"

    assert client.get(f"/api/products/{product.id}/availability", headers=other_headers).json() == []
    assert client.get(f"/api/products/{product.id}/availability").json() == []


def test_untrusted_report_does_not_downgrade_confirmed(db, make_product, make_store, auth_headers):
    product = make_product()
    store = make_store()
    old = datetime.now(UTC) - timedelta(days=3)
    db.add(
        Availability(
            product_id=product.id,
            store_id=store.id,
            moderation_status="confirmed",
            price_range="$3",
            last_confirmed_at=old,
            is_stale=True,
        )
    )
    db.commit()
    user = db.query(User).filter(User.id == auth_headers.user_id).one()

    save_product_availability(
        db, product.id, user, [StoreSelection(store_id=store.id, price_range="$9")], []
    )

    row = db.query(Availability).one()
    assert row.moderation_status == "confirmed"
    assert row.price_range == "$3"
    assert row.is_stale is False
    assert row.last_confirmed_at.replace(tzinfo=UTC) > old


def test_untrusted_report_keeps_first_reporters_pending_row(
    client, db, make_product, make_store, auth_headers, other_headers
):
    product = make_product()
    store = make_store()
    add_availability(client, auth_headers, product.id, stores=[{"store_id": store.id, "price_range": "$4"}])
    add_availability(client, other_headers, product.id, stores=[{"store_id": store.id, "price_range": "$9"}])

    row = db.query(Availability).one()
    assert row.reported_by == auth_headers.user_id
    assert row.price_range == "$4"

    mine = client.get(f"/api/products/{product.id}/availability", headers=auth_headers).json()
    assert [a["price_range"] for a in mine] == ["$4"]


def test_admin_availability_source(client, db, make_product, make_store, admin_headers):
    product = make_product()
    store = make_store()
    add_availability(client, admin_headers, product.id, stores=[{"store_id": store.id}])

    row = db.query(Availability).one()
    assert row.source == "admin"
    assert row.moderation_status == "confirmed"
    assert row.needs_review is False


def test_availability_for_unknown_product(client, make_store, auth_headers):
    store = make_store()
    response = add_availability(client, auth_headers, "missing", stores=[{"store_id": store.id}])
    assert response.status_code == 404


def test_availability_sorted_by_store_name(client, make_product, make_store, trusted_headers):
    product = make_product()
    zed = make_store("Zed's Market")
    alpha = make_store("Alpha Foods")
    add_availability(
        client, trusted_headers, product.id, stores=[{"store_id": zed.id}, {"store_id": alpha.id}]
    )

    names = [a["store_name"] for a in client.get(f"/api/products/{product.id}/availability").json()]
    assert names == ["Alpha Foods", "Zed's Market"]


# Stock reports


def report(client, headers, product_id, store_id, status):
    return client.post(
        f"/api/products/{product_id}/stock-report",
        headers=headers,
        json={"store_id": store_id, "status": status},
    )


def test_stock_report_requires_listing(client, make_product, make_store, auth_headers):
    product = make_product()
    store = make_store()
    response = report(client, auth_headers, product.id, store.id, "in_stock")
    assert response.status_code == 404


def test_stock_report_majority(
    client, make_product, make_store, trusted_headers, auth_headers, other_headers
):
    product = make_product()
    store = make_store()
    add_availability(client, trusted_headers, product.id, stores=[{"store_id": store.id}])

    report(client, auth_headers, product.id, store.id, "out_of_stock")
    report(client, other_headers, product.id, store.id, "out_of_stock")
    response = report(client, trusted_headers, product.id, store.id, "in_stock")

    data = response.json()
    assert data["stock_status"] == "out_of_stock"
    assert data["recent_in_stock_count"] == 1
    assert data["recent_out_of_stock_count"] == 2


def test_stock_report_tie_goes_to_latest(client, make_product, make_store, trusted_headers, auth_headers):
    product = make_product()
    store = make_store()
    add_availability(client, trusted_headers, product.id, stores=[{"store_id": store.id}])

    report(client, auth_headers, product.id, store.id, "out_of_stock")
    response = report(client, trusted_headers, product.id, store.id, "in_stock")
    assert response.json()["stock_status"] == "in_stock"


def test_same_day_report_replaces_earlier(client, db, make_product, make_store, trusted_headers):
    product = make_product()
    store = make_store()
    add_availability(client, trusted_headers, product.id, stores=[{"store_id": store.id}])

    report(client, trusted_headers, product.id, store.id, "out_of_stock")
    response = report(client, trusted_headers, product.id, store.id, "in_stock")

    assert db.query(AvailabilityReport).count() == 1
    assert response.json()["recent_in_stock_count"] == 1
    assert response.json()["recent_out_of_stock_count"] == 0


def test_old_reports_ignored(client, db, make_product, make_store, trusted_headers, auth_headers):
    product = make_product()
    store = make_store()
    add_availability(client, trusted_headers, product.id, stores=[{"store_id": store.id}])
    db.add(
        AvailabilityReport(
            product_id=product.id,
            store_id=store.id,
            user_id=auth_headers.user_id,
            status="out_of_stock",
            reported_at=datetime.now(UTC) - timedelta(days=30),
        )
    )
    db.commit()

    response = report(client, trusted_headers, product.id, store.id, "in_stock")
    assert response.json()["stock_status"] == "in_stock"
    assert response.json()["recent_out_of_stock_count"] == 0


def test_invalid_stock_status(client, make_product, make_store, auth_headers):
    product = make_product()
    store = make_store()
    response = report(client, auth_headers, product.id, store.id, "maybe")
    assert response.status_code == 422


# Stale flagging


def _availability(db, product_id, store_id, confirmed_hours_ago):
    row = Availability(
        product_id=product_id,
        store_id=store_id,
        last_confirmed_at=datetime.now(UTC) - timedelta(hours=confirmed_hours_ago),
    )
    db.add(row)
    db.commit()
    return row


def test_mark_stale(db, make_product, make_store):
    product = make_product()
    fresh = _availability(db, product.id, make_store("Fresh").id, 1)
    stale = _availability(db, product.id, make_store("Stale").id, 48)

    assert mark_stale(db) == 1
    db.refresh(fresh)
    db.refresh(stale)
    assert fresh.is_stale is False
    assert stale.is_stale is True

    assert mark_stale(db) == 0


def test_mark_stale_for_one_product(db, make_product, make_store):
    first = make_product()
    second = make_product(name="Soy Milk")
    store = make_store()
    _availability(db, first.id, store.id, 48)
    _availability(db, second.id, store.id, 48)

    assert mark_stale(db, first.id) == 1


def test_mark_stale_task(db, make_product, make_store):
    product = make_product()
    _availability(db, product.id, make_store().id, 72)

    with patch("vegan_aisle.tasks.availability.SessionLocal", return_value=db), patch.object(
        db, "close"
    ):
        result = mark_stale_availability()

    assert result == {"flagged": 1}
