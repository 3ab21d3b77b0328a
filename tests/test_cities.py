"""Tests for city landing pages."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from vegan_aisle.main import app
from vegan_aisle.models import Availability, CityContentEdit, CityLandingPage, Review
from vegan_aisle.services.google_places import get_google_places_service, parse_city_and_state


@pytest.fixture
def make_city(db):
    """Factory for published city pages."""

    def _make(slug: str = "delaware-oh", city_name: str = "Delaware", state: str = "OH", **fields):
        fields.setdefault("headline", f"Vegan shopping in {city_name}")
        fields.setdefault("description", "Where to find plant-based food.")
        fields.setdefault("is_active", True)
        page = CityLandingPage(slug=slug, city_name=city_name, state=state, **fields)
        db.add(page)
        db.commit()
        db.refresh(page)
        return page

    return _make


def confirm(db, product_id, store_id, price_range=None, moderation_status="confirmed"):
    db.add(
        Availability(
            product_id=product_id,
            store_id=store_id,
            price_range=price_range,
            moderation_status=moderation_status,
        )
    )
    db.commit()


def test_list_active_cities(client, make_city):
    make_city("columbus-oh", "Columbus")
    make_city("athens-oh", "Athens")
    make_city("draft-oh", "Draft", is_active=False)

    response = client.get("/api/cities")
    assert response.status_code == 200
    assert [c["city_name"] for c in response.json()["cities"]] == ["Athens", "Columbus"]


def test_get_city(client, make_city):
    make_city()
    make_city("draft-oh", "Draft", is_active=False)

    data = client.get("/api/cities/Delaware-OH").json()["city"]
    assert data["slug"] == "delaware-oh"
    assert data["state"] == "OH"

    response = client.get("/api/cities/draft-oh")
    assert response.status_code == 404
    assert response.json()["detail"] == "City page not found"


def test_city_stores_match_city_and_state(client, db, make_city, make_store, make_product):
    make_city()
    product = make_product()
    kroger = make_store("Kroger", city="delaware", state="oh")
    make_store("Giant Eagle", city="Delaware", state="PA")
    make_store("Oatly Online", city="Delaware", state="OH", type="online_retailer")
    make_store("New Place", city="Delaware", state="OH", moderation_status="pending")
    confirm(db, product.id, kroger.id)

    stores = client.get("/api/cities/delaware-oh/stores").json()["stores"]
    assert [s["name"] for s in stores] == ["Kroger"]
    assert stores[0]["product_count"] == 1
    assert stores[0]["chain"] is None


def test_product_count_ignores_pending_availability(client, db, make_city, make_store, make_product):
    make_city()
    store = make_store("Kroger", city="Delaware", state="OH")
    confirm(db, make_product().id, store.id)
    confirm(db, make_product(name="Tofu").id, store.id, moderation_status="pending")

    stores = client.get("/api/cities/delaware-oh/stores").json()["stores"]
    assert stores[0]["product_count"] == 1


def test_city_stores_grouped(client, db, make_city, make_store, make_chain, make_product):
    make_city()
    kroger = make_chain("Kroger")
    aldi = make_chain("Aldi")
    k1 = make_store("Kroger North", chain=kroger, city="Delaware", state="OH")
    k2 = make_store("Kroger South", chain=kroger, city="Delaware", state="OH")
    a1 = make_store("Aldi Central", chain=aldi, city="Delaware", state="OH")
    co_op = make_store("Co-op", city="Delaware", state="OH")
    products = [make_product(name=f"Product {i}") for i in range(4)]
    confirm(db, products[0].id, k2.id)
    confirm(db, products[1].id, k2.id)
    confirm(db, products[0].id, a1.id)
    confirm(db, products[1].id, a1.id)
    confirm(db, products[2].id, a1.id)
    confirm(db, products[3].id, co_op.id)

    data = client.get("/api/cities/delaware-oh/stores", params={"grouped": "true"}).json()

    assert [g["chain"]["name"] for g in data["chain_groups"]] == ["Aldi", "Kroger"]
    assert [g["total_product_count"] for g in data["chain_groups"]] == [3, 2]
    assert [s["id"] for s in data["chain_groups"][1]["stores"]] == [k2.id, k1.id]
    assert [s["name"] for s in data["independent_stores"]] == ["Co-op"]


def test_city_products(client, db, make_city, make_store, make_product, auth_headers):
    make_city()
    first = make_store("Kroger", city="Delaware", state="OH")
    second = make_store("Co-op", city="Delaware", state="OH")
    elsewhere = make_store("Far Away", city="Columbus", state="OH")
    milk = make_product(name="Oat Milk")
    tofu = make_product(name="Tofu", brand="Hodo")
    hidden = make_product(name="Archived", archived=True)
    only_elsewhere = make_product(name="Seitan")
    confirm(db, milk.id, first.id)
    confirm(db, milk.id, second.id)
    confirm(db, tofu.id, second.id)
    confirm(db, hidden.id, first.id)
    confirm(db, only_elsewhere.id, elsewhere.id)
    db.add(
        Review(
            product_id=milk.id,
            user_id=auth_headers.user_id,
            rating=4,
            comment="Creamy.",
            status="approved",
            reviewed_at=datetime.now(UTC),
        )
    )
    db.commit()

    data = client.get("/api/cities/delaware-oh/products").json()
    assert data["total_count"] == 2
    assert data["total_pages"] == 1
    assert [p["name"] for p in data["products"]] == ["Oat Milk", "Tofu"]
    assert data["products"][0]["store_names"] == ["Co-op", "Kroger"]
    assert data["products"][0]["average_rating"] == 4.0
    assert data["products"][0]["review_count"] == 1
    assert data["products"][1]["average_rating"] is None

    second_page = client.get("/api/cities/delaware-oh/products", params={"page": 2, "limit": 1}).json()
    assert [p["name"] for p in second_page["products"]] == ["Tofu"]
    assert second_page["total_pages"] == 2


def test_store_products_with_prices(client, db, make_city, make_store, make_product):
    make_city()
    store = make_store("Kroger", city="Delaware", state="OH")
    milk = make_product(name="Oat Milk")
    confirm(db, milk.id, store.id, price_range="$4.99")
    confirm(db, make_product(name="Pending").id, store.id, moderation_status="pending")

    products = client.get(f"/api/cities/delaware-oh/stores/{store.id}/products").json()["products"]
    assert [(p["name"], p["price_range"]) for p in products] == [("Oat Milk", "$4.99")]


def test_store_products_outside_city(client, make_city, make_store):
    make_city()
    store = make_store("Far Away", city="Columbus", state="OH")
    response = client.get(f"/api/cities/delaware-oh/stores/{store.id}/products")
    assert response.status_code == 404


def test_city_data_needs_published_page(client, make_city):
    make_city(is_active=False)
    assert client.get("/api/cities/delaware-oh/stores").status_code == 404
    assert client.get("/api/cities/delaware-oh/products").status_code == 404


# Edits


def test_city_edit_trust_gate(client, db, make_city, auth_headers, trusted_headers):
    page = make_city()

    pending = client.post(
        "/api/cities/delaware-oh/suggest-edit",
        headers=auth_headers,
        json={"field": "headline", "suggested_value": "Plant-based Delaware"},
    )
    assert pending.status_code == 201
    assert pending.json()["auto_applied"] is False
    db.refresh(page)
    assert page.headline == "Vegan shopping in Delaware"

    applied = client.post(
        "/api/cities/delaware-oh/suggest-edit",
        headers=trusted_headers,
        json={"field": "description", "suggested_value": "Updated guide."},
    )
    assert applied.json()["auto_applied"] is True
    assert client.get("/api/cities/delaware-oh").json()["city"]["description"] == "Updated guide."
    assert db.query(CityContentEdit).filter(CityContentEdit.status == "pending").count() == 1


def test_city_edit_rejects_state_field(client, make_city, auth_headers):
    make_city()
    response = client.post(
        "/api/cities/delaware-oh/suggest-edit",
        headers=auth_headers,
        json={"field": "state", "suggested_value": "PA"},
    )
    assert response.status_code == 422


def test_approve_city_edit(client, make_city, auth_headers, moderator_headers):
    make_city()
    edit_id = client.post(
        "/api/cities/delaware-oh/suggest-edit",
        headers=auth_headers,
        json={"field": "city_name", "suggested_value": "Delaware City"},
    ).json()["edit"]["id"]

    pending = client.get("/api/admin/content-edits/city", headers=moderator_headers).json()
    assert pending[0]["city_slug"] == "delaware-oh"

    client.post(f"/api/admin/content-edits/city/{edit_id}/approve", headers=moderator_headers)
    assert client.get("/api/cities/delaware-oh").json()["city"]["city_name"] == "Delaware City"


# Admin


def test_admin_city_crud(client, admin_headers):
    created = client.post(
        "/api/admin/cities",
        headers=admin_headers,
        json={
            "slug": "Athens-OH",
            "city_name": "Athens",
            "state": "oh",
            "headline": "Vegan Athens",
            "description": "College town groceries.",
        },
    )
    assert created.status_code == 201
    assert created.json()["slug"] == "athens-oh"
    assert created.json()["state"] == "OH"
    assert created.json()["is_active"] is False
    assert client.get("/api/cities/athens-oh").status_code == 404

    duplicate = client.post(
        "/api/admin/cities",
        headers=admin_headers,
        json={
            "slug": "athens-oh",
            "city_name": "Athens",
            "state": "OH",
            "headline": "Again",
            "description": "Again.",
        },
    )
    assert duplicate.status_code == 409

    updated = client.put("/api/admin/cities/athens-oh", headers=admin_headers, json={"is_active": True})
    assert updated.json()["is_active"] is True
    assert updated.json()["headline"] == "Vegan Athens"
    assert client.get("/api/cities/athens-oh").status_code == 200

    assert [c["slug"] for c in client.get("/api/admin/cities", headers=admin_headers).json()] == [
        "athens-oh"
    ]
    assert client.delete("/api/admin/cities/athens-oh", headers=admin_headers).status_code == 204
    assert client.put("/api/admin/cities/athens-oh", headers=admin_headers, json={}).status_code == 404


def test_city_admin_requires_admin(client, moderator_headers):
    assert client.get("/api/admin/cities", headers=moderator_headers).status_code == 403


# Geocoding


@pytest.fixture
def places():
    service = MagicMock(is_configured=True)
    service.reverse_geocode = AsyncMock(return_value={"city": "Delaware", "state": "OH"})
    app.dependency_overrides[get_google_places_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_google_places_service, None)


def test_geocode(client, places):
    response = client.get("/api/cities/geocode", params={"lat": 40.29, "lng": -83.07})
    assert response.status_code == 200
    assert response.json() == {"city": "Delaware", "state": "OH"}
    places.reverse_geocode.assert_awaited_once_with(40.29, -83.07)


def test_geocode_validates_coordinates(client, places):
    assert client.get("/api/cities/geocode", params={"lat": "north", "lng": 1}).status_code == 422
    assert client.get("/api/cities/geocode", params={"lat": 1}).status_code == 422


def test_geocode_unconfigured(client, places):
    places.is_configured = False
    assert client.get("/api/cities/geocode", params={"lat": 1, "lng": 1}).status_code == 503


def test_geocode_upstream_failure(client, places):
    places.reverse_geocode.return_value = None
    assert client.get("/api/cities/geocode", params={"lat": 1, "lng": 1}).status_code == 502


def test_parse_city_and_state():
    results = [
        {"address_components": [{"long_name": "Ohio", "short_name": "OH", "types": ["administrative_area_level_1"]}]},
        {
            "address_components": [
                {"long_name": "Delaware", "short_name": "Delaware", "types": ["locality", "political"]},
                {"long_name": "Ohio", "short_name": "OH", "types": ["administrative_area_level_1"]},
            ]
        },
    ]
    assert parse_city_and_state(results) == {"city": "Delaware", "state": "OH"}


def test_parse_city_falls_back_to_county():
    results = [
        {
            "address_components": [
                {"long_name": "Delaware County", "short_name": "Delaware County", "types": ["administrative_area_level_2"]},
                {"long_name": "Ohio", "short_name": "OH", "types": ["administrative_area_level_1"]},
            ]
        }
    ]
    assert parse_city_and_state(results) == {"city": "Delaware County", "state": "OH"}
