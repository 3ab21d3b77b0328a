"""Tests for catalog resolution, search, taxonomy and user contributions."""

from datetime import UTC, datetime

from vegan_aisle.models import Product, User, UserProduct
from vegan_aisle.models.enums import FilterType
from vegan_aisle.services import catalog, taxonomy


def contribute(client, headers, **fields):
    payload = {"name": "Cashew Cheese", "brand": "Miyoko's", "categories": ["en:cheeses"]}
    payload.update(fields)
    response = client.post("/api/user-products", headers=headers, json=payload)
    assert response.status_code == 201
    return response.json()


def suggest_edit(client, headers, source_id, **fields):
    payload = {"source_product_id": source_id, "name": "Oat Milk Barista", "brand": "Oatly"}
    payload.update(fields)
    response = client.post("/api/user-products/edit-api-product", headers=headers, json=payload)
    assert response.status_code == 201
    return response.json()


# Taxonomy helpers


def test_normalize_filter_value():
    assert taxonomy.normalize_filter_value("en:plant-based-milks") == "plant based milks"
    assert taxonomy.normalize_filter_value("  Dairy   free ") == "Dairy free"
    assert taxonomy.filter_key("en:Plant-Based-Milks") == "plant based milks"


def test_archive_variants():
    assert taxonomy.archive_variants("en:plant-based-milks") == [
        "plant based milks",
        "plant-based-milks",
        "en:plant-based-milks",
    ]


def test_categories_skip_non_english_and_duplicates(client, make_product):
    make_product(categories=["en:plant-based-milks", "Plant based milks", "fr:laits-vegetaux"])
    make_product(name="Tofu", brand="Hodo", categories=["en:tofu"])

    response = client.get("/api/products/categories")
    assert response.status_code == 200
    values = [c["value"] for c in response.json()]
    assert values == ["plant based milks", "tofu"]


def test_tags_include_system_tags(client):
    response = client.get("/api/products/tags")
    values = {t["value"] for t in response.json()}
    assert {"organic", "gluten free", "vegan"} <= values


def test_archived_category_hidden(client, db, make_product, admin_headers):
    make_product(categories=["en:plant-based-milks"])
    taxonomy.archive_filter(db, FilterType.CATEGORY, "plant based milks", admin_headers.user_id)

    response = client.get("/api/products/categories")
    assert response.json() == []


def test_display_name_used_for_listing_and_search(client, db, make_product, admin_headers):
    make_product(categories=["en:plant-based-milks"])
    taxonomy.set_display_name(
        db, FilterType.CATEGORY, "en:plant-based-milks", "Non-Dairy Milk", admin_headers.user_id
    )

    categories = client.get("/api/products/categories").json()
    assert categories == [{"value": "plant based milks", "display_name": "Non-Dairy Milk"}]

    response = client.get("/api/products", params={"category": "Non-Dairy Milk"})
    assert response.json()["total_count"] == 1


# Resolution


def test_resolve_curated_product(db, make_product):
    product = make_product()
    resolved = catalog.resolve_product(db, product.id)
    assert resolved.source == catalog.SOURCE_CURATED
    assert resolved.record is product
    assert resolved.status == "approved"


def test_resolve_missing_product(db):
    assert catalog.resolve_product(db, "does-not-exist") is None


def test_archived_product_only_with_allow_archived(db, make_product):
    product = make_product(archived=True)
    assert catalog.resolve_product(db, product.id) is None
    assert catalog.resolve_product(db, product.id, allow_archived=True) is not None


def test_pending_contribution_visible_to_owner_only(client, db, auth_headers, other_headers):
    created = contribute(client, auth_headers)
    assert created["status"] == "pending"

    assert client.get(f"/api/products/{created['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/products/{created['id']}", headers=other_headers).status_code == 404
    assert client.get(f"/api/products/{created['id']}").status_code == 404


def test_pending_contribution_visible_to_moderator(client, auth_headers, moderator_headers):
    created = contribute(client, auth_headers)
    response = client.get(f"/api/products/{created['id']}", headers=moderator_headers)
    assert response.status_code == 200
    assert response.json()["source"] == "user_contribution"


def test_own_pending_edit_overlays_for_author_only(client, make_product, auth_headers):
    product = make_product()
    suggest_edit(client, auth_headers, product.id)

    mine = client.get(f"/api/products/{product.id}", headers=auth_headers).json()
    assert mine["name"] == "Oat Milk Barista"
    assert mine["source"] == "edit_overlay"
    assert mine["status"] == "pending"
    assert mine["id"] == product.id

    public = client.get(f"/api/products/{product.id}").json()
    assert public["name"] == "Oat Milk"
    assert public["source"] == "curated"


def test_trusted_edit_goes_live(client, make_product, trusted_headers):
    product = make_product()
    edit = suggest_edit(client, trusted_headers, product.id)
    assert edit["status"] == "approved"

    public = client.get(f"/api/products/{product.id}").json()
    assert public["name"] == "Oat Milk Barista"
    assert public["source"] == "edit_overlay"

    search = client.get("/api/products", params={"q": "barista"}).json()
    assert [item["id"] for item in search["items"]] == [product.id]


def test_newer_approved_edit_replaces_older(client, db, make_product, trusted_headers):
    product = make_product()
    suggest_edit(client, trusted_headers, product.id, name="First Edit")
    suggest_edit(client, trusted_headers, product.id, name="Second Edit")

    overlays = db.query(UserProduct).filter(UserProduct.source_product_id == product.id).all()
    assert [o.name for o in overlays] == ["Second Edit"]
    assert client.get(f"/api/products/{product.id}").json()["name"] == "Second Edit"


def test_trusted_edit_of_contribution_is_merged(client, db, trusted_headers):
    created = contribute(client, trusted_headers)
    suggest_edit(client, trusted_headers, created["id"], name="Aged Cashew Cheese", brand="Miyoko's")

    rows = db.query(UserProduct).all()
    assert len(rows) == 1
    assert rows[0].name == "Aged Cashew Cheese"


def test_edit_of_unknown_product(client, auth_headers):
    response = client.post(
        "/api/user-products/edit-api-product",
        headers=auth_headers,
        json={"source_product_id": "missing", "name": "X", "brand": "Y"},
    )
    assert response.status_code == 404


# Search


def test_search_by_name_and_brand(client, make_product):
    make_product(name="Oat Milk", brand="Oatly")
    make_product(name="Soy Milk", brand="Silk")
    make_product(name="Tempeh", brand="Lightlife", categories=["en:tempeh"])

    by_name = client.get("/api/products", params={"q": "milk"}).json()
    assert [i["name"] for i in by_name["items"]] == ["Oat Milk", "Soy Milk"]

    by_brand = client.get("/api/products", params={"q": "SILK"}).json()
    assert by_brand["total_count"] == 1


def test_search_pagination(client, make_product):
    for i in range(5):
        make_product(name=f"Product {i}")

    response = client.get("/api/products", params={"page": 2, "page_size": 2}).json()
    assert response["total_count"] == 5
    assert response["total_pages"] == 3
    assert [i["name"] for i in response["items"]] == ["Product 2", "Product 3"]


def test_search_excludes_archived_and_pending(client, make_product, auth_headers):
    make_product(name="Hidden Milk", archived=True)
    contribute(client, auth_headers, name="Pending Milk")
    make_product(name="Visible Milk")

    response = client.get("/api/products", params={"q": "milk"}).json()
    assert [i["name"] for i in response["items"]] == ["Visible Milk"]


def test_search_by_tag(client, make_product):
    make_product(name="Organic Tofu", tags=["vegan", "en:organic"])
    make_product(name="Plain Tofu")

    response = client.get("/api/products", params={"tag": "organic"}).json()
    assert [i["name"] for i in response["items"]] == ["Organic Tofu"]


def test_featured_products_in_order(client, make_product):
    now = datetime.now(UTC)
    make_product(name="Second", featured=True, featured_order=2, featured_at=now)
    make_product(name="First", featured=True, featured_order=1, featured_at=now)
    make_product(name="Not Featured")

    response = client.get("/api/products/featured").json()
    assert [p["name"] for p in response] == ["First", "Second"]
    assert all(p["featured"] for p in response)


def test_product_detail_includes_rating_stats(client, make_product):
    product = make_product()
    data = client.get(f"/api/products/{product.id}").json()
    assert data["rating_stats"]["review_count"] == 0
    assert data["availability"] == []


def test_admin_sees_archived_product(client, make_product, admin_headers):
    product = make_product(archived=True)
    assert client.get(f"/api/products/{product.id}").status_code == 404
    response = client.get(f"/api/products/{product.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["archived"] is True


# User contributions


def test_contribution_defaults(client, auth_headers):
    created = contribute(client, auth_headers, size_or_variant="")
    assert created["size_or_variant"] == "Standard"
    assert created["tags"] == ["vegan"]
    assert created["trusted_contribution"] is False
    assert created["needs_review"] is True


def test_admin_contribution_skips_review(client, admin_headers):
    created = contribute(client, admin_headers)
    assert created["status"] == "approved"
    assert created["needs_review"] is False


def test_blank_name_rejected(client, auth_headers):
    response = client.post(
        "/api/user-products", headers=auth_headers, json={"name": "   ", "brand": "Brand"}
    )
    assert response.status_code == 422


def test_list_my_products(client, auth_headers, other_headers):
    contribute(client, auth_headers, name="Mine")
    contribute(client, other_headers, name="Theirs")

    response = client.get("/api/user-products", headers=auth_headers)
    assert [p["name"] for p in response.json()] == ["Mine"]


def test_get_contribution_hidden_from_other_users(client, auth_headers, other_headers):
    created = contribute(client, auth_headers)
    assert client.get(f"/api/user-products/{created['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/user-products/{created['id']}", headers=other_headers).status_code == 404


def test_untrusted_update_sends_back_to_pending(client, db, auth_headers, admin_headers):
    created = contribute(client, auth_headers)
    row = db.query(UserProduct).filter(UserProduct.id == created["id"]).one()
    row.status = "approved"
    db.commit()

    response = client.put(
        f"/api/user-products/{created['id']}", headers=auth_headers, json={"name": "Renamed"}
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["status"] == "pending"
    assert response.json()["brand"] == "Miyoko's"


def test_update_someone_elses_product(client, auth_headers, other_headers):
    created = contribute(client, auth_headers)
    response = client.put(
        f"/api/user-products/{created['id']}", headers=other_headers, json={"name": "Mine now"}
    )
    assert response.status_code == 403


def test_admin_can_delete_any_product(client, db, auth_headers, admin_headers):
    created = contribute(client, auth_headers)
    response = client.delete(f"/api/user-products/{created['id']}", headers=admin_headers)
    assert response.status_code == 204
    assert db.query(UserProduct).count() == 0


def test_contribution_with_store_availability(client, db, trusted_headers, make_store):
    store = make_store()
    created = contribute(
        client,
        trusted_headers,
        store_availabilities=[{"store_id": store.id, "price_range": "$5-7"}],
    )

    availability = client.get(f"/api/products/{created['id']}/availability").json()
    assert len(availability) == 1
    assert availability[0]["store_name"] == "Whole Foods"
    assert availability[0]["price_range"] == "$5-7"
    assert availability[0]["moderation_status"] == "confirmed"


def test_visible_catalog_counts(db, make_product):
    make_product()
    db.add(Product(name="Archived", brand="B", archived=True, categories=[], tags=[]))
    user = User(email="u@example.com", display_name="U")
    db.add(user)
    db.commit()
    db.add(UserProduct(name="Approved", brand="B", user_id=user.id, status="approved", categories=[], tags=[]))
    db.add(UserProduct(name="Pending", brand="B", user_id=user.id, status="pending", categories=[], tags=[]))
    db.commit()

    names = sorted(r.record.name for r in catalog.visible_catalog(db))
    assert names == ["Approved", "Oat Milk"]
