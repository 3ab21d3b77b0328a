"""Shopping list API tests."""

from vegan_aisle.models import Availability, ShoppingListItem


def create_list(client, headers, name="Weekly Shop"):
    response = client.post("/api/lists", headers=headers, json={"name": name})
    assert response.status_code == 201
    return response.json()


def add_item(client, headers, list_id, product_id, **fields):
    return client.post(
        f"/api/lists/{list_id}/items", headers=headers, json={"product_id": product_id, **fields}
    )


def test_create_list(client, auth_headers):
    """Test creating a list."""
    data = create_list(client, auth_headers, "  Party  ")
    assert data["name"] == "Party"
    assert data["user_id"] == auth_headers.user_id


def test_get_lists_newest_first(client, auth_headers):
    create_list(client, auth_headers, "First")
    create_list(client, auth_headers, "Second")

    response = client.get("/api/lists", headers=auth_headers)
    assert [lst["name"] for lst in response.json()] == ["Second", "First"]


def test_default_list_created_once(client, auth_headers):
    first = client.get("/api/lists/default", headers=auth_headers).json()
    second = client.get("/api/lists/default", headers=auth_headers).json()

    assert first["name"] == "My Vegan List"
    assert first["id"] == second["id"]
    assert len(client.get("/api/lists", headers=auth_headers).json()) == 1


def test_default_list_is_oldest(client, auth_headers):
    oldest = create_list(client, auth_headers, "Oldest")
    create_list(client, auth_headers, "Newer")

    assert client.get("/api/lists/default", headers=auth_headers).json()["id"] == oldest["id"]


def test_lists_are_private(client, auth_headers, other_headers):
    mine = create_list(client, auth_headers)

    assert client.get(f"/api/lists/{mine['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/api/lists/{mine['id']}", headers=other_headers).status_code == 404
    assert client.get("/api/lists", headers=other_headers).json() == []


def test_add_item_with_product_and_hints(client, make_product, make_store, trusted_headers):
    product = make_product()
    store = make_store()
    client.post(
        f"/api/products/{product.id}/availability",
        headers=trusted_headers,
        json={"store_availabilities": [{"store_id": store.id, "price_range": "$4"}]},
    )
    shopping_list = create_list(client, trusted_headers)

    response = add_item(client, trusted_headers, shopping_list["id"], product.id, note="the big one")
    assert response.status_code == 201
    item = response.json()["items"][0]
    assert item["quantity"] == 1
    assert item["note"] == "the big one"
    assert item["product"]["name"] == "Oat Milk"
    assert item["availability_hints"] == [
        {
            "store_id": store.id,
            "store_name": "Whole Foods",
            "store_type": "brick_and_mortar",
            "price_range": "$4",
            "stock_status": "unknown",
            "last_stock_report_at": None,
            "recent_in_stock_count": 0,
            "recent_out_of_stock_count": 0,
        }
    ]


def test_pending_availability_not_a_hint(client, db, make_product, make_store, auth_headers):
    product = make_product()
    store = make_store()
    db.add(Availability(product_id=product.id, store_id=store.id, moderation_status="pending"))
    db.commit()
    shopping_list = create_list(client, auth_headers)

    response = add_item(client, auth_headers, shopping_list["id"], product.id)
    assert response.json()["items"][0]["availability_hints"] == []


def test_adding_same_product_bumps_quantity(client, db, make_product, auth_headers):
    product = make_product()
    shopping_list = create_list(client, auth_headers)

    add_item(client, auth_headers, shopping_list["id"], product.id)
    response = add_item(client, auth_headers, shopping_list["id"], product.id, quantity=2)

    items = response.json()["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 3
    assert db.query(ShoppingListItem).count() == 1


def test_add_unknown_product(client, auth_headers):
    shopping_list = create_list(client, auth_headers)
    response = add_item(client, auth_headers, shopping_list["id"], "missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


def test_add_item_invalid_quantity(client, make_product, auth_headers):
    product = make_product()
    shopping_list = create_list(client, auth_headers)
    response = add_item(client, auth_headers, shopping_list["id"], product.id, quantity=0)
    assert response.status_code == 422


def test_archived_product_item_has_no_product(client, db, make_product, auth_headers):
    product = make_product()
    shopping_list = create_list(client, auth_headers)
    add_item(client, auth_headers, shopping_list["id"], product.id)

    product.archived = True
    db.commit()

    data = client.get(f"/api/lists/{shopping_list['id']}", headers=auth_headers).json()
    assert data["items"][0]["product"] is None


def test_update_item(client, make_product, auth_headers):
    product = make_product()
    shopping_list = create_list(client, auth_headers)
    item = add_item(client, auth_headers, shopping_list["id"], product.id, note="old").json()["items"][0]

    response = client.put(
        f"/api/lists/{shopping_list['id']}/items/{item['id']}",
        headers=auth_headers,
        json={"quantity": 4},
    )
    assert response.status_code == 200
    updated = response.json()["items"][0]
    assert updated["quantity"] == 4
    assert updated["note"] == "old"

    response = client.put(
        f"/api/lists/{shopping_list['id']}/items/{item['id']}",
        headers=auth_headers,
        json={"note": None},
    )
    assert response.json()["items"][0]["note"] is None


def test_remove_item(client, make_product, auth_headers):
    product = make_product()
    shopping_list = create_list(client, auth_headers)
    item = add_item(client, auth_headers, shopping_list["id"], product.id).json()["items"][0]

    response = client.delete(
        f"/api/lists/{shopping_list['id']}/items/{item['id']}", headers=auth_headers
    )
    assert response.status_code == 204

    data = client.get(f"/api/lists/{shopping_list['id']}", headers=auth_headers).json()
    assert data["items"] == []


def test_item_of_other_list_not_found(client, make_product, auth_headers):
    product = make_product()
    first = create_list(client, auth_headers, "First")
    second = create_list(client, auth_headers, "Second")
    item = add_item(client, auth_headers, first["id"], product.id).json()["items"][0]

    response = client.delete(f"/api/lists/{second['id']}/items/{item['id']}", headers=auth_headers)
    assert response.status_code == 404


def test_delete_list_removes_items(client, db, make_product, auth_headers):
    product = make_product()
    shopping_list = create_list(client, auth_headers)
    add_item(client, auth_headers, shopping_list["id"], product.id)

    response = client.delete(f"/api/lists/{shopping_list['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert db.query(ShoppingListItem).count() == 0
