"""Tests for brand pages and brand page edits."""

from vegan_aisle.models import BrandContentEdit, BrandPage, UserProduct


def suggest(client, headers, brand, field="description", value="Swedish oat drinks.", **extra):
    return client.post(
        f"/api/brands/{brand}/suggest-edit",
        headers=headers,
        json={"field": field, "suggested_value": value, **extra},
    )


def test_placeholder_page_for_brand_with_products(client, make_product):
    make_product(brand="Oatly")

    response = client.get("/api/brands/oatly/page")
    assert response.status_code == 200
    data = response.json()
    assert data["exists"] is False
    assert data["id"] is None
    assert data["slug"] == "oatly"
    assert data["display_name"] == "oatly"


def test_brand_from_approved_contribution(client, db, auth_headers):
    db.add(UserProduct(name="Tofu", brand="Hodo", user_id=auth_headers.user_id, status="approved"))
    db.add(UserProduct(name="Seitan", brand="Hidden", user_id=auth_headers.user_id, status="pending"))
    db.commit()

    assert client.get("/api/brands/Hodo/page").status_code == 200
    assert client.get("/api/brands/Hidden/page").status_code == 404


def test_unknown_brand(client, make_product):
    make_product(brand="Oatly", archived=True)
    response = client.get("/api/brands/Oatly/page")
    assert response.status_code == 404
    assert response.json()["detail"] == "Brand not found"


def test_saved_page_found_by_slug_or_name(client, db):
    db.add(BrandPage(brand_name="Miyoko's Creamery", slug="miyoko-s-creamery", display_name="Miyoko's"))
    db.commit()

    by_slug = client.get("/api/brands/miyoko-s-creamery/page").json()
    by_name = client.get("/api/brands/MIYOKO'S CREAMERY/page").json()
    assert by_slug["exists"] is True
    assert by_slug["display_name"] == "Miyoko's"
    assert by_name["id"] == by_slug["id"]


def test_untrusted_edit_waits_for_review(client, db, make_product, auth_headers):
    make_product(brand="Oatly")

    response = suggest(client, auth_headers, "Oatly", reason="From their site")
    assert response.status_code == 201
    data = response.json()
    assert data["auto_applied"] is False
    assert data["message"] == "Edit suggestion submitted for review"
    assert data["edit"]["status"] == "pending"
    assert data["edit"]["field"] == "description"

    page = db.query(BrandPage).one()
    assert page.brand_name == "Oatly"
    assert page.created_by == auth_headers.user_id
    assert page.description is None
    assert client.get("/api/brands/oatly/page").json()["exists"] is True


def test_trusted_edit_applies_immediately(client, db, make_product, trusted_headers):
    make_product(brand="Oatly")

    response = suggest(client, trusted_headers, "Oatly", field="website_url", value=" https://oatly.com ")
    assert response.status_code == 201
    assert response.json()["auto_applied"] is True
    assert response.json()["message"] == "Edit applied successfully"

    assert client.get("/api/brands/oatly/page").json()["website_url"] == "https://oatly.com"
    edit = db.query(BrandContentEdit).one()
    assert edit.status == "approved"
    assert edit.trusted_contribution is True
    assert edit.needs_review is True
    assert edit.original_value == ""
    assert db.query(BrandPage).one().updated_by == trusted_headers.user_id


def test_admin_edit_skips_trusted_queue(client, db, make_product, admin_headers):
    make_product(brand="Oatly")
    suggest(client, admin_headers, "Oatly", field="display_name", value="Oatly AB")

    edit = db.query(BrandContentEdit).one()
    assert edit.auto_applied is True
    assert edit.needs_review is False


def test_edit_with_same_value(client, make_product, trusted_headers):
    make_product(brand="Oatly")
    response = suggest(client, trusted_headers, "Oatly", field="display_name", value="Oatly")
    assert response.status_code == 400
    assert response.json()["detail"] == "Suggested value is the same as the current value"


def test_edit_rejects_unknown_field(client, make_product, auth_headers):
    make_product(brand="Oatly")
    response = suggest(client, auth_headers, "Oatly", field="logo_url", value="https://x/logo.png")
    assert response.status_code == 422


def test_edit_requires_login(client, make_product):
    make_product(brand="Oatly")
    assert suggest(client, {}, "Oatly").status_code in (401, 403)


def test_edit_for_unknown_brand(client, auth_headers):
    assert suggest(client, auth_headers, "Nobody").status_code == 404


# Moderation


def test_moderator_approves_pending_edit(client, db, make_product, auth_headers, moderator_headers):
    make_product(brand="Oatly")
    edit_id = suggest(client, auth_headers, "Oatly").json()["edit"]["id"]

    pending = client.get("/api/admin/content-edits/brand", headers=moderator_headers).json()
    assert [e["id"] for e in pending] == [edit_id]
    assert pending[0]["brand_slug"] == "oatly"

    response = client.post(
        f"/api/admin/content-edits/brand/{edit_id}/approve", headers=moderator_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["reviewed_by"] == moderator_headers.user_id
    assert client.get("/api/brands/oatly/page").json()["description"] == "Swedish oat drinks."

    again = client.post(f"/api/admin/content-edits/brand/{edit_id}/approve", headers=moderator_headers)
    assert again.status_code == 409


def test_rejecting_pending_edit_leaves_page(client, db, make_product, auth_headers, moderator_headers):
    make_product(brand="Oatly")
    edit_id = suggest(client, auth_headers, "Oatly").json()["edit"]["id"]

    response = client.post(
        f"/api/admin/content-edits/brand/{edit_id}/reject",
        headers=moderator_headers,
        json={"note": "Marketing copy"},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"
    assert response.json()["review_note"] == "Marketing copy"
    assert db.query(BrandPage).one().description is None


def test_rejecting_trusted_edit_reverts_page(client, make_product, trusted_headers, moderator_headers):
    make_product(brand="Oatly")
    edit_id = suggest(client, trusted_headers, "Oatly", field="display_name", value="OATLY!").json()[
        "edit"
    ]["id"]

    queue = client.get("/api/admin/trusted-review", headers=moderator_headers).json()
    assert [e["id"] for e in queue["brand_edits"]] == [edit_id]

    response = client.post(
        f"/api/admin/trusted-review/brand_edit/{edit_id}/reject",
        headers=moderator_headers,
        json={"reason": "Shouting"},
    )
    assert response.status_code == 200
    assert client.get("/api/brands/oatly/page").json()["display_name"] == "Oatly"
    assert client.get("/api/admin/trusted-review", headers=moderator_headers).json()["brand_edits"] == []


def test_reject_keeps_later_edit(client, make_product, trusted_headers, admin_headers):
    make_product(brand="Oatly")
    first = suggest(client, trusted_headers, "Oatly", value="First").json()["edit"]["id"]
    suggest(client, admin_headers, "Oatly", value="Second")

    client.post(f"/api/admin/content-edits/brand/{first}/reject", headers=admin_headers)
    assert client.get("/api/brands/oatly/page").json()["description"] == "Second"


def test_mark_trusted_edit_reviewed(client, db, make_product, trusted_headers, moderator_headers):
    make_product(brand="Oatly")
    edit_id = suggest(client, trusted_headers, "Oatly").json()["edit"]["id"]

    response = client.post(
        f"/api/admin/trusted-review/brand_edit/{edit_id}/reviewed", headers=moderator_headers
    )
    assert response.status_code == 200
    edit = db.query(BrandContentEdit).one()
    db.refresh(edit)
    assert edit.needs_review is False
    assert edit.status == "approved"


def test_content_edit_queue_requires_moderator(client, auth_headers):
    response = client.get("/api/admin/content-edits/brand", headers=auth_headers)
    assert response.status_code == 403
