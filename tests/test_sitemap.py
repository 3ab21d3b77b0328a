"""Sitemap tests."""

from types import SimpleNamespace
from unittest.mock import patch

from vegan_aisle.models import BrandPage, CityLandingPage, UserProduct
from vegan_aisle.services.sitemap import DEFAULT_BASE_URL, get_base_url


def settings(canonical_url=None, client_url="http://localhost:5173"):
    return SimpleNamespace(canonical_url=canonical_url, client_url=client_url)


def test_base_url_prefers_canonical():
    with patch(
        "vegan_aisle.services.sitemap.get_settings",
        return_value=settings("https://example.org/", "https://app.example.org"),
    ):
        assert get_base_url() == "https://example.org"


def test_base_url_skips_hosting_domains():
    with patch(
        "vegan_aisle.services.sitemap.get_settings",
        return_value=settings(None, "https://vegan-aisle.onrender.com"),
    ):
        assert get_base_url() == DEFAULT_BASE_URL


def test_base_url_skips_local_client_url():
    with patch("vegan_aisle.services.sitemap.get_settings", return_value=settings()):
        assert get_base_url() == DEFAULT_BASE_URL


def test_base_url_skips_render_domains():
    for url in ("https://vegan-aisle.render.com", "http://127.0.0.1:8000"):
        with patch("vegan_aisle.services.sitemap.get_settings", return_value=settings(url, url)):
            assert get_base_url() == DEFAULT_BASE_URL


def test_base_url_allows_lookalike_domain():
    with patch(
        "vegan_aisle.services.sitemap.get_settings",
        return_value=settings(None, "https://surrender.com"),
    ):
        assert get_base_url() == "https://surrender.com"


def test_sitemap_lists_public_pages(client, db, make_product, make_chain, make_user):
    make_chain("Whole Foods Market")
    make_chain("Closed Chain", is_active=False)
    featured = make_product(name="Featured", featured=True, featured_order=1)
    regular = make_product(name="Regular")
    archived = make_product(name="Archived", archived=True)

    user = make_user("contributor@example.com")
    approved = UserProduct(name="Approved", brand="B", user_id=user.user_id, status="approved")
    pending = UserProduct(name="Pending", brand="B", user_id=user.user_id, status="pending")
    db.add_all([approved, pending])
    db.commit()

    with patch(
        "vegan_aisle.services.sitemap.get_settings",
        return_value=settings("https://example.org"),
    ):
        response = client.get("/sitemap.xml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    body = response.text
    assert body.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<loc>https://example.org/</loc>" in body
    assert "<loc>https://example.org/search</loc>" in body
    assert "https://example.org/retailers/chain/whole-foods-market" in body
    assert "closed-chain" not in body
    chain = body.split("/retailers/chain/whole-foods-market</loc>")[1].split("</url>")[0]
    assert "<priority>0.6</priority>" in chain
    assert "/product/" not in body
    assert f"/products/{featured.id}</loc>" in body
    assert body.count(f"/products/{featured.id}</loc>") == 1
    assert f"/products/{regular.id}</loc>" in body
    assert f"/products/{approved.id}</loc>" in body
    assert archived.id not in body
    assert pending.id not in body


def test_sitemap_also_served_under_api(client):
    response = client.get("/api/sitemap.xml")
    assert response.status_code == 200
    assert "<urlset" in response.text


def test_sitemap_lists_city_and_brand_pages(client, db):
    db.add_all(
        [
            CityLandingPage(
                slug="delaware-oh",
                city_name="Delaware",
                state="OH",
                headline="Vegan in Delaware",
                description="Where to shop.",
                is_active=True,
            ),
            CityLandingPage(
                slug="draft-city",
                city_name="Draft",
                state="OH",
                headline="Draft",
                description="Not published.",
            ),
            BrandPage(brand_name="Oatly", slug="oatly", display_name="Oatly"),
            BrandPage(brand_name="Gone", slug="gone", display_name="Gone", is_active=False),
        ]
    )
    db.commit()

    with patch(
        "vegan_aisle.services.sitemap.get_settings",
        return_value=settings("https://example.org"),
    ):
        body = client.get("/sitemap.xml").text

    city = body.split("<loc>https://example.org/cities/delaware-oh</loc>")[1].split("</url>")[0]
    assert "<priority>0.8</priority>" in city
    brand = body.split("<loc>https://example.org/brands/oatly</loc>")[1].split("</url>")[0]
    assert "<priority>0.7</priority>" in brand
    assert "draft-city" not in body
    assert "/brands/gone" not in body
