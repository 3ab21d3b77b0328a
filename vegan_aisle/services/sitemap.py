"""XML sitemap of public catalog pages."""

import logging
from urllib.parse import quote, urlparse
from xml.sax.saxutils import escape

from sqlalchemy.orm import Session

from vegan_aisle.config import get_settings
from vegan_aisle.models.brand import BrandPage
from vegan_aisle.models.city import CityLandingPage
from vegan_aisle.models.enums import ProductStatus
from vegan_aisle.models.mixins import as_utc
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.store import StoreChain

logger = logging.getLogger(__name__)

MAX_PRODUCTS = 1000
DEFAULT_BASE_URL = "https://theveganaisle.com"
HOSTING_DOMAINS = ("render.com", "onrender.com")
LOCAL_HOSTS = ("localhost", "127.0.0.1", "0.0.0.0")


def _is_public(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    if not host or host in LOCAL_HOSTS:
        return False
    return not any(host == d or host.endswith(f".{d}") for d in HOSTING_DOMAINS)


def get_base_url() -> str:
    """Public site URL; never a hosting-provider or local address."""
    settings = get_settings()
    for candidate in (settings.canonical_url, settings.client_url):
        if candidate and _is_public(candidate):
            return candidate.rstrip("/")
    return DEFAULT_BASE_URL


def _url(loc: str, changefreq: str, priority: str, lastmod=None) -> str:
    parts = [f"    <loc>{escape(loc)}</loc>"]
    if lastmod is not None:
        parts.append(f"    <lastmod>{as_utc(lastmod).date().isoformat()}</lastmod>")
    parts.append(f"    <changefreq>{changefreq}</changefreq>")
    parts.append(f"    <priority>{priority}</priority>")
    return "  <url>\n" + "\n".join(parts) + "\n  </url>"


def build_sitemap(db: Session) -> str:
    base = get_base_url()
    urls = [
        _url(f"{base}/", "daily", "1.0"),
        _url(f"{base}/search", "daily", "0.9"),
    ]

    cities = (
        db.query(CityLandingPage)
        .filter(CityLandingPage.is_active.is_(True))
        .order_by(CityLandingPage.slug)
        .all()
    )
    urls += [
        _url(f"{base}/cities/{city.slug}", "weekly", "0.8", city.updated_at) for city in cities
    ]

    brands = db.query(BrandPage).filter(BrandPage.is_active.is_(True)).order_by(BrandPage.slug).all()
    urls += [
        _url(f"{base}/brands/{quote(brand.slug, safe='')}", "weekly", "0.7", brand.updated_at)
        for brand in brands
    ]

    chains = (
        db.query(StoreChain).filter(StoreChain.is_active.is_(True)).order_by(StoreChain.name).all()
    )
    urls += [
        _url(f"{base}/retailers/chain/{chain.slug}", "weekly", "0.6", chain.updated_at)
        for chain in chains
    ]

    featured = (
        db.query(Product)
        .filter(Product.featured.is_(True), Product.archived.is_(False))
        .order_by(Product.featured_order.asc())
        .all()
    )
    urls += [
        _url(f"{base}/products/{p.id}", "weekly", "0.8", p.updated_at) for p in featured
    ]

    featured_ids = {p.id for p in featured}
    others = (
        db.query(Product)
        .filter(Product.archived.is_(False), Product.featured.is_(False))
        .order_by(Product.updated_at.desc())
        .limit(MAX_PRODUCTS)
        .all()
    )
    others += (
        db.query(UserProduct)
        .filter(
            UserProduct.source_product_id.is_(None),
            UserProduct.status == ProductStatus.APPROVED.value,
            UserProduct.archived.is_(False),
        )
        .order_by(UserProduct.updated_at.desc())
        .limit(MAX_PRODUCTS)
        .all()
    )
    others.sort(key=lambda p: as_utc(p.updated_at), reverse=True)
    urls += [
        _url(f"{base}/products/{p.id}", "monthly", "0.5", p.updated_at)
        for p in others[:MAX_PRODUCTS]
        if p.id not in featured_ids
    ]

    logger.debug(f"Built sitemap with {len(urls)} urls")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(urls)
        + "\n</urlset>\n"
    )
