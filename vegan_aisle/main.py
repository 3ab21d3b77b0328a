"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vegan_aisle.api import (
    admin,
    auth,
    brands,
    cities,
    lists,
    oauth,
    products,
    reviews,
    sitemap,
    stores,
    user_products,
)
from vegan_aisle.config import get_settings
from vegan_aisle.errors import ServiceError, service_error_handler

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info(f"Starting The Vegan Aisle API ({settings.environment})")
    yield


app = FastAPI(
    title="The Vegan Aisle API",
    description="Vegan product catalog with community contributions and store availability",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(ServiceError, service_error_handler)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            settings.client_url,
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register routers
app.include_router(auth.router)
app.include_router(oauth.router)
app.include_router(products.router)
app.include_router(user_products.router)
app.include_router(stores.router)
app.include_router(lists.router)
app.include_router(reviews.router)
app.include_router(brands.router)
app.include_router(cities.router)
app.include_router(admin.router)
app.include_router(sitemap.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
