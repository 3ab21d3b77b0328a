"""Pydantic schemas for API requests and responses."""

from vegan_aisle.schemas.auth import AuthResponse, UserLogin, UserResponse, UserSignup
from vegan_aisle.schemas.availability import (
    AvailabilityResponse,
    ChainCreate,
    ChainResponse,
    StoreCreate,
    StoreResponse,
)
from vegan_aisle.schemas.product import (
    ProductDetail,
    ProductSearchResponse,
    ProductSummary,
    UserProductCreate,
    UserProductResponse,
)
from vegan_aisle.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from vegan_aisle.schemas.shopping_list import (
    ListItemCreate,
    ShoppingListCreate,
    ShoppingListDetail,
    ShoppingListResponse,
)

__all__ = [
    "UserSignup",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "ProductSummary",
    "ProductDetail",
    "ProductSearchResponse",
    "UserProductCreate",
    "UserProductResponse",
    "AvailabilityResponse",
    "StoreCreate",
    "StoreResponse",
    "ChainCreate",
    "ChainResponse",
    "ShoppingListCreate",
    "ShoppingListResponse",
    "ShoppingListDetail",
    "ListItemCreate",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
]
