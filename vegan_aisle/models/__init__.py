"""SQLAlchemy models."""

from vegan_aisle.models.availability import Availability, AvailabilityReport
from vegan_aisle.models.brand import BrandContentEdit, BrandPage
from vegan_aisle.models.city import CityContentEdit, CityLandingPage
from vegan_aisle.models.password_reset import PasswordResetToken
from vegan_aisle.models.product import Product, UserProduct
from vegan_aisle.models.review import Review, ReviewHelpfulVote
from vegan_aisle.models.shopping_list import ShoppingList, ShoppingListItem
from vegan_aisle.models.store import Store, StoreChain
from vegan_aisle.models.taxonomy import ArchivedFilter, FilterDisplayName
from vegan_aisle.models.user import User

__all__ = [
    "User",
    "PasswordResetToken",
    "Product",
    "UserProduct",
    "Store",
    "StoreChain",
    "Availability",
    "AvailabilityReport",
    "ShoppingList",
    "ShoppingListItem",
    "Review",
    "ReviewHelpfulVote",
    "ArchivedFilter",
    "FilterDisplayName",
    "BrandPage",
    "BrandContentEdit",
    "CityLandingPage",
    "CityContentEdit",
]
