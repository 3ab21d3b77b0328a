"""Enums for model fields."""

from enum import Enum


class UserRole(str, Enum):
    """Account roles."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"

    def can_moderate(self) -> bool:
        """Check if this role may use the moderation queues."""
        return self in (UserRole.MODERATOR, UserRole.ADMIN)


class AuthProvider(str, Enum):
    """How an account signs in."""

    LOCAL = "local"
    GOOGLE = "google"
    APPLE = "apple"


class ProductStatus(str, Enum):
    """Moderation state of contributed products and reviews."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ModerationStatus(str, Enum):
    """Moderation state of availability rows and stores."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class AvailabilityStatus(str, Enum):
    """Whether a product is known to be stocked at a store."""

    KNOWN = "known"
    USER_REPORTED = "user_reported"
    UNKNOWN = "unknown"


class AvailabilitySource(str, Enum):
    """Where an availability row came from."""

    SEED_DATA = "seed_data"
    USER_CONTRIBUTION = "user_contribution"
    ADMIN = "admin"


class StockStatus(str, Enum):
    """Shopper-reported shelf status."""

    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    UNKNOWN = "unknown"


class StoreType(str, Enum):
    """Kinds of retailer."""

    BRICK_AND_MORTAR = "brick_and_mortar"
    ONLINE_RETAILER = "online_retailer"
    BRAND_DIRECT = "brand_direct"


class ChainType(str, Enum):
    """Reach of a store chain."""

    NATIONAL = "national"
    REGIONAL = "regional"
    LOCAL = "local"


class FilterType(str, Enum):
    """Catalog taxonomy kinds."""

    CATEGORY = "category"
    TAG = "tag"


class ReviewSort(str, Enum):
    """Review list orderings."""

    NEWEST = "newest"
    OLDEST = "oldest"
    HELPFUL = "helpful"
    RATING = "rating"


class BrandEditField(str, Enum):
    """Brand page fields users may suggest changes to."""

    DISPLAY_NAME = "display_name"
    DESCRIPTION = "description"
    WEBSITE_URL = "website_url"


class CityEditField(str, Enum):
    """City page fields users may suggest changes to."""

    CITY_NAME = "city_name"
    HEADLINE = "headline"
    DESCRIPTION = "description"
