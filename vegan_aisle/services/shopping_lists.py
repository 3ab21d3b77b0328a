"""Shopping list service."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session, joinedload

from vegan_aisle.errors import NotFoundError
from vegan_aisle.models.availability import Availability
from vegan_aisle.models.enums import ModerationStatus
from vegan_aisle.models.shopping_list import ShoppingList, ShoppingListItem
from vegan_aisle.models.user import User
from vegan_aisle.services.catalog import resolve_product

logger = logging.getLogger(__name__)

DEFAULT_LIST_NAME = "My Vegan List"


class ShoppingListService:
    """Service for a user's shopping lists. Other users' lists are invisible."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def _get_list(self, list_id: int) -> ShoppingList:
        shopping_list = (
            self.db.query(ShoppingList)
            .filter(ShoppingList.id == list_id, ShoppingList.user_id == self.user.id)
            .first()
        )
        if shopping_list is None:
            raise NotFoundError("List not found")
        return shopping_list

    def _get_item(self, list_id: int, item_id: int) -> ShoppingListItem:
        self._get_list(list_id)
        item = (
            self.db.query(ShoppingListItem)
            .filter(ShoppingListItem.id == item_id, ShoppingListItem.shopping_list_id == list_id)
            .first()
        )
        if item is None:
            raise NotFoundError("Item not found")
        return item

    def create_list(self, name: str) -> ShoppingList:
        shopping_list = ShoppingList(user_id=self.user.id, name=name.strip())
        self.db.add(shopping_list)
        self.db.commit()
        self.db.refresh(shopping_list)
        return shopping_list

    def get_lists(self) -> list[ShoppingList]:
        """The user's lists, newest first."""
        return (
            self.db.query(ShoppingList)
            .filter(ShoppingList.user_id == self.user.id)
            .order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc())
            .all()
        )

    def get_or_create_default_list(self) -> ShoppingList:
        """The user's oldest list, created on first use."""
        shopping_list = (
            self.db.query(ShoppingList)
            .filter(ShoppingList.user_id == self.user.id)
            .order_by(ShoppingList.created_at.asc(), ShoppingList.id.asc())
            .first()
        )
        if shopping_list is None:
            shopping_list = self.create_list(DEFAULT_LIST_NAME)
        return shopping_list

    def get_list(self, list_id: int) -> dict:
        """List with items (newest first), resolved products and store hints."""
        shopping_list = self._get_list(list_id)
        items = (
            self.db.query(ShoppingListItem)
            .filter(ShoppingListItem.shopping_list_id == shopping_list.id)
            .order_by(ShoppingListItem.added_at.desc(), ShoppingListItem.id.desc())
            .all()
        )
        hints = self._availability_hints([item.product_id for item in items])

        return {
            "id": shopping_list.id,
            "user_id": shopping_list.user_id,
            "name": shopping_list.name,
            "created_at": shopping_list.created_at,
            "updated_at": shopping_list.updated_at,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "note": item.note,
                    "added_at": item.added_at,
                    "product": self._product_summary(item.product_id),
                    "availability_hints": hints.get(item.product_id, []),
                }
                for item in items
            ],
        }

    def _product_summary(self, product_id: str) -> dict | None:
        resolved = resolve_product(self.db, product_id, viewer=self.user)
        if resolved is None:
            return None
        record = resolved.record
        return {
            "id": resolved.id,
            "name": record.name,
            "brand": record.brand,
            "size_or_variant": record.size_or_variant,
            "image_url": record.image_url,
            "is_strict_vegan": record.is_strict_vegan,
        }

    def _availability_hints(self, product_ids: list[str]) -> dict[str, list[dict]]:
        """Confirmed stores per product, one hint per store."""
        if not product_ids:
            return {}
        rows = (
            self.db.query(Availability)
            .options(joinedload(Availability.store))
            .filter(
                Availability.product_id.in_(product_ids),
                Availability.moderation_status == ModerationStatus.CONFIRMED.value,
            )
            .all()
        )
        hints: dict[str, list[dict]] = {}
        for row in rows:
            if row.store is None:
                continue
            product_hints = hints.setdefault(row.product_id, [])
            if any(h["store_id"] == row.store_id for h in product_hints):
                continue
            product_hints.append(
                {
                    "store_id": row.store_id,
                    "store_name": row.store.name,
                    "store_type": row.store.type,
                    "price_range": row.price_range,
                    "stock_status": row.stock_status,
                    "last_stock_report_at": row.last_stock_report_at,
                    "recent_in_stock_count": row.recent_in_stock_count,
                    "recent_out_of_stock_count": row.recent_out_of_stock_count,
                }
            )
        return hints

    def add_item(
        self, list_id: int, product_id: str, quantity: int = 1, note: str | None = None
    ) -> ShoppingListItem:
        """Add a product, or bump the quantity if it is already on the list."""
        shopping_list = self._get_list(list_id)
        if resolve_product(self.db, product_id, viewer=self.user) is None:
            raise NotFoundError("Product not found")

        item = (
            self.db.query(ShoppingListItem)
            .filter(
                ShoppingListItem.shopping_list_id == shopping_list.id,
                ShoppingListItem.product_id == product_id,
            )
            .first()
        )
        if item:
            item.quantity += quantity
            if note is not None:
                item.note = note
        else:
            item = ShoppingListItem(
                shopping_list_id=shopping_list.id,
                product_id=product_id,
                quantity=quantity,
                note=note,
                added_at=datetime.now(UTC),
            )
            self.db.add(item)

        self.db.commit()
        self.db.refresh(item)
        return item

    def update_item(self, list_id: int, item_id: int, updates: dict) -> ShoppingListItem:
        item = self._get_item(list_id, item_id)
        if updates.get("quantity") is not None:
            item.quantity = updates["quantity"]
        if "note" in updates:
            item.note = updates["note"]
        self.db.commit()
        self.db.refresh(item)
        return item

    def remove_item(self, list_id: int, item_id: int) -> None:
        item = self._get_item(list_id, item_id)
        self.db.delete(item)
        self.db.commit()

    def delete_list(self, list_id: int) -> None:
        shopping_list = self._get_list(list_id)
        self.db.delete(shopping_list)
        self.db.commit()
        logger.info(f"User {self.user.id} deleted list {list_id}")
