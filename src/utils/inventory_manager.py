"""Inventory management utilities.

This module owns the item table: catalogue reads, dealer edits, and the
stock decrement performed when a customer buys an item.

Every stock change is a single guarded UPDATE, so two requests racing on the
same item (possibly from different server processes) can never drive its
quantity below zero.
"""

import logging
from numbers import Real
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    ValidationError,
)
from models.item import ItemModel
from schemas.item import Item
from utils.converters import model_to_item

logger = logging.getLogger(__name__)

# Largest value an INTEGER column (SQLite, or BIGINT elsewhere) can hold
MAX_DB_INTEGER = 2**63 - 1


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _fits_in_db(value: int) -> bool:
    return -MAX_DB_INTEGER - 1 <= value <= MAX_DB_INTEGER


class InventoryManager:
    """Manages items and their stock using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize InventoryManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def list_categories(self) -> List[str]:
        """Return the distinct categories of the items currently stocked."""
        rows = self.db.execute(
            select(ItemModel.category).distinct().order_by(ItemModel.category)
        )
        return [category for (category,) in rows]

    def search_items(self, query: Optional[str] = None) -> List[Item]:
        """Find items whose name or category contains the query.

        Matching ignores case and treats ``%`` and ``_`` literally.

        Args:
            query: Text to look for. None or empty returns every item.

        Returns:
            Matching items ordered by id.
        """
        stmt = select(ItemModel).order_by(ItemModel.id)
        if query:
            stmt = stmt.where(
                ItemModel.name.icontains(query, autoescape=True)
                | ItemModel.category.icontains(query, autoescape=True)
            )
        return [model_to_item(m) for m in self.db.scalars(stmt)]

    def list_items(self) -> List[Item]:
        return self.search_items()

    def get_item(self, item_id: int) -> Item:
        """Get an item by id.

        Raises:
            ItemNotFoundError: If no item has this id.
        """
        if not _fits_in_db(item_id):
            raise ItemNotFoundError(item_id)
        model = self.db.get(ItemModel, item_id)
        if model is None:
            raise ItemNotFoundError(item_id)
        return model_to_item(model)

    def add_item(
        self,
        name: str,
        category: str,
        price: float,
        quantity: int,
        image_url: Optional[str] = None,
    ) -> Item:
        """Add a new item to the catalogue.

        Args:
            name: Display name.
            category: Category label.
            price: Unit price; must be positive.
            quantity: Initial stock; must be a non-negative integer.
            image_url: Optional picture of the item.

        Returns:
            The created Item, with its generated id.

        Raises:
            ValidationError: If a field is missing or out of range.
        """
        name = (name or "").strip()
        category = (category or "").strip()
        if not name or not category or price is None or quantity is None:
            raise ValidationError("All fields are required.")
        if not isinstance(price, Real) or isinstance(price, bool) or price <= 0:
            raise ValidationError("Price must be a positive number.")
        if not _is_int(quantity) or quantity < 0:
            raise ValidationError("Quantity must be a non-negative integer.")
        if quantity > MAX_DB_INTEGER:
            raise ValidationError("Quantity is too large.")

        model = ItemModel(
            name=name,
            category=category,
            price=float(price),
            quantity=quantity,
            image_url=image_url or None,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Added item %s: %s (%d in stock)", model.id, name, quantity)
        return model_to_item(model)

    def update_quantity(self, item_id: int, quantity: int) -> None:
        """Overwrite the stock level of an item.

        Args:
            item_id: The item to update.
            quantity: The new stock level.

        Raises:
            ValidationError: If quantity is negative or not an integer.
            ItemNotFoundError: If no item has this id.
        """
        if not _is_int(quantity) or quantity < 0:
            raise ValidationError("Quantity cannot be negative.")
        if quantity > MAX_DB_INTEGER:
            raise ValidationError("Quantity is too large.")
        if not _fits_in_db(item_id):
            raise ItemNotFoundError(item_id)

        result = self.db.execute(
            update(ItemModel)
            .where(ItemModel.id == item_id)
            .values(quantity=quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise ItemNotFoundError(item_id)
        self.db.commit()
        logger.info("Set quantity of item %s to %d", item_id, quantity)

    def delete_item(self, item_id: int) -> None:
        """Remove an item from the catalogue.

        Raises:
            ItemNotFoundError: If no item has this id.
        """
        if not _fits_in_db(item_id):
            raise ItemNotFoundError(item_id)
        result = self.db.execute(
            delete(ItemModel)
            .where(ItemModel.id == item_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise ItemNotFoundError(item_id)
        self.db.commit()
        logger.info("Deleted item %s", item_id)

    def purchase(self, item_id: int, amount: int) -> int:
        """Take units of an item out of stock.

        The decrement only applies while enough stock remains; the affected
        row count tells whether it did. The remaining quantity is read back
        before the transaction commits.

        Args:
            item_id: The item being bought.
            amount: Number of units; must be positive.

        Returns:
            The quantity left after the purchase.

        Raises:
            ValidationError: If amount is not a positive integer.
            ItemNotFoundError: If no item has this id.
            InsufficientStockError: If fewer than ``amount`` units are in stock.
        """
        if not _is_int(amount) or amount <= 0:
            raise ValidationError("Invalid quantity.")
        if not _fits_in_db(item_id):
            raise ItemNotFoundError(item_id)

        quantity_of_item = select(ItemModel.quantity).where(ItemModel.id == item_id)
        if amount > MAX_DB_INTEGER:
            # More than any row can hold, so the stock can never cover it
            available = self.db.execute(quantity_of_item).scalar_one_or_none()
            self.db.rollback()
            if available is None:
                raise ItemNotFoundError(item_id)
            raise InsufficientStockError(item_id, available)

        try:
            result = self.db.execute(
                update(ItemModel)
                .where(ItemModel.id == item_id, ItemModel.quantity >= amount)
                .values(quantity=ItemModel.quantity - amount)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                available = self.db.execute(quantity_of_item).scalar_one_or_none()
                self.db.rollback()
                if available is None:
                    raise ItemNotFoundError(item_id)
                logger.warning(
                    "Rejected purchase of %d x item %s: only %d left",
                    amount,
                    item_id,
                    available,
                )
                raise InsufficientStockError(item_id, available)

            remaining = self.db.execute(quantity_of_item).scalar_one()
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(
            "Sold %d x item %s, %d remaining", amount, item_id, remaining
        )
        return remaining
