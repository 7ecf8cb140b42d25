"""
Inventory domain service - stock counters and their ledger.

Every stock change appends an immutable ledger entry recording the
requested delta. Stock never goes below zero; a removal larger than
the current stock empties it and the excess is dropped, while the
ledger still records the full requested delta.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from .exceptions import NotFoundError, ValidationError
from .models import InventoryLogEntry, LogType, Product
from .ports import InventoryLedger, ProductRepository

logger = logging.getLogger(__name__)

DEFAULT_MIN_STOCK = 5


def clamp_stock(current: int, delta: int) -> int:
    """New stock level after applying ``delta``, floored at zero."""
    return max(0, current + delta)


def log_type_for(delta: int) -> LogType:
    return LogType.ADD if delta > 0 else LogType.REMOVE


def default_note(delta: int) -> str:
    verb = "adding" if delta > 0 else "removing"
    return f"Stock updated by {verb} {abs(delta)} units"


class InventoryStorage(ProductRepository, InventoryLedger, Protocol):
    """Storage capabilities the inventory service needs."""


@dataclass
class InventoryService:
    storage: InventoryStorage
    default_min_stock: int = DEFAULT_MIN_STOCK

    def adjust_stock(self, product_id: int, delta: int, note: str | None = None) -> Product:
        """
        Apply a signed stock change and record it in the ledger.

        Args:
            product_id: Product to adjust
            delta: Nonzero signed quantity
            note: Free-text note; a description of the change if omitted

        Returns:
            The updated product

        Raises:
            ValidationError: If delta is zero or not an integer
            NotFoundError: If the product does not exist
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("Quantity must be a number")
        if delta == 0:
            raise ValidationError("Quantity must be nonzero")

        product = self.storage.adjust_stock(
            product_id, delta, log_type_for(delta), note or default_note(delta)
        )
        logger.info(
            "Stock for product %s adjusted by %+d, now %d", product_id, delta, product.stock
        )
        return product

    def record_log(
        self, product_id: int, quantity: int, log_type: LogType, note: str | None = None
    ) -> InventoryLogEntry:
        """Append a manual ledger entry without touching the stock counter."""
        if self.storage.get_product(product_id) is None:
            raise NotFoundError(f"Product {product_id} not found")
        entry = InventoryLogEntry(
            product_id=product_id, quantity=quantity, type=LogType(log_type), note=note
        )
        return self.storage.append_inventory_log(entry)

    def get_low_stock_products(self, threshold: int | None = None) -> list[Product]:
        """
        Products at or below their minimum stock, lowest stock first.

        An explicit ``threshold`` overrides every product's own minimum.
        """

        def limit(product: Product) -> int:
            if threshold is not None:
                return threshold
            if product.min_stock is not None:
                return product.min_stock
            return self.default_min_stock

        low = [p for p in self.storage.list_products() if p.stock <= limit(p)]
        return sorted(low, key=lambda p: p.stock)

    def get_logs(self, product_id: int | None = None) -> list[InventoryLogEntry]:
        return self.storage.list_inventory_logs(product_id)
