"""
Catalog domain service - product browsing and administration.
"""

from dataclasses import dataclass
from typing import Any

from .exceptions import NotFoundError, ValidationError
from .models import ContactMessage, Product
from .ports import ContactRepository, ProductRepository


@dataclass
class CatalogService:
    products: ProductRepository

    def list_products(self) -> list[Product]:
        return self.products.list_products()

    def list_featured(self) -> list[Product]:
        return self.products.list_featured_products()

    def list_by_category(self, category: str) -> list[Product]:
        return self.products.list_products_by_category(category)

    def get_product(self, product_id: int) -> Product:
        product = self.products.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def create_product(self, **fields: Any) -> Product:
        fields.pop("id", None)
        fields.pop("created_at", None)
        product = Product(**fields)
        self._check(product)
        return self.products.create_product(product)

    def update_product(self, product_id: int, **changes: Any) -> Product:
        """
        Merge admin edits into a product.

        Stock is excluded; it changes only through the inventory ledger.
        """
        changes.pop("id", None)
        changes.pop("created_at", None)
        changes.pop("stock", None)
        for key in ("price", "purchase_price", "min_stock"):
            if changes.get(key) is not None and changes[key] < 0:
                raise ValidationError(f"{key} must not be negative")
        return self.products.update_product(product_id, **changes)

    def delete_product(self, product_id: int) -> None:
        if not self.products.delete_product(product_id):
            raise NotFoundError(f"Product {product_id} not found")

    @staticmethod
    def _check(product: Product) -> None:
        if product.price < 0 or product.purchase_price < 0:
            raise ValidationError("Prices must not be negative")
        if product.stock < 0:
            raise ValidationError("Stock must not be negative")
        if product.min_stock is not None and product.min_stock < 0:
            raise ValidationError("min_stock must not be negative")


@dataclass
class ContactService:
    messages: ContactRepository

    def submit(self, name: str, email: str, message: str) -> ContactMessage:
        return self.messages.create_contact_message(
            ContactMessage(name=name, email=email, message=message)
        )
