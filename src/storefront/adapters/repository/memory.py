"""
In-memory repository adapter - Implements the Storage protocol.

Process-local dict-backed storage for development and tests. One
re-entrant lock guards every map, so multi-write operations (stock
change plus ledger entry, primary-address reassignment, registration
completion) run as a single critical section.

Entities are copied on the way in and on the way out; callers never
hold references into the store.
"""

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import fields, replace
from datetime import datetime
from typing import Any

from storefront.domain.exceptions import EmailAlreadyRegistered, NotFoundError, ValidationError
from storefront.domain.inventory import clamp_stock
from storefront.domain.models import (
    ContactMessage,
    InventoryLogEntry,
    LogType,
    PendingRegistration,
    Product,
    User,
    UserAddress,
    UserPreference,
    utc_now,
)

logger = logging.getLogger(__name__)


def _merge(entity: Any, changes: dict[str, Any]) -> Any:
    """Copy ``entity`` with ``changes`` applied; unknown fields are rejected."""
    known = {f.name for f in fields(entity)}
    unknown = set(changes) - known
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    changes = {k: v for k, v in changes.items() if k != "id"}
    return replace(entity, **changes)


class InMemoryStorage:
    """
    Implements Storage protocol with dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._pending: dict[str, PendingRegistration] = {}
        self._products: dict[int, Product] = {}
        self._logs: dict[int, InventoryLogEntry] = {}
        self._preferences: dict[int, UserPreference] = {}  # keyed by user_id
        self._addresses: dict[int, UserAddress] = {}
        self._messages: dict[int, ContactMessage] = {}
        self._ids = {
            name: itertools.count(1)
            for name in ("user", "product", "log", "preference", "address", "message")
        }

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # Users

    def create_user(self, user: User) -> User:
        with self._lock:
            stored = replace(
                user,
                id=self._next_id("user"),
                created_at=user.created_at or self._clock(),
            )
            self._users[stored.id] = stored
            return replace(stored)

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email: str) -> User | None:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
            return None

    def update_user(self, user_id: int, **changes: Any) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError("User not found")
            updated = _merge(user, changes)
            self._users[user_id] = updated
            return replace(updated)

    def list_users(self) -> list[User]:
        with self._lock:
            return [replace(u) for u in self._users.values()]

    # Pending registrations

    def create_pending_registration(self, pending: PendingRegistration) -> PendingRegistration:
        with self._lock:
            if self.get_user_by_email(pending.email) is not None:
                raise EmailAlreadyRegistered(pending.email)
            self._pending[pending.email] = replace(pending)
            return replace(pending)

    def get_pending_registration(self, email: str) -> PendingRegistration | None:
        with self._lock:
            pending = self._pending.get(email)
            return replace(pending) if pending else None

    def complete_registration(self, email: str, password_hash: str) -> User:
        with self._lock:
            if email not in self._pending:
                raise NotFoundError("No pending registration found for this email")
            user = self.create_user(
                User(email=email, password_hash=password_hash, is_verified=True)
            )
            del self._pending[email]
            return user

    # Products

    def list_products(self) -> list[Product]:
        with self._lock:
            return [replace(p) for p in self._products.values()]

    def list_featured_products(self) -> list[Product]:
        return [p for p in self.list_products() if p.featured]

    def list_products_by_category(self, category: str) -> list[Product]:
        return [p for p in self.list_products() if p.category == category]

    def get_product(self, product_id: int) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            return replace(product) if product else None

    def create_product(self, product: Product) -> Product:
        with self._lock:
            stored = replace(product, id=self._next_id("product"), created_at=self._clock())
            self._products[stored.id] = stored
            return replace(stored)

    def update_product(self, product_id: int, **changes: Any) -> Product:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise NotFoundError("Product not found")
            updated = _merge(product, changes)
            self._products[product_id] = updated
            return replace(updated)

    def delete_product(self, product_id: int) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    # Inventory

    def adjust_stock(
        self, product_id: int, delta: int, log_type: LogType, note: str | None
    ) -> Product:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise NotFoundError("Product not found")

            updated = replace(product, stock=clamp_stock(product.stock, delta))
            self._products[product_id] = updated
            try:
                self.append_inventory_log(
                    InventoryLogEntry(
                        product_id=product_id, quantity=delta, type=log_type, note=note
                    )
                )
            except Exception:
                self._products[product_id] = product
                logger.error("Ledger append failed; stock for product %s restored", product_id)
                raise
            return replace(updated)

    def append_inventory_log(self, entry: InventoryLogEntry) -> InventoryLogEntry:
        with self._lock:
            stored = replace(entry, id=self._next_id("log"), timestamp=self._clock())
            self._logs[stored.id] = stored
            return stored

    def list_inventory_logs(self, product_id: int | None = None) -> list[InventoryLogEntry]:
        with self._lock:
            logs = [
                log
                for log in self._logs.values()
                if product_id is None or log.product_id == product_id
            ]
        return sorted(logs, key=lambda log: (log.timestamp, log.id), reverse=True)

    # Preferences

    def get_preferences(self, user_id: int) -> UserPreference | None:
        with self._lock:
            preferences = self._preferences.get(user_id)
            return replace(preferences) if preferences else None

    def create_preferences(self, preferences: UserPreference) -> UserPreference:
        with self._lock:
            stored = replace(preferences, id=self._next_id("preference"))
            self._preferences[stored.user_id] = stored
            return replace(stored)

    def update_preferences(self, user_id: int, **changes: Any) -> UserPreference:
        with self._lock:
            current = self._preferences.get(user_id)
            if current is None:
                return self.create_preferences(_merge(UserPreference(user_id=user_id), changes))
            updated = _merge(current, changes)
            self._preferences[user_id] = updated
            return replace(updated)

    # Addresses

    def list_addresses(self, user_id: int) -> list[UserAddress]:
        with self._lock:
            owned = [replace(a) for a in self._addresses.values() if a.user_id == user_id]
        return sorted(owned, key=lambda a: (not a.is_primary, a.created_at, a.id))

    def _clear_primary(self, user_id: int, keep: int | None = None) -> None:
        for address_id, address in self._addresses.items():
            if address.user_id == user_id and address_id != keep and address.is_primary:
                self._addresses[address_id] = replace(address, is_primary=False)

    def create_address(self, address: UserAddress) -> UserAddress:
        with self._lock:
            if address.is_primary:
                self._clear_primary(address.user_id)
            stored = replace(address, id=self._next_id("address"), created_at=self._clock())
            self._addresses[stored.id] = stored
            return replace(stored)

    def update_address(self, address_id: int, user_id: int, **changes: Any) -> UserAddress:
        with self._lock:
            address = self._addresses.get(address_id)
            if address is None or address.user_id != user_id:
                raise NotFoundError("Address not found or doesn't belong to user")
            changes.pop("user_id", None)
            if changes.get("is_primary"):
                self._clear_primary(user_id, keep=address_id)
            updated = _merge(address, changes)
            self._addresses[address_id] = updated
            return replace(updated)

    def delete_address(self, address_id: int, user_id: int) -> bool:
        with self._lock:
            address = self._addresses.get(address_id)
            if address is None or address.user_id != user_id:
                return False
            del self._addresses[address_id]
            return True

    # Contact

    def create_contact_message(self, message: ContactMessage) -> ContactMessage:
        with self._lock:
            stored = replace(message, id=self._next_id("message"))
            self._messages[stored.id] = stored
            return replace(stored)
