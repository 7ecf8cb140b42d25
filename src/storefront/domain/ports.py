"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols through
structural subtyping; none of them inherit from the Protocol classes.
"""

from typing import Any, Protocol

from .models import (
    ContactMessage,
    InventoryLogEntry,
    LogType,
    PendingRegistration,
    Product,
    User,
    UserAddress,
    UserPreference,
)


class UserRepository(Protocol):
    """Port interface for user persistence."""

    def create_user(self, user: User) -> User:
        """Insert a user and return it with ``id`` and ``created_at`` set."""
        ...

    def get_user(self, user_id: int) -> User | None: ...

    def get_user_by_email(self, email: str) -> User | None: ...

    def update_user(self, user_id: int, **changes: Any) -> User:
        """
        Merge ``changes`` into the stored user.

        Raises:
            NotFoundError: If no user has this id
        """
        ...

    def list_users(self) -> list[User]: ...


class PendingRegistrationStore(Protocol):
    """Port interface for pending registrations."""

    def create_pending_registration(self, pending: PendingRegistration) -> PendingRegistration:
        """
        Store a pending registration, replacing any previous one for the email.

        Raises:
            EmailAlreadyRegistered: If a full user already owns the email
        """
        ...

    def get_pending_registration(self, email: str) -> PendingRegistration | None: ...

    def complete_registration(self, email: str, password_hash: str) -> User:
        """
        Promote a pending registration to a verified user.

        Creating the user and removing the pending record happen together.

        Raises:
            NotFoundError: If no pending registration exists for the email
        """
        ...


class ProductRepository(Protocol):
    """Port interface for the product catalog."""

    def list_products(self) -> list[Product]: ...

    def list_featured_products(self) -> list[Product]: ...

    def list_products_by_category(self, category: str) -> list[Product]: ...

    def get_product(self, product_id: int) -> Product | None: ...

    def create_product(self, product: Product) -> Product: ...

    def update_product(self, product_id: int, **changes: Any) -> Product:
        """
        Raises:
            NotFoundError: If no product has this id
        """
        ...

    def delete_product(self, product_id: int) -> bool: ...


class InventoryLedger(Protocol):
    """Port interface for stock counters and their append-only ledger."""

    def adjust_stock(
        self, product_id: int, delta: int, log_type: LogType, note: str | None
    ) -> Product:
        """
        Apply ``delta`` to the product's stock, clamped at zero, and append a
        ledger entry recording ``delta`` verbatim.

        Both writes succeed together or neither is visible.

        Raises:
            NotFoundError: If no product has this id
        """
        ...

    def append_inventory_log(self, entry: InventoryLogEntry) -> InventoryLogEntry: ...

    def list_inventory_logs(self, product_id: int | None = None) -> list[InventoryLogEntry]:
        """Ledger entries, most recent first."""
        ...


class PreferenceRepository(Protocol):
    """Port interface for per-user preferences."""

    def get_preferences(self, user_id: int) -> UserPreference | None: ...

    def create_preferences(self, preferences: UserPreference) -> UserPreference: ...

    def update_preferences(self, user_id: int, **changes: Any) -> UserPreference:
        """Merge ``changes``, creating default preferences first if missing."""
        ...


class AddressRepository(Protocol):
    """
    Port interface for user addresses.

    Writing an address with ``is_primary=True`` clears the flag on every
    other address of the same user within the same unit of work.
    """

    def list_addresses(self, user_id: int) -> list[UserAddress]:
        """Primary address first, then oldest first."""
        ...

    def create_address(self, address: UserAddress) -> UserAddress: ...

    def update_address(self, address_id: int, user_id: int, **changes: Any) -> UserAddress:
        """
        Raises:
            NotFoundError: If the address does not exist or belongs to another user
        """
        ...

    def delete_address(self, address_id: int, user_id: int) -> bool: ...


class ContactRepository(Protocol):
    """Port interface for contact-form messages."""

    def create_contact_message(self, message: ContactMessage) -> ContactMessage: ...


class Storage(
    UserRepository,
    PendingRegistrationStore,
    ProductRepository,
    InventoryLedger,
    PreferenceRepository,
    AddressRepository,
    ContactRepository,
    Protocol,
):
    """Complete storage port; in-memory and Postgres adapters implement it."""


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, code: str, purpose: str) -> None:
        """
        Send a verification code to an email address.

        Raises:
            DeliveryError: If the message could not be delivered
        """
        ...


class SmsSender(Protocol):
    """Port interface for SMS / messaging delivery."""

    def send_verification_code(self, mobile_number: str, code: str, purpose: str) -> None:
        """
        Raises:
            DeliveryError: If the message could not be delivered
        """
        ...
