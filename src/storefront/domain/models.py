"""
Domain entities - Plain dataclasses owned by the storage layer.

Entities carry no behaviour beyond small derived properties. Storage
implementations assign ``id`` and ``created_at`` on insert and return
fresh copies on every read, so callers never share mutable state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class LogType(str, Enum):
    """Ledger entry type tags."""

    ADD = "add"
    REMOVE = "remove"
    ADJUST = "adjust"


class CodePurpose(str, Enum):
    """What a delivered verification code is for."""

    REGISTRATION = "registration"
    PASSWORD_RESET = "password-reset"


@dataclass
class User:
    email: str
    password_hash: str
    id: int = 0
    display_name: str | None = None
    mobile_number: str = ""
    reset_token: str | None = None
    reset_token_expiry: datetime | None = None
    is_verified: bool = False
    is_admin: bool = False
    is_suspended: bool = False
    created_at: datetime | None = None


@dataclass
class PendingRegistration:
    """
    Unconfirmed registration awaiting its verification code.

    Keyed by email; at most one exists per email address.
    """

    email: str
    code: str
    expires_at: datetime
    created_at: datetime = field(default_factory=utc_now)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass
class Product:
    name: str
    price: int
    category: str
    id: int = 0
    description: str | None = None
    purchase_price: int = 0
    image_url: str = ""
    featured: bool = False
    stock: int = 0
    min_stock: int | None = 5
    tax: int = 0
    unit: str | None = None
    barcode: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class InventoryLogEntry:
    """Immutable record of a single stock delta."""

    product_id: int
    quantity: int
    type: LogType
    note: str | None = None
    id: int = 0
    timestamp: datetime | None = None


@dataclass
class UserPreference:
    user_id: int
    id: int = 0
    email_notifications: bool = True
    order_updates: bool = True
    promotions: bool = False
    account_alerts: bool = True
    dark_mode: bool = False
    language: str = "en"
    currency: str = "inr"


@dataclass
class UserAddress:
    user_id: int
    address_line1: str
    city: str
    state: str
    postal_code: str
    id: int = 0
    address_line2: str | None = None
    country: str = "India"
    is_primary: bool = False
    label: str = "Home"
    phone: str | None = None
    created_at: datetime | None = None


@dataclass
class ContactMessage:
    name: str
    email: str
    message: str
    id: int = 0
