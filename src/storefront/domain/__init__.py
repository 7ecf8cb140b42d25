"""
Domain layer - Pure business logic with zero framework imports.

This package contains the storefront's business rules: the three-step
registration flow, the inventory ledger, account and catalog services.
It defines its own port interfaces for infrastructure abstraction.
"""

from .accounts import AccountService, AdminService
from .auth import AuthService
from .catalog import CatalogService, ContactService
from .exceptions import (
    AccountSuspended,
    AuthError,
    DeliveryError,
    EmailAlreadyRegistered,
    InvalidCredentials,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from .inventory import InventoryService
from .notifications import NotificationService
from .ports import EmailSender, SmsSender, Storage
from .registration import RegistrationService

__all__ = [
    "AccountService",
    "AccountSuspended",
    "AdminService",
    "AuthError",
    "AuthService",
    "CatalogService",
    "ContactService",
    "DeliveryError",
    "EmailAlreadyRegistered",
    "EmailSender",
    "InvalidCredentials",
    "InventoryService",
    "NotFoundError",
    "NotificationService",
    "RegistrationService",
    "SmsSender",
    "Storage",
    "StorefrontError",
    "ValidationError",
]
