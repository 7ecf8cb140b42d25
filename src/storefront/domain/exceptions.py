"""
Domain exceptions - Semantic error types for the storefront.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each family to an HTTP status code.
"""


class StorefrontError(Exception):
    """Base class for storefront domain errors."""

    pass


class ValidationError(StorefrontError):
    """Malformed input or a business rule rejecting the input."""

    pass


class EmailAlreadyRegistered(ValidationError):
    """A full user already owns this email address."""

    pass


class AuthError(StorefrontError):
    """Authentication or authorization failure."""

    pass


class InvalidCredentials(AuthError):
    """Unknown email or wrong password."""

    pass


class AccountSuspended(AuthError):
    """Credentials are valid but the account is suspended."""

    pass


class NotFoundError(StorefrontError):
    """Referenced user, product, address or pending registration is missing."""

    pass


class DeliveryError(StorefrontError):
    """A notification channel failed to deliver a code."""

    pass
