"""
Registration domain service - three-step email verification flow.

States:
- NONE: No pending record and no user for the email
- PENDING: Pending record holds a code and its expiry
- VERIFIED: Implicit; ``verify`` is a pure check and persists nothing
- COMPLETE: Full user exists, pending record removed

Transitions:
    NONE    -> PENDING   (init)
    PENDING -> PENDING   (init again: code regenerated and overwritten)
    PENDING -> COMPLETE  (complete)

``complete`` requires only that a pending record exists; it does not
re-check the code. Clients gate progression on the result of ``verify``.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

import bcrypt
from email_validator import EmailNotValidError, validate_email

from .exceptions import EmailAlreadyRegistered, ValidationError
from .models import CodePurpose, PendingRegistration, User, utc_now
from .notifications import NotificationService
from .ports import PendingRegistrationStore, UserRepository

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class RegistrationStorage(UserRepository, PendingRegistrationStore, Protocol):
    """Storage capabilities the registration flow needs."""


def generate_verification_code() -> str:
    """
    Generate a 6-character uppercase alphanumeric verification code.

    Three random bytes rendered as upper-case hex, so every character
    is in ``0-9A-F``.
    """
    return secrets.token_hex(CODE_LENGTH // 2).upper()


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash password using bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt comparison; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def codes_match(stored: str | None, given: str) -> bool:
    """Constant-time code comparison."""
    if not stored:
        return False
    return secrets.compare_digest(stored.encode(), given.encode())


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates code generation, pending-record persistence,
    code delivery and promotion to a full user.
    """

    storage: RegistrationStorage
    notifier: NotificationService
    code_ttl: timedelta = timedelta(minutes=30)
    bcrypt_rounds: int = 10
    clock: Callable[[], datetime] = field(default=utc_now)

    def init(self, email: str) -> str:
        """
        Start (or restart) registration for an email address.

        Args:
            email: User's email address (will be normalized)

        Returns:
            Normalized email address

        Raises:
            ValidationError: If the email is syntactically invalid
            EmailAlreadyRegistered: If a full user owns the email
            DeliveryError: If no channel delivered the code
        """
        normalized_email = normalize_email(email)
        try:
            validate_email(normalized_email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError(f"Invalid email address: {e}") from None

        if self.storage.get_user_by_email(normalized_email) is not None:
            raise EmailAlreadyRegistered(normalized_email)

        code = generate_verification_code()
        now = self.clock()
        pending = PendingRegistration(
            email=normalized_email,
            code=code,
            expires_at=now + self.code_ttl,
            created_at=now,
        )
        self.storage.create_pending_registration(pending)
        logger.info("Pending registration stored for %s", normalized_email)

        self.notifier.deliver_code(normalized_email, code, CodePurpose.REGISTRATION)
        return normalized_email

    def verify(self, email: str, token: str) -> bool:
        """
        Check a verification code without changing any state.

        Valid only while ``now <= expires_at``.
        """
        pending = self.storage.get_pending_registration(normalize_email(email))
        if pending is None:
            return False
        code_valid = codes_match(pending.code, token)
        if pending.is_expired(self.clock()):
            return False
        return code_valid

    def complete(self, email: str, password: str) -> User:
        """
        Promote the pending registration to a verified user.

        Raises:
            NotFoundError: If no pending registration exists
        """
        normalized_email = normalize_email(email)
        password_hash = hash_password(password, self.bcrypt_rounds)
        user = self.storage.complete_registration(normalized_email, password_hash)
        logger.info("Registration complete for %s (user id %s)", normalized_email, user.id)
        return user
