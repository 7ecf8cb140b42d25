"""
Authentication domain service - login and password reset.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .exceptions import AccountSuspended, InvalidCredentials, NotFoundError, ValidationError
from .models import CodePurpose, User, utc_now
from .notifications import NotificationService
from .ports import UserRepository
from .registration import (
    check_password,
    codes_match,
    generate_verification_code,
    hash_password,
    normalize_email,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    users: UserRepository
    notifier: NotificationService
    reset_ttl: timedelta = timedelta(minutes=30)
    bcrypt_rounds: int = 10
    clock: Callable[[], datetime] = field(default=utc_now)

    def login(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            InvalidCredentials: Unknown email or wrong password
            AccountSuspended: Valid credentials on a suspended account
        """
        user = self.users.get_user_by_email(normalize_email(email))
        if user is None or not check_password(password, user.password_hash):
            raise InvalidCredentials("Invalid email or password")
        if user.is_suspended:
            raise AccountSuspended("Your account has been suspended. Please contact support.")
        return user

    def request_password_reset(self, email: str) -> None:
        """
        Issue a reset code and deliver it to the user.

        Raises:
            NotFoundError: No user with this email
            DeliveryError: No channel delivered the code
        """
        user = self.users.get_user_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("User not found")

        code = generate_verification_code()
        self.users.update_user(
            user.id, reset_token=code, reset_token_expiry=self.clock() + self.reset_ttl
        )
        self.notifier.deliver_code(
            user.email, code, CodePurpose.PASSWORD_RESET, mobile_number=user.mobile_number
        )

    def reset_password(self, email: str, token: str, new_password: str) -> User:
        """
        Replace the password when the reset code matches and is unexpired.

        Raises:
            ValidationError: Missing, wrong or expired reset code
        """
        user = self.users.get_user_by_email(normalize_email(email))
        if user is None or not user.reset_token or user.reset_token_expiry is None:
            raise ValidationError("Invalid or expired reset token")
        if not codes_match(user.reset_token, token):
            raise ValidationError("Invalid verification code")
        if self.clock() > user.reset_token_expiry:
            raise ValidationError("Reset token has expired")

        updated = self.users.update_user(
            user.id,
            password_hash=hash_password(new_password, self.bcrypt_rounds),
            reset_token=None,
            reset_token_expiry=None,
        )
        logger.info("Password reset for user %s", user.id)
        return updated
