"""
Code delivery across notification channels.

A code counts as delivered when at least one channel accepts it.
"""

import logging
from dataclasses import dataclass

from .exceptions import DeliveryError
from .models import CodePurpose
from .ports import EmailSender, SmsSender

logger = logging.getLogger(__name__)


@dataclass
class NotificationService:
    """Fans a verification code out to email and, optionally, SMS."""

    email_sender: EmailSender
    sms_sender: SmsSender | None = None

    def deliver_code(
        self,
        email: str,
        code: str,
        purpose: CodePurpose,
        mobile_number: str | None = None,
    ) -> int:
        """
        Deliver ``code`` through every configured channel.

        Args:
            email: Recipient email address
            code: Verification code
            purpose: Registration or password reset
            mobile_number: SMS recipient; SMS is skipped without one

        Returns:
            Number of channels that accepted the code

        Raises:
            DeliveryError: If every attempted channel failed
        """
        delivered = 0
        attempted = 0

        attempted += 1
        try:
            self.email_sender.send_verification_code(email, code, purpose.value)
            delivered += 1
        except DeliveryError as e:
            logger.warning("Email delivery to %s failed: %s", email, e)

        if self.sms_sender is not None and mobile_number:
            attempted += 1
            try:
                self.sms_sender.send_verification_code(mobile_number, code, purpose.value)
                delivered += 1
            except DeliveryError as e:
                logger.warning("SMS delivery to %s failed: %s", mobile_number, e)

        if delivered == 0:
            raise DeliveryError(f"All {attempted} delivery channel(s) failed")
        return delivered
