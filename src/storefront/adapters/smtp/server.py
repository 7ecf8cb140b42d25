"""
SMTP email sender adapter - Implements EmailSender protocol.

Sends HTML verification emails through an SMTP server with STARTTLS.
In development mode a failed send logs the code and is treated as
delivered, so local registration and reset flows keep working without
mail credentials.
"""

import logging
import smtplib
from email.message import EmailMessage

from storefront.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)

STORE_NAME = "Vinayak Garments"

_TEMPLATES = {
    "registration": (
        f"Account Verification Code - {STORE_NAME}",
        "<h2>Account Verification</h2>"
        f"<p>Thank you for registering with {STORE_NAME}!</p>"
        "<p>Your verification code is: <strong>{code}</strong></p>"
        "<p>This code will expire in 30 minutes. "
        "Please enter this code to complete your registration.</p>"
        "<p>If you did not attempt to create an account with us, please ignore this email.</p>",
    ),
    "password-reset": (
        f"Password Reset Verification Code - {STORE_NAME}",
        "<h2>Password Reset Request</h2>"
        f"<p>You have requested to reset your password for your {STORE_NAME} account.</p>"
        "<p>Your verification code is: <strong>{code}</strong></p>"
        "<p>This code will expire in 30 minutes.</p>"
        "<p>If you did not request this password reset, please ignore this email.</p>",
    ),
}


def build_message(sender: str, to: str, code: str, purpose: str) -> EmailMessage:
    subject, html = _TEMPLATES.get(purpose, _TEMPLATES["password-reset"])
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content(f"Your verification code is: {code}")
    message.add_alternative(html.format(code=code), subtype="html")
    return message


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        *,
        dev_mode: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._dev_mode = dev_mode
        self._timeout = timeout

    def send_verification_code(self, email: str, code: str, purpose: str) -> None:
        """
        Raises:
            DeliveryError: If sending fails outside development mode
        """
        message = build_message(self._sender, email, code, purpose)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            if self._dev_mode:
                logger.warning("Email sending failed: %s", e)
                logger.info(
                    "DEVELOPMENT MODE: Verification code for %s is: %s (for %s)",
                    email,
                    code,
                    purpose,
                )
                return
            raise DeliveryError(f"SMTP delivery failed: {e}") from e
        logger.info("Verification email (%s) sent to %s", purpose, email)
