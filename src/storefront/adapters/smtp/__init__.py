"""Email sender adapters."""

from .console import ConsoleEmailSender
from .server import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "SmtpEmailSender"]
