"""
Console SMS sender adapter - Implements SmsSender protocol.

Logs verification codes instead of sending messages, mirroring
ConsoleEmailSender for the messaging channel.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleSmsSender:
    """
    Implements SmsSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def send_verification_code(self, mobile_number: str, code: str, purpose: str) -> None:
        logger.info("[VERIFICATION] SMS: %s Code: %s Purpose: %s", mobile_number, code, purpose)
