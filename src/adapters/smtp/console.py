"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging activation tokens for development use.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - logs activation tokens.
    """

    def send_account_activation(self, email: str, token: str) -> None:
        """
        Log the activation token (simulates email delivery).

        The token is logged at INFO level to be visible in container logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            token: Activation token
        """
        logger.info("[ACTIVATION] Email: %s Token: %s", email, token)
