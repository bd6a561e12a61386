"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers the activation message over SMTP with a bounded socket timeout.
Connection, authentication and delivery errors (including timeouts)
propagate to the caller, which treats them as delivery failure.
"""

import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Opens one connection per message; no retries.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send_account_activation(self, email: str, token: str) -> None:
        """
        Send the activation token to the recipient.

        Raises:
            smtplib.SMTPException: On protocol errors
            OSError: On connection errors and timeouts
        """
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = email
        message["Subject"] = "Account activation"
        message.set_content(f"Token is {token}")
        message.add_alternative(f"<p>Token is <b>{token}</b></p>", subtype="html")

        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
            if self._use_tls:
                client.starttls()
            if self._username:
                client.login(self._username, self._password)
            client.send_message(message)

        logger.info("Activation email sent to %s", email)
