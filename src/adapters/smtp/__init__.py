"""Email sender adapters - Notification gateway implementations."""

from .console import ConsoleEmailSender
from .mailer import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "SmtpEmailSender"]
