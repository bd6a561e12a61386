"""
Registration domain service - account registration and activation.

This module contains the core business logic for user registration
and the activation state machine.

Registration Saga
=================

    validate -> hash password -> generate activation token
             -> persist PENDING user -> send activation message

Persistence and notification are not one database transaction: the
message leaves the system as soon as it is sent. The service therefore
runs a manual saga. The insert is durable before the message is
attempted; if delivery fails (error or timeout) the row is deleted
before NotificationFailure is raised, so a caller never observes an
orphan row for a failed registration. A compensating delete that keeps
failing is logged with the orphan id and chained to the raised error.

Activation State Machine (forward-only)
=======================================

    PENDING --(token consumed)--> ACTIVE

ACTIVE is terminal and holds no token. Unknown, empty and already
consumed tokens all produce the same ActivationFailure so a guesser
learns nothing about account state.
"""

import logging
from dataclasses import dataclass, field

from .exceptions import (
    ActivationFailure,
    EmailAlreadyRegistered,
    NotificationFailure,
    ValidationFailure,
)
from .ports import EmailSender, User, UserRepository
from .security import PasswordHasher, generate_token
from .validation import collect_errors, registration_rules

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str | None:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    if email is None:
        return None
    return email.strip().lower()


@dataclass
class RegistrationService:
    """
    Domain service for user registration and activation.

    Orchestrates the registration flow: validation, password hashing,
    token generation, persistence, notification and compensation.
    """

    repository: UserRepository
    email_sender: EmailSender
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    token_bytes: int = 24
    compensation_attempts: int = 3

    def validate(
        self, username: str | None, email: str | None, password: str | None
    ) -> dict[str, str]:
        """
        Validate registration input.

        Returns:
            Ordered field -> message key mapping; empty when input is valid
        """
        rules = registration_rules(self._email_in_use)
        return collect_errors(
            [
                ("username", username, rules["username"]),
                ("email", email, rules["email"]),
                ("password", password, rules["password"]),
            ]
        )

    def register(self, username: str | None, email: str | None, password: str | None) -> User:
        """
        Register a new PENDING user and send the activation message.

        Args:
            username: Requested username
            email: User's email address (will be normalized)
            password: User's password (will be hashed)

        Returns:
            The persisted PENDING user

        Raises:
            ValidationFailure: If any field rule fails, including email in use
            NotificationFailure: If the activation message could not be sent
        """
        email = normalize_email(email)
        errors = self.validate(username, email, password)
        if errors:
            raise ValidationFailure(errors)

        password_hash = self.hasher.hash(password)
        activation_token = generate_token(self.token_bytes)

        try:
            user = self.repository.create(username, email, password_hash, activation_token)
        except EmailAlreadyRegistered:
            # Lost a concurrent registration race for this email
            logger.info("Registration rejected by uniqueness constraint: %s", email)
            raise ValidationFailure({"email": "email_inuse"}) from None

        logger.info("User %s created in PENDING state", user.id)

        try:
            self.email_sender.send_account_activation(user.email, activation_token)
        except Exception as exc:
            logger.warning("Activation email to %s failed: %s", user.email, exc)
            self._compensate(user)
            raise NotificationFailure() from exc

        return user

    def activate(self, token: str | None) -> None:
        """
        Consume an activation token, moving its user from PENDING to ACTIVE.

        Raises:
            ActivationFailure: If no PENDING user holds the token
        """
        if not token:
            raise ActivationFailure()
        if not self.repository.activate(token):
            raise ActivationFailure()
        logger.info("Account activated")

    def _email_in_use(self, email: str) -> bool:
        return self.repository.find_by_email(email) is not None

    def _compensate(self, user: User) -> None:
        """
        Delete the row of a registration whose notification failed.

        Retries the delete; if every attempt fails the last error is
        raised wrapped in NotificationFailure so it is never lost.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.compensation_attempts + 1):
            try:
                self.repository.delete(user.id)
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "Compensating delete of user %s failed (attempt %d/%d): %s",
                    user.id,
                    attempt,
                    self.compensation_attempts,
                    exc,
                )
                continue
            logger.info("Registration of user %s rolled back", user.id)
            return

        logger.error(
            "Orphan PENDING user %s (%s) left after failed notification", user.id, user.email
        )
        raise NotificationFailure() from last_error
