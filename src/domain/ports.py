"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the user record the domain works with and the
interfaces (ports) that the domain requires from infrastructure.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class AccountState(str, Enum):
    """
    Account lifecycle states.

    State Transitions (forward-only):
    - PENDING -> ACTIVE (activation token consumed)

    ACTIVE is terminal. A PENDING account holds an activation token;
    an ACTIVE account never does.
    """

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class User:
    """Snapshot of a stored user row."""

    id: int
    username: str
    email: str
    password_hash: str
    inactive: bool = True
    activation_token: str | None = None
    bearer_token: str | None = None
    created_at: datetime | None = None

    @property
    def state(self) -> AccountState:
        return AccountState.PENDING if self.inactive else AccountState.ACTIVE


class UserRepository(Protocol):
    """Port interface for user persistence."""

    def create(
        self, username: str, email: str, password_hash: str, activation_token: str
    ) -> User:
        """
        Insert a new inactive user holding the activation token.

        The insert must be durable when this returns.

        Raises:
            EmailAlreadyRegistered: If the email uniqueness constraint fires
        """
        ...

    def delete(self, user_id: int) -> None:
        """Remove a user row. Deleting a missing row is not an error."""
        ...

    def find_by_id(self, user_id: int) -> User | None:
        """Return the user with this id, or None."""
        ...

    def find_by_email(self, email: str) -> User | None:
        """Return the user registered with this (normalized) email, or None."""
        ...

    def find_by_bearer_token(self, token: str) -> User | None:
        """Return the user owning this bearer token, or None."""
        ...

    def activate(self, activation_token: str) -> bool:
        """
        Atomically move the user holding this token from PENDING to ACTIVE.

        Clears the activation token in the same step.

        Returns:
            True if a user was activated, False if no row holds the token
        """
        ...

    def update_username(self, user_id: int, username: str) -> bool:
        """Set the username. Returns False if the user does not exist."""
        ...

    def ensure_bearer_token(self, user_id: int, token: str) -> str | None:
        """
        Store the bearer token unless the user already has one.

        Returns:
            The bearer token now held by the user (existing or new),
            or None if the user does not exist
        """
        ...

    def list_active(
        self, offset: int, limit: int, exclude_id: int | None = None
    ) -> tuple[list[User], int]:
        """
        Return one page of active users ordered by id and the total count.

        Args:
            offset: Number of rows to skip
            limit: Maximum rows to return
            exclude_id: User id left out of both the page and the count
        """
        ...


class EmailSender(Protocol):
    """Port interface for activation message delivery."""

    def send_account_activation(self, email: str, token: str) -> None:
        """
        Deliver the activation token to the email address.

        Any exception raised is treated as a delivery failure.

        Args:
            email: Recipient email address
            token: Raw activation token
        """
        ...
