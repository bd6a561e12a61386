"""
In-memory repository adapter - Implements UserRepository protocol.

Process-local storage for development and tests. A single lock guards
every read and write, so each operation is atomic and the email index
gives the same uniqueness guarantee as the PostgreSQL constraint.
"""

import itertools
import threading
from dataclasses import replace
from datetime import UTC, datetime

from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.ports import User


class InMemoryUserRepository:
    """
    Implements UserRepository protocol with dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._users: dict[int, User] = {}
        self._by_email: dict[str, int] = {}

    def create(
        self, username: str, email: str, password_hash: str, activation_token: str
    ) -> User:
        with self._lock:
            if email in self._by_email:
                raise EmailAlreadyRegistered(email)
            user = User(
                id=next(self._ids),
                username=username,
                email=email,
                password_hash=password_hash,
                inactive=True,
                activation_token=activation_token,
                created_at=datetime.now(UTC),
            )
            self._users[user.id] = user
            self._by_email[email] = user.id
            return user

    def delete(self, user_id: int) -> None:
        with self._lock:
            user = self._users.pop(user_id, None)
            if user is not None:
                self._by_email.pop(user.email, None)

    def find_by_id(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            user_id = self._by_email.get(email)
            return self._users.get(user_id) if user_id is not None else None

    def find_by_bearer_token(self, token: str) -> User | None:
        with self._lock:
            return next((u for u in self._users.values() if u.bearer_token == token), None)

    def activate(self, activation_token: str) -> bool:
        with self._lock:
            for user in self._users.values():
                if user.inactive and user.activation_token == activation_token:
                    self._users[user.id] = replace(user, inactive=False, activation_token=None)
                    return True
            return False

    def update_username(self, user_id: int, username: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            self._users[user_id] = replace(user, username=username)
            return True

    def ensure_bearer_token(self, user_id: int, token: str) -> str | None:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            if user.bearer_token is None:
                user = replace(user, bearer_token=token)
                self._users[user_id] = user
            return user.bearer_token

    def list_active(
        self, offset: int, limit: int, exclude_id: int | None = None
    ) -> tuple[list[User], int]:
        with self._lock:
            active = [
                user
                for user_id, user in sorted(self._users.items())
                if not user.inactive and user_id != exclude_id
            ]
        return active[offset : offset + limit], len(active)

    def count(self) -> int:
        """Number of stored rows, active or not."""
        with self._lock:
            return len(self._users)
