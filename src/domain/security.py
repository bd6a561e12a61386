"""
Credential hashing and token generation.

Passwords are hashed with bcrypt (salted, adaptive cost) and verified by
bcrypt's own re-hash comparison. Tokens are URL-safe random strings from
the secrets module; they are bearer secrets and are never derived from
user data.

Timing Oracle Prevention:
-------------------------
verify() always runs a bcrypt comparison. When no stored hash exists
(unknown email), it compares against a dummy hash of the same cost so
the response time does not reveal whether the account exists. Inputs
bcrypt refuses (over 72 bytes, malformed hash) fail verification the
same way on both branches.
"""

import secrets
from dataclasses import dataclass
from functools import lru_cache

import bcrypt


@lru_cache
def _dummy_hash(rounds: int) -> bytes:
    """Pre-computed hash compared against when the looked-up user does not exist."""
    return bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(rounds=rounds))


@dataclass(frozen=True)
class PasswordHasher:
    """bcrypt-based credential hasher."""

    rounds: int = 10

    def __post_init__(self) -> None:
        # Warm the cache so the first unknown-email lookup is not slower
        _dummy_hash(self.rounds)

    @property
    def dummy_hash(self) -> bytes:
        return _dummy_hash(self.rounds)

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password with a fresh salt.

        Raises:
            ValueError: If the password is longer than 72 bytes
        """
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str | None) -> bool:
        """
        Check a plaintext password against a stored hash.

        A missing hash still costs one bcrypt comparison and returns False.
        """
        expected = password_hash.encode() if password_hash is not None else self.dummy_hash
        try:
            matched = bcrypt.checkpw(password.encode(), expected)
        except ValueError:
            # Over-long password or a stored value that is not a bcrypt hash
            return False
        return matched and password_hash is not None


def generate_token(nbytes: int = 24) -> str:
    """Generate an unguessable URL-safe token."""
    return secrets.token_urlsafe(nbytes)
