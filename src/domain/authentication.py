"""
Authentication gate - credential-pair and bearer-token verifiers.

Two independent verifiers guard different operations and are kept
separate on purpose:

- Credential pair (email + password) proves identity at request time.
  It gates the user listing and the bearer-token issue endpoint.
- Bearer token proves possession of a capability issued earlier by
  issue_token(). It gates self-update.

Verifiers return the authenticated user id, or None. Missing or wrong
credentials are an expected outcome, not an exception; the HTTP layer
decides how to report them.
"""

import logging
from dataclasses import dataclass, field

from .exceptions import UnauthorizedFailure
from .ports import UserRepository
from .registration import normalize_email
from .security import PasswordHasher, generate_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    """Bearer token handed to an authenticated user."""

    id: int
    username: str
    token: str


@dataclass
class AuthenticationService:
    """Domain service verifying credentials and issuing bearer tokens."""

    repository: UserRepository
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    token_bytes: int = 24

    def verify_credentials(self, email: str | None, password: str | None) -> int | None:
        """
        Verify an email/password pair.

        Unknown email, PENDING account and wrong password are rejected
        alike. The bcrypt comparison runs in every case.

        Returns:
            The user's id, or None if the pair is not accepted
        """
        if not email or password is None:
            return None

        user = self.repository.find_by_email(normalize_email(email))
        stored_hash = user.password_hash if user is not None else None
        password_valid = self.hasher.verify(password, stored_hash)

        if user is None or user.inactive or not password_valid:
            return None
        return user.id

    def verify_bearer_token(self, token: str | None) -> int | None:
        """
        Resolve a bearer token to the id of the user owning it.

        Returns:
            The user's id, or None for a missing or unknown token
        """
        if not token:
            return None
        user = self.repository.find_by_bearer_token(token)
        if user is None:
            return None
        return user.id

    def issue_token(self, email: str | None, password: str | None) -> IssuedToken:
        """
        Hand out the bearer token of an ACTIVE user.

        The token is generated on first issue and reused afterwards.

        Raises:
            UnauthorizedFailure: If the credential pair is not accepted
        """
        user_id = self.verify_credentials(email, password)
        if user_id is None:
            raise UnauthorizedFailure()

        token = self.repository.ensure_bearer_token(user_id, generate_token(self.token_bytes))
        user = self.repository.find_by_id(user_id)
        if token is None or user is None:
            # Row vanished between verification and lookup
            raise UnauthorizedFailure()

        logger.info("Bearer token issued for user %s", user_id)
        return IssuedToken(id=user.id, username=user.username, token=token)
