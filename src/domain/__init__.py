"""
Domain layer - Pure business logic with zero framework imports.

This package contains the identity lifecycle: registration with
compensation, account activation, the authentication gate and the user
directory. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .authentication import AuthenticationService, IssuedToken
from .exceptions import (
    ActivationFailure,
    EmailAlreadyRegistered,
    ForbiddenFailure,
    NotFoundFailure,
    NotificationFailure,
    UnauthorizedFailure,
    UserServiceError,
    ValidationFailure,
)
from .ports import AccountState, EmailSender, User, UserRepository
from .registration import RegistrationService
from .security import PasswordHasher, generate_token
from .users import UserPage, UserService

__all__ = [
    "AccountState",
    "ActivationFailure",
    "AuthenticationService",
    "EmailAlreadyRegistered",
    "EmailSender",
    "ForbiddenFailure",
    "IssuedToken",
    "NotFoundFailure",
    "NotificationFailure",
    "PasswordHasher",
    "RegistrationService",
    "UnauthorizedFailure",
    "User",
    "UserPage",
    "UserRepository",
    "UserService",
    "UserServiceError",
    "ValidationFailure",
    "generate_token",
]
