"""
Domain exceptions - Semantic error types for the identity lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries the message key rendered at the HTTP boundary
and the status code it maps to; language text is never produced here.
"""


class UserServiceError(Exception):
    """Base class for identity lifecycle domain errors."""

    status_code = 500
    message_key = "internal_error"

    def __init__(self, message_key: str | None = None) -> None:
        if message_key is not None:
            self.message_key = message_key
        super().__init__(self.message_key)


class ValidationFailure(UserServiceError):
    """One or more field rules failed. Carries an ordered field -> key map."""

    status_code = 400
    message_key = "validation_failure"

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__()
        self.errors = dict(errors)

    def __str__(self) -> str:
        return f"{self.message_key}: {self.errors}"


class ActivationFailure(UserServiceError):
    """Token unknown, empty, or already consumed. Deliberately uniform."""

    status_code = 400
    message_key = "account_activation_failure"


class NotificationFailure(UserServiceError):
    """Activation message could not be delivered; registration rolled back."""

    status_code = 502
    message_key = "email_failure"


class UnauthorizedFailure(UserServiceError):
    """Credential-pair or bearer-token check failed."""

    status_code = 403
    message_key = "authentication_failure"


class ForbiddenFailure(UserServiceError):
    """Authenticated, but not the owner of the addressed resource."""

    status_code = 403
    message_key = "unauthenticated_user_update"


class NotFoundFailure(UserServiceError):
    """No visible user for the requested id."""

    status_code = 404
    message_key = "user_not_found"


class EmailAlreadyRegistered(Exception):
    """
    Raised by repositories when the email uniqueness constraint fires.

    This is the storage backstop for concurrent registrations; the
    registration service translates it into a ValidationFailure.
    """

    def __init__(self, email: str) -> None:
        super().__init__(email)
        self.email = email
