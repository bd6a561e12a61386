"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services, infrastructure adapters, the negotiated locale,
pagination parameters and transport credentials into routes.
"""

from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, HTTPException, Query, Request
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)

from src.adapters.smtp import ConsoleEmailSender, SmtpEmailSender
from src.config.settings import Settings, get_settings
from src.domain.authentication import AuthenticationService
from src.domain.ports import EmailSender, UserRepository
from src.domain.registration import RegistrationService
from src.domain.security import PasswordHasher
from src.domain.users import UserService
from src.i18n import MessageCatalog, get_catalog


def get_repository(request: Request) -> UserRepository:
    """
    Get the user repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


@lru_cache
def get_email_sender() -> EmailSender:
    """Get the configured email sender (singleton)."""
    settings = get_settings()
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleEmailSender()


def get_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_cost)


def get_registration_service(
    repository: UserRepository = Depends(get_repository),
    email_sender: EmailSender = Depends(get_email_sender),
    hasher: PasswordHasher = Depends(get_hasher),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and email sender for the domain service.
    """
    return RegistrationService(
        repository=repository,
        email_sender=email_sender,
        hasher=hasher,
        token_bytes=settings.token_bytes,
        compensation_attempts=settings.compensation_attempts,
    )


def get_authentication_service(
    repository: UserRepository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_hasher),
    settings: Settings = Depends(get_settings),
) -> AuthenticationService:
    return AuthenticationService(
        repository=repository, hasher=hasher, token_bytes=settings.token_bytes
    )


def get_user_service(repository: UserRepository = Depends(get_repository)) -> UserService:
    return UserService(repository=repository)


def get_message_catalog(settings: Settings = Depends(get_settings)) -> MessageCatalog:
    return get_catalog(settings.default_locale)


def get_locale(
    request: Request, catalog: MessageCatalog = Depends(get_message_catalog)
) -> str:
    """Negotiate the response locale from the Accept-Language header."""
    return catalog.negotiate(request.headers.get("accept-language"))


@dataclass(frozen=True)
class Pagination:
    """Zero-based page index and page size."""

    page: int
    size: int


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def get_pagination(
    page: str | None = Query(None, description="Zero-based page index"),
    size: str | None = Query(None, description="Page size"),
    settings: Settings = Depends(get_settings),
) -> Pagination:
    """
    Read pagination parameters leniently.

    Non-numeric or negative page -> 0. Non-numeric size or size outside
    [1, max_page_size] -> default_page_size.
    """
    page_index = _parse_int(page)
    if page_index is None or page_index < 0:
        page_index = 0

    page_size = _parse_int(size)
    if page_size is None or page_size < 1 or page_size > settings.max_page_size:
        page_size = settings.default_page_size

    return Pagination(page=page_index, size=page_size)


class OptionalHTTPBasic(HTTPBasic):
    """
    HTTP BASIC AUTH scheme that never raises.

    FastAPI's HTTPBasic answers 401 for malformed headers even with
    auto_error disabled; here malformed and missing credentials both
    yield None so the route can reject them uniformly.
    """

    def __init__(self) -> None:
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> HTTPBasicCredentials | None:  # type: ignore[override]
        try:
            return await super().__call__(request)
        except HTTPException:
            return None


# Security schemes for OpenAPI documentation
http_basic = OptionalHTTPBasic()
http_bearer = HTTPBearer(auto_error=False)


def get_basic_auth_credentials(
    credentials: HTTPBasicCredentials | None = Depends(http_basic),
) -> tuple[str, str] | None:
    """
    Extract credentials from the HTTP BASIC AUTH header.

    Returns:
        Tuple of (email, password), or None if the header is missing or malformed
    """
    if credentials is None:
        return None
    return credentials.username, credentials.password


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if credentials is None:
        return None
    return credentials.credentials
