"""
API v1 routes.

Defines REST endpoints for account registration, activation, lookup,
listing, self-update and bearer token issue.

Handlers are plain (sync) functions: FastAPI runs them on its worker
thread pool, so bcrypt hashing and blocking storage or SMTP calls in one
request do not stall other requests.
"""

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import (
    Pagination,
    get_authentication_service,
    get_basic_auth_credentials,
    get_bearer_token,
    get_locale,
    get_message_catalog,
    get_pagination,
    get_registration_service,
    get_user_service,
)
from src.api.models import (
    AuthRequest,
    ErrorResponse,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserPageResponse,
    UserResponse,
    UserUpdateRequest,
)
from src.domain.authentication import AuthenticationService
from src.domain.exceptions import UnauthorizedFailure
from src.domain.registration import RegistrationService
from src.domain.users import UserService
from src.i18n import MessageCatalog

router = APIRouter(tags=["v1"])


@router.post(
    "/users",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failure"},
        502: {"model": ErrorResponse, "description": "Activation e-mail could not be sent"},
    },
    summary="Register a new user",
    description="Create an inactive account and send its activation token by e-mail.",
)
def register(
    request_data: RegisterRequest | None = None,
    service: RegistrationService = Depends(get_registration_service),
    catalog: MessageCatalog = Depends(get_message_catalog),
    locale: str = Depends(get_locale),
) -> MessageResponse:
    """
    Register a new user and send the activation token.

    - **username**: 4 to 32 characters
    - **email**: Valid, unused e-mail address
    - **password**: At least 6 characters, mixed case and a digit
    """
    request_data = request_data or RegisterRequest()
    service.register(request_data.username, request_data.email, request_data.password)
    return MessageResponse(message=catalog.resolve("user_create_success", locale))


@router.post(
    "/users/token/{token}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid token or active account"}},
    summary="Activate account with activation token",
)
def activate(
    token: str,
    service: RegistrationService = Depends(get_registration_service),
    catalog: MessageCatalog = Depends(get_message_catalog),
    locale: str = Depends(get_locale),
) -> MessageResponse:
    """Consume the activation token received by e-mail."""
    service.activate(token)
    return MessageResponse(message=catalog.resolve("account_activation_success", locale))


@router.get(
    "/users",
    response_model=UserPageResponse,
    responses={403: {"model": ErrorResponse, "description": "Missing or invalid credentials"}},
    summary="List active users",
    description="Requires HTTP BASIC AUTH (email:password) of an active user. "
    "The caller is left out of the listing.",
)
def list_users(
    pagination: Pagination = Depends(get_pagination),
    credentials: tuple[str, str] | None = Depends(get_basic_auth_credentials),
    auth: AuthenticationService = Depends(get_authentication_service),
    service: UserService = Depends(get_user_service),
) -> UserPageResponse:
    """Return one page of active users."""
    user_id = auth.verify_credentials(*credentials) if credentials else None
    if user_id is None:
        raise UnauthorizedFailure()

    result = service.list_users(pagination.page, pagination.size, exclude_id=user_id)
    return UserPageResponse(
        content=[
            UserResponse(id=user.id, username=user.username, email=user.email)
            for user in result.content
        ],
        page=result.page,
        size=result.size,
        total_pages=result.total_pages,
    )


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Get an active user",
)
def get_user(user_id: int, service: UserService = Depends(get_user_service)) -> UserResponse:
    user = service.get_user(user_id)
    return UserResponse(id=user.id, username=user.username, email=user.email)


@router.put(
    "/users/{user_id}",
    responses={
        200: {"description": "Updated"},
        400: {"model": ErrorResponse, "description": "Validation failure"},
        403: {"model": ErrorResponse, "description": "Not authenticated or not the owner"},
    },
    summary="Update own profile",
    description="Requires `Authorization: Bearer <token>` of the addressed user.",
)
def update_user(
    user_id: int,
    request_data: UserUpdateRequest | None = None,
    token: str | None = Depends(get_bearer_token),
    auth: AuthenticationService = Depends(get_authentication_service),
    service: UserService = Depends(get_user_service),
) -> Response:
    """
    Apply a partial update to the caller's own record.

    Authentication (valid bearer token) and ownership (token owner is the
    addressed user) are checked separately.
    """
    actor_id = auth.verify_bearer_token(token)
    if actor_id is None:
        raise UnauthorizedFailure("unauthenticated_user_update")

    request_data = request_data or UserUpdateRequest()
    service.update_user(actor_id, user_id, username=request_data.username)
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/auth",
    response_model=TokenResponse,
    responses={403: {"model": ErrorResponse, "description": "Incorrect credentials"}},
    summary="Issue bearer token",
    description="Exchange the e-mail and password of an active user for the user's bearer token.",
)
def authenticate(
    request_data: AuthRequest,
    auth: AuthenticationService = Depends(get_authentication_service),
) -> TokenResponse:
    issued = auth.issue_token(request_data.email, request_data.password)
    return TokenResponse(id=issued.id, username=issued.username, token=issued.token)
