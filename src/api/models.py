"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Request fields are optional on purpose: missing and empty values are
reported by the domain's field rules with their own message keys, and
unknown fields (such as ``inactive``) are ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    model_config = ConfigDict(extra="ignore")

    username: str | None = Field(None, description="4 to 32 characters")
    email: str | None = Field(None, description="Unique e-mail address")
    password: str | None = Field(
        None,
        description="At least 6 characters with an uppercase letter, a lowercase letter and a digit",
    )


class UserUpdateRequest(BaseModel):
    """Request model for a partial self-update."""

    model_config = ConfigDict(extra="ignore")

    username: str | None = None


class AuthRequest(BaseModel):
    """Request model for bearer token issue."""

    email: str | None = None
    password: str | None = None


class MessageResponse(BaseModel):
    """Response model carrying a localized message."""

    message: str


class UserResponse(BaseModel):
    """Public view of an ACTIVE user."""

    id: int
    username: str
    email: str


class UserPageResponse(BaseModel):
    """One page of the user listing."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[UserResponse]
    page: int
    size: int
    total_pages: int = Field(alias="totalPages")


class TokenResponse(BaseModel):
    """Response model for an issued bearer token."""

    id: int
    username: str
    token: str


class ErrorResponse(BaseModel):
    """Uniform error body."""

    model_config = ConfigDict(populate_by_name=True)

    path: str
    timestamp: int = Field(description="Epoch milliseconds when the error was built")
    message: str
    validation_errors: dict[str, str] | None = Field(None, alias="validationErrors")
