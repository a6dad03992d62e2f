"""
API request and response models for TodoVault REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
todos/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models only check shape and hard size caps. The sign-up input policy
(username length, password length, email format) lives in AuthService so the
same rules apply to every caller, not just HTTP.

Separation of concerns: auth/ + todos/ models = domain truth; api/ models = API contract.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Token, UserIdentity
from todos.models import Todo

# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class SignUpRequest(BaseModel):
    """Request body for POST /api/v1/auth/signup."""

    username: str = Field(max_length=255)
    password: str = Field(max_length=255)
    email: str = Field(max_length=255)
    name: str = Field(max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(max_length=255)
    password: str = Field(max_length=255)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a UserIdentity. Never carries the password hash."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    username: str
    email: str
    name: str
    created_at: str = Field(alias="createdAt")

    @classmethod
    def from_identity(cls, identity: UserIdentity) -> "UserResponse":
        return cls(
            id=identity.id,
            username=identity.username,
            email=identity.email,
            name=identity.name,
            created_at=identity.created_at,
        )


class TokenResponse(BaseModel):
    """Response for POST /api/v1/auth/login."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    token_type: str = Field(default="Bearer", alias="tokenType")
    expires_in: int = Field(alias="expiresIn")

    @classmethod
    def from_token(cls, token: Token) -> "TokenResponse":
        return cls(token=token.value, token_type=token.token_type, expires_in=token.expires_in)


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


class TodoCreate(BaseModel):
    """Request body for POST /api/v1/todos."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=5000)


class TodoUpdate(BaseModel):
    """Request body for PATCH /api/v1/todos/{todo_id}. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, max_length=5000)
    completed: Optional[bool] = None


class TodoResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    content: str
    completed: bool
    owner_id: int = Field(alias="ownerId")
    created_at: str = Field(alias="createdAt")

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoResponse":
        return cls(
            id=todo.id,
            title=todo.title,
            content=todo.content,
            completed=todo.completed,
            owner_id=todo.owner_id,
            created_at=todo.created_at,
        )


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
