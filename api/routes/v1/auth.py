"""
api/routes/v1/auth.py -- Sign-up, login, and identity REST endpoints.

Routes:
  POST /api/v1/auth/signup   -- register a user; 201 / 400 / 409
  POST /api/v1/auth/login    -- password login; returns a bearer token
  GET  /api/v1/auth/me       -- current user info (requires auth)

Security:
  POST /signup and POST /login are rate-limited per IP (Settings).
  Login returns the same 401 body for an unknown username and a wrong
  password; AuthService burns a bcrypt verification in both cases.
  Cache-Control: no-store on login responses so tokens are not cached.

Errors are raised as auth.errors exceptions and rendered by the handler in
api/main.py; no handler here builds an error response itself.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit, signup_rate_limit
from api.models import LoginRequest, SignUpRequest, TokenResponse, UserResponse
from auth.dependencies import get_current_user
from auth.models import UserIdentity
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/signup:  public
# - POST /api/v1/auth/login:   public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:      requires auth (get_current_user)
router = APIRouter()


@limiter.limit(signup_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/signup", response_model=UserResponse, status_code=201)
def signup(request: Request, body: SignUpRequest) -> UserResponse:
    """Register a new user.

    The creation timestamp is assigned by the store; clients cannot supply it.
    """
    auth_service: AuthService = request.app.state.auth_service
    identity = auth_service.sign_up(body.username, body.password, body.email, body.name)
    return UserResponse.from_identity(identity)


@limiter.limit(login_rate_limit)  # brute-force mitigation
@router.post("/auth/login", response_model=TokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a bearer token."""
    auth_service: AuthService = request.app.state.auth_service
    token = auth_service.login(body.username, body.password)
    resp = JSONResponse(
        status_code=200,
        content=TokenResponse.from_token(token).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: UserIdentity = Depends(get_current_user)) -> UserResponse:
    """Return identity information for the currently authenticated user."""
    return UserResponse.from_identity(current_user)
