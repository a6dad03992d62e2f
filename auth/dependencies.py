"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Requests authenticate with an "Authorization: Bearer <token>" header. The
token is verified by AuthService.authenticate(), which converges on a
UserIdentity.

get_current_user() raises a TokenError subclass (rendered as 401) if the
request is unauthenticated.

Layer rule: no imports from todos/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import MalformedToken
from auth.models import UserIdentity
from auth.service import AuthService

_BEARER_PREFIX = "bearer "


def bearer_token(request: Request) -> str | None:
    """Extract the raw token from the Authorization header, if present.

    The scheme name is matched case-insensitively (RFC 7235).
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def get_current_user(request: Request) -> UserIdentity:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: UserIdentity = Depends(get_current_user)): ...

    Missing, malformed, forged, and expired tokens all raise a TokenError
    subclass, which the app-level handler renders as one uniform 401.
    """
    token = bearer_token(request)
    if token is None:
        raise MalformedToken()
    auth_service: AuthService = request.app.state.auth_service
    return auth_service.authenticate(token)
