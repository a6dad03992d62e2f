"""
auth/errors.py -- Exception taxonomy for the auth core.

Every failure the core can raise is an AuthError subclass carrying the HTTP
status and machine-readable code it maps to. api/main.py registers a single
exception handler for AuthError, so route handlers never translate errors
themselves.

Leak rules:
  - Messages are fixed strings. None include the username, password, hash,
    token contents, or key material.
  - InvalidCredentials is raised for both "unknown user" and "wrong password".
  - All TokenError subclasses share one status, code, and message, so the
    client cannot tell a forged token from an expired one.
  - ResourceNotFound is raised for both "missing" and "owned by someone else".

Layer rule: no imports from api/, todos/, or web frameworks.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class AuthError(Exception):
    """Base class for all domain errors raised by the auth core."""

    status: HTTPStatus = HTTPStatus.BAD_REQUEST
    code: str = "auth_error"
    message: str = "Request could not be processed."

    def __init__(self, message: str | None = None, *, detail: Any = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


class ValidationError(AuthError):
    """User-correctable input problem. detail maps field name -> reason."""

    status = HTTPStatus.BAD_REQUEST
    code = "validation_error"
    message = "Request validation failed."


class ConflictError(AuthError):
    status = HTTPStatus.CONFLICT
    code = "conflict"
    message = "A user with that username already exists."


class InvalidCredentials(AuthError):
    status = HTTPStatus.UNAUTHORIZED
    code = "bad_credentials"
    message = "Invalid username or password."


class TokenError(AuthError):
    """Any bearer token that must not be trusted."""

    status = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    message = "Authentication required."


class MalformedToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class Expired(TokenError):
    pass


class ResourceNotFound(AuthError):
    status = HTTPStatus.NOT_FOUND
    code = "not_found"
    message = "Resource not found."


class StorageUnavailable(AuthError):
    """The backing database could not be reached. Never retried by the core."""

    status = HTTPStatus.SERVICE_UNAVAILABLE
    code = "storage_unavailable"
    message = "Storage is temporarily unavailable. Try again later."
