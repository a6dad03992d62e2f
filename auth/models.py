"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in todos/models.py -- dataclasses own domain shape; stores and services do
the work.

Layer rule: no imports from api/, core/, or todos/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class UserIdentity:
    """Who a user is, without any secret material.

    Frozen: identities are handed to route handlers and the guard, none of
    which may change them. created_at is ISO 8601 UTC, assigned by the store
    on insert and never taken from the client.
    """

    id: int
    username: str  # unique, <= 30 chars
    name: str
    email: str
    created_at: str


@dataclass
class CredentialRecord:
    """A stored user: identity plus the bcrypt digest of their password.

    Only the store and AuthService ever see a CredentialRecord. Routes
    receive the identity alone so the hash cannot be serialized by accident.
    """

    identity: UserIdentity
    password_hash: str


@dataclass(frozen=True)
class Token:
    """A freshly minted bearer token.

    value is the opaque compact string handed to the client; the other
    fields are kept for the issuer's convenience (e.g. expires_in) and are
    never trusted when a token comes back in.
    """

    value: str
    subject_id: int
    issued_at: int  # seconds since the epoch
    expires_at: int  # seconds since the epoch
    token_type: str = "Bearer"

    @property
    def expires_in(self) -> int:
        return self.expires_at - self.issued_at


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
