"""
auth/guard.py -- Single-owner authorization for user-owned resources.

Strict ownership: a user may read or change a resource iff they own it.
There are no roles and no delegation.

A denial is reported with ResourceNotFound, the same exception the resource
layer raises for a missing row, so "exists but belongs to someone else" and
"does not exist" render as the same 404.

Layer rule: no imports from api/ or todos/. The guard only sees an identity
and an owner id, never the resource itself.
"""

from __future__ import annotations

from auth.errors import ResourceNotFound
from auth.models import Decision, UserIdentity


class AuthorizationGuard:
    def authorize(self, identity: UserIdentity, resource_owner_id: int) -> Decision:
        """Return ALLOW iff identity owns the resource."""
        if identity.id == resource_owner_id:
            return Decision.ALLOW
        return Decision.DENY

    def require_owner(self, identity: UserIdentity, resource_owner_id: int) -> None:
        """Raise ResourceNotFound unless identity owns the resource."""
        if self.authorize(identity, resource_owner_id) is Decision.DENY:
            raise ResourceNotFound()
