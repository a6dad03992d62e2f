"""todos/ -- The owned resource served behind the auth core.

Layer rule: todos/ may import from auth/ (errors, shared engine setup) and core/ but never
from api/. Ownership checks are NOT done here -- route handlers pass
every loaded Todo through auth.guard.AuthorizationGuard first.
"""
