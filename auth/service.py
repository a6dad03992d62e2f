"""
auth/service.py -- Sign-up and login orchestration.

AuthService is the only place that combines the store, the hasher and the
codec. Routes call it; it never sees a Request object.

Login request lifecycle (logged at DEBUG, no retries):
  RECEIVED -> VALIDATED -> CREDENTIAL_CHECKED -> TOKEN_ISSUED
  RECEIVED -> VALIDATED -> REJECTED (InvalidCredentials)
  Any storage fault ends the request in ERROR (StorageUnavailable).

Timing equalization: an unknown username still costs one bcrypt
verification, so response time does not reveal whether the account exists.

Layer rule: no imports from api/ or todos/.
"""

from __future__ import annotations

import logging
import re

from auth.errors import InvalidCredentials, InvalidSignature, ValidationError
from auth.models import Token, UserIdentity
from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher
from auth.store import NAME_MAX_LENGTH, USERNAME_MAX_LENGTH, CredentialStore
from auth.tokens import Instant, TokenCodec

logger = logging.getLogger("todovault.auth")

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_EMAIL_MAX_LENGTH = 255


class AuthService:
    """Register users, check their passwords, and issue tokens.

    Usage:
        service = AuthService(store, PasswordHasher(), TokenCodec(config))
        identity = service.sign_up("alice", "password123", "a@x.com", "Alice")
        token = service.login("alice", "password123")
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        codec: TokenCodec,
        password_min_length: int = 8,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.codec = codec
        self.password_min_length = password_min_length

    def sign_up(self, username: str, password: str, email: str, name: str) -> UserIdentity:
        """Validate input, hash the password, and create the user.

        Raises:
            ValidationError: one or more fields failed the input policy.
            ConflictError:   username already taken (from the store, unchanged).
        """
        username, email, name = username.strip(), email.strip(), name.strip()
        errors = self._validate(username, password, email, name)
        if errors:
            raise ValidationError(detail=errors)

        identity = self.store.create(username, self.hasher.hash(password), email, name)
        logger.info("User %d signed up", identity.id)
        return identity

    def login(self, username: str, password: str) -> Token:
        """Check credentials and mint a token for the matching user.

        Raises InvalidCredentials for an unknown username and for a wrong
        password alike. The username is stripped the same way sign_up
        stripped it before storing.
        """
        logger.debug("login: RECEIVED")
        username = username.strip()
        if not username or not password:
            logger.debug("login: REJECTED (empty field)")
            raise InvalidCredentials()
        logger.debug("login: VALIDATED")

        record = self.store.find_by_username(username)
        if record is None:
            self.hasher.verify_dummy(password)
            logger.info("Login rejected")
            raise InvalidCredentials()
        if not self.hasher.verify(password, record.password_hash):
            logger.info("Login rejected")
            raise InvalidCredentials()
        logger.debug("login: CREDENTIAL_CHECKED")

        token = self.codec.encode(record.identity.id)
        logger.info("Token issued for user %d", record.identity.id)
        return token

    def authenticate(self, token: str, now: Instant = None) -> UserIdentity:
        """Resolve a bearer token to the identity it was issued for.

        A validly signed token whose user no longer exists is treated like a
        bad signature: the caller gets the same 401 either way.
        """
        subject_id = self.codec.decode(token, now)
        record = self.store.find_by_id(subject_id)
        if record is None:
            raise InvalidSignature()
        return record.identity

    def _validate(self, username: str, password: str, email: str, name: str) -> dict[str, str]:
        errors: dict[str, str] = {}

        if not username:
            errors["username"] = "Username is required."
        elif len(username) > USERNAME_MAX_LENGTH:
            errors["username"] = f"Username must be at most {USERNAME_MAX_LENGTH} characters."
        elif any(ch.isspace() for ch in username):
            errors["username"] = "Username must not contain whitespace."

        if not password:
            errors["password"] = "Password is required."
        elif len(password) < self.password_min_length:
            errors["password"] = f"Password must be at least {self.password_min_length} characters."
        elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            errors["password"] = f"Password must be at most {MAX_PASSWORD_BYTES} bytes."

        if not email:
            errors["email"] = "Email is required."
        elif len(email) > _EMAIL_MAX_LENGTH or not _EMAIL_PATTERN.match(email):
            errors["email"] = "Email address is not valid."

        if not name:
            errors["name"] = "Name is required."
        elif len(name) > NAME_MAX_LENGTH:
            errors["name"] = f"Name must be at most {NAME_MAX_LENGTH} characters."

        return errors
