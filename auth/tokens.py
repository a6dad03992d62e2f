"""
auth/tokens.py -- Signed, self-contained bearer tokens.

Security design decisions:
  Format: JWS compact serialization (header.payload.signature) produced with
       python-jose, HS256. The payload carries the subject id, issued-at,
       expiry, and a "Bearer" type tag. Nothing is stored server-side: a
       token is valid iff its MAC verifies under the process signing key and
       it has not expired.

  Verification order: structure first, then the MAC, and only then are the
       claims parsed. The subject id is never read out of an unverified
       payload.

  Canonical signatures: base64url tolerates a few different spellings of the
       same bytes (the unused low bits of the final character). A token whose
       signature segment is not the canonical encoding of its decoded MAC is
       rejected, so changing any character of the signature is always
       detected.

  Time: the caller may pass "now" explicitly so expiry is testable without
       sleeping. All times are whole seconds since the epoch.

  Key: TokenCodec takes an explicit core.config.TokenConfig built once at
       startup. There is no module-level key.

Layer rule: no imports from api/ or todos/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Union

from jose import jws, jwt
from jose.exceptions import JWSError, JWTError
from jose.utils import base64url_decode, base64url_encode

from auth.errors import Expired, InvalidSignature, MalformedToken
from auth.models import Token
from core.config import TokenConfig

logger = logging.getLogger("todovault.auth")

TOKEN_TYPE = "Bearer"

Instant = Union[datetime, int, float, None]


def _timestamp(now: Instant) -> int:
    """Normalize a caller-supplied instant to whole epoch seconds."""
    if now is None:
        return int(datetime.now(timezone.utc).timestamp())
    if isinstance(now, datetime):
        if now.tzinfo is None:
            raise ValueError("now must be timezone-aware")
        return int(now.timestamp())
    return int(now)


def _is_canonical_segment(segment: str) -> bool:
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except ValueError:
        return False
    return base64url_encode(raw).decode("ascii") == segment


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class TokenCodec:
    """Encode and verify bearer tokens for a single signing key.

    Usage:
        codec = TokenCodec(settings.token_config())
        token = codec.encode(user.id)
        user_id = codec.decode(token.value)
    """

    def __init__(self, config: TokenConfig) -> None:
        if not config.secret_key:
            raise ValueError("TokenConfig.secret_key must not be empty")
        self._config = config

    @property
    def ttl_seconds(self) -> int:
        return self._config.ttl_seconds

    def encode(self, subject_id: int, now: Instant = None) -> Token:
        """Mint a token for subject_id valid from now until now + TTL."""
        issued_at = _timestamp(now)
        expires_at = issued_at + self._config.ttl_seconds
        claims = {
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": expires_at,
            "typ": TOKEN_TYPE,
        }
        value = jws.sign(claims, self._config.secret_key, algorithm=self._config.algorithm)
        return Token(value=value, subject_id=subject_id, issued_at=issued_at, expires_at=expires_at)

    def decode(self, token: str, now: Instant = None) -> int:
        """Verify token and return its subject id.

        Raises:
            MalformedToken:   the string is not a well-formed token of ours.
            InvalidSignature: the MAC does not match (tampering or wrong key).
            Expired:          now is past the token's expiry.
        """
        current = _timestamp(now)

        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedToken()
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise MalformedToken() from exc
        if header.get("alg") != self._config.algorithm:
            logger.debug("Token rejected: unexpected algorithm")
            raise MalformedToken()

        signature_segment = token.rsplit(".", 1)[1]
        if not _is_canonical_segment(signature_segment):
            logger.debug("Token rejected: non-canonical signature")
            raise InvalidSignature()
        try:
            payload = jws.verify(token, self._config.secret_key, algorithms=[self._config.algorithm])
        except JWSError as exc:
            logger.debug("Token rejected: signature mismatch")
            raise InvalidSignature() from exc

        claims = self._parse_claims(payload)
        issued_at, expires_at = claims["iat"], claims["exp"]
        if issued_at > current + self._config.clock_skew_seconds:
            logger.debug("Token rejected: issued in the future")
            raise MalformedToken()
        if current > expires_at:
            raise Expired()
        return int(claims["sub"])

    @staticmethod
    def _parse_claims(payload: bytes) -> dict:
        try:
            claims = json.loads(payload.decode("utf-8"))
        except ValueError as exc:
            raise MalformedToken() from exc
        if not isinstance(claims, dict):
            raise MalformedToken()
        sub = claims.get("sub")
        if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()):
            raise MalformedToken()
        if not _is_int(claims.get("iat")) or not _is_int(claims.get("exp")):
            raise MalformedToken()
        if claims["exp"] <= claims["iat"]:
            raise MalformedToken()
        if claims.get("typ") != TOKEN_TYPE:
            raise MalformedToken()
        return claims
