"""
auth/passwords.py -- Salted one-way password hashing (bcrypt).

Security design decisions:
  bcrypt is the right choice for low-entropy secrets (passwords) because its
  cost factor makes brute-force expensive. gensalt() draws a fresh random
  salt on every call and embeds it, together with the cost, in the digest,
  so identical passwords never produce identical digests.

  checkpw() recomputes the hash with the embedded salt and compares the
  results in constant time, so response time does not reveal how many
  leading bytes matched.

  Using bcrypt directly rather than passlib[bcrypt] because passlib's
  internal wrap-bug detection creates a password longer than 72 bytes, which
  bcrypt 4.x rejects with an explicit error.

Layer rule: no imports from api/, core/, or todos/.
"""

from __future__ import annotations

import bcrypt

# bcrypt only reads the first 72 bytes of its input. AuthService rejects
# longer passwords so two distinct passwords never share a digest.
MAX_PASSWORD_BYTES = 72

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Hash and verify passwords at a configurable bcrypt cost.

    Usage:
        hasher = PasswordHasher(rounds=12)
        digest = hasher.hash("correct horse")
        hasher.verify("correct horse", digest)  # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds
        # Computed once so the first unknown-user login is not measurably
        # slower than later ones. Same cost as real digests.
        self._dummy_hash = self.hash("todovault_timing_dummy")

    def hash(self, plaintext: str) -> str:
        """Return a bcrypt digest of plaintext with a freshly generated salt."""
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True if plaintext matches digest.

        A digest that is not a valid bcrypt string verifies as False rather
        than raising, so a corrupted row cannot be told apart from a wrong
        password.
        """
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            return False

    def verify_dummy(self, plaintext: str) -> None:
        """Spend one verification's worth of work on a throwaway digest.

        Called when the username does not exist so that branch costs the
        same as a wrong password.
        """
        self.verify(plaintext, self._dummy_hash)
