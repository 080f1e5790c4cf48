"""Password hashing and verification.

bcrypt with automatic salting and a configurable work factor.
"""

import bcrypt

from auth.config import AuthConfig


class CredentialHasher:
    """One-way credential hashing backed by bcrypt."""

    def __init__(self, config: AuthConfig):
        self._rounds = config.bcrypt_rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password (auto-salted at the configured cost)."""
        return bcrypt.hashpw(
            plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)
        ).decode("utf-8")

    def verify(self, plaintext: str, credential_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash.

        A malformed stored hash counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(
                plaintext.encode("utf-8"), credential_hash.encode("utf-8")
            )
        except (ValueError, TypeError):
            return False
