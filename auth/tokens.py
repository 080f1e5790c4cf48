"""Signed, self-contained tokens for email verification and sessions.

Tokens are HS256 JWTs carrying the account email in ``sub`` and a ``typ``
claim naming their purpose. Nothing is stored server-side: integrity and
expiry are checked from the token alone.
"""

import logging
from datetime import datetime, timedelta

import jwt

from auth.config import AuthConfig
from auth.exceptions import InvalidTokenError
from auth.types import TokenClaims
from utils.timezone import from_timestamp, now_utc

logger = logging.getLogger(__name__)

PURPOSE_VERIFY = "verify"
PURPOSE_SESSION = "session"


class TokenSigner:
    """Issues and validates signed tokens with a process-wide secret."""

    def __init__(self, secret: str, config: AuthConfig):
        if not secret:
            raise ValueError("token secret is required")
        self._secret = secret
        self._algorithm = config.token_algorithm

    def issue(self, email: str, purpose: str, ttl: timedelta) -> str:
        """Sign a token for email that expires ttl from now."""
        token, _ = self.issue_with_expiry(email, purpose, ttl)
        return token

    def issue_with_expiry(
        self, email: str, purpose: str, ttl: timedelta
    ) -> tuple[str, datetime]:
        """Sign a token and return it with the expiry it actually carries.

        ``exp`` is whole seconds, so the returned expiry is truncated the same way.
        """
        now = now_utc()
        exp = int((now + ttl).timestamp())
        payload = {
            "sub": email,
            "typ": purpose,
            "iat": int(now.timestamp()),
            "exp": exp,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, from_timestamp(exp)

    def validate(self, token: str, purpose: str) -> TokenClaims:
        """Verify signature, expiry and purpose.

        Raises:
            InvalidTokenError: On tampering, expiry, malformed input, or a
                token issued for a different purpose.
        """
        if not token:
            raise InvalidTokenError()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired %s token", purpose)
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("Rejected invalid %s token: %s", purpose, type(e).__name__)
            raise InvalidTokenError() from e

        if payload.get("typ") != purpose:
            raise InvalidTokenError()

        return TokenClaims(
            email=payload["sub"],
            purpose=purpose,
            issued_at=from_timestamp(payload["iat"]),
            expires_at=from_timestamp(payload["exp"]),
        )
