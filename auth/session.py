"""Session token lifecycle management.

Sessions are stateless: the session token is a signed JWT that carries the
account email and its own expiry. Validation never touches storage.
"""

from datetime import timedelta

from auth.config import AuthConfig
from auth.exceptions import InvalidTokenError, SessionExpiredError
from auth.tokens import PURPOSE_SESSION, TokenSigner
from auth.types import SessionToken, TokenClaims


class SessionManager:
    """Issues and validates session tokens."""

    def __init__(self, signer: TokenSigner, config: AuthConfig):
        self._signer = signer
        self._ttl = timedelta(hours=config.session_expiry_hours)

    def create_session(self, email: str) -> SessionToken:
        """Issue a new session token for an authenticated account."""
        token, expires_at = self._signer.issue_with_expiry(email, PURPOSE_SESSION, self._ttl)
        return SessionToken(token=token, email=email, expires_at=expires_at)

    def validate_session(self, token: str) -> TokenClaims:
        """Validate session token and return its claims.

        Raises:
            SessionExpiredError: If the token is invalid, tampered, or expired.
        """
        try:
            return self._signer.validate(token, PURPOSE_SESSION)
        except InvalidTokenError as e:
            raise SessionExpiredError("Session invalid or expired") from e
