"""Typed exceptions for account lifecycle failures.

Every exception carries a machine-readable ``kind`` and a short message that
is safe to show to the caller. Collaborator error text never goes into the
message; it is chained via ``raise ... from`` and logged instead.
"""


class AuthError(Exception):
    """Base class for account lifecycle errors."""

    kind = "auth_error"
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """A required input is missing, empty, or unacceptable."""

    kind = "validation_error"
    default_message = "Invalid input"


class DuplicateAccountError(AuthError):
    """An account for this email already exists."""

    kind = "duplicate"
    default_message = "Email already exists"


class AccountNotFoundError(AuthError):
    """
    No usable account for this email.

    Raised for both unknown and unverified accounts so callers cannot tell
    the two apart.
    """

    kind = "not_found"
    default_message = "User not found or not verified"


class InvalidCredentialError(AuthError):
    """Password does not match the stored credential hash."""

    kind = "invalid_credential"
    default_message = "Invalid credentials"


class InvalidTokenError(AuthError):
    """
    Token signature is invalid, the token is malformed, or it has expired.

    Used for both verification tokens and session tokens.
    """

    kind = "invalid_token"
    default_message = "Invalid or expired token"


class UploadError(AuthError):
    """Blob store rejected or failed the upload."""

    kind = "upload_failure"
    default_message = "Upload failed"


class NotificationError(AuthError):
    """Verification email could not be dispatched."""

    kind = "notification_error"
    default_message = "Signup failed"


class InternalError(AuthError):
    """Persistence store failure or unexpected collaborator fault."""

    kind = "internal_error"
    default_message = "An internal error occurred"


class SessionExpiredError(InvalidTokenError):
    """Session token is invalid or has expired; the caller must log in again."""

    default_message = "Session has expired"
