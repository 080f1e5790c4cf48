"""Security event logging for the auth audit trail.

Events go to the 'security' logger as one line each, with the event name and
context attached as structured ``extra`` fields for log shippers. Passwords
and tokens are never passed in.
"""

import logging
from enum import Enum
from typing import Any

from utils.timezone import now_utc


class SecurityEvent(Enum):
    """Auth security event types."""

    SIGNUP_REQUESTED = "signup_requested"
    SIGNUP_DUPLICATE = "signup_duplicate"
    SIGNUP_FAILED = "signup_failed"
    USER_CREATED = "user_created"
    VERIFICATION_SENT = "verification_sent"
    VERIFICATION_FAILED = "verification_failed"
    EMAIL_VERIFIED = "email_verified"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    PROFILE_IMAGE_UPLOADED = "profile_image_uploaded"
    PROFILE_IMAGE_FAILED = "profile_image_failed"


# Events that indicate something went wrong are logged at WARNING
_WARNING_EVENTS = frozenset({
    SecurityEvent.SIGNUP_FAILED,
    SecurityEvent.VERIFICATION_FAILED,
    SecurityEvent.LOGIN_FAILED,
    SecurityEvent.PROFILE_IMAGE_FAILED,
})


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("security")

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record a security event."""
        level = logging.WARNING if event in _WARNING_EVENTS else logging.INFO
        self._logger.log(
            level,
            "%s email=%s details=%s",
            event.value,
            email or "-",
            details or {},
            extra={
                "security_event": event.value,
                "email": email,
                "details": details or {},
                "event_time": now_utc().isoformat(),
            },
        )
