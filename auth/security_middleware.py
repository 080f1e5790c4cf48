"""Security middleware for FastAPI - session validation and account context."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.session import SessionManager
from auth.exceptions import SessionExpiredError
from api.base import error_response, request_id_of, ErrorCodes
from utils.user_context import set_current_email, clear_current_email


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the session token and sets account context.

    For protected routes:
    1. Extracts the session token from 'Authorization: Bearer ...' or the
       'session_token' cookie
    2. Validates it via SessionManager
    3. Sets email in request.state and the account context
    4. Clears context after request completes

    Public paths bypass authentication entirely. Profile image upload is
    public: it is not tied to a session.
    """

    PUBLIC_PATHS = [
        "/",
        "/health",
        "/signup",
        "/verify",
        "/login",
        "/upload-profile-image",
        "/openapi.json",
    ]
    PUBLIC_PREFIXES = [
        "/docs",
        "/redoc",
    ]

    def __init__(self, app, session_manager: SessionManager):
        super().__init__(app)
        self._session_manager = session_manager

    def _is_public_path(self, path: str) -> bool:
        """Check if path is public (exact match or public prefix)."""
        if path in self.PUBLIC_PATHS:
            return True
        return any(path.startswith(prefix) for prefix in self.PUBLIC_PREFIXES)

    @staticmethod
    def _extract_token(request: Request) -> str | None:
        """Bearer header wins over cookie."""
        authorization = request.headers.get("Authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return request.cookies.get("session_token")

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        path = request.url.path

        # Skip auth for public paths
        if self._is_public_path(path):
            return await call_next(request)

        session_token = self._extract_token(request)

        if not session_token:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                    request_id_of(request),
                ).model_dump(mode="json"),
            )

        # Validate session
        try:
            claims = self._session_manager.validate_session(session_token)
        except SessionExpiredError:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.SESSION_EXPIRED,
                    "Session has expired",
                    request_id_of(request),
                ).model_dump(mode="json"),
            )

        set_current_email(claims.email)
        request.state.email = claims.email

        try:
            response = await call_next(request)
            return response
        finally:
            # Always clear context
            clear_current_email()
