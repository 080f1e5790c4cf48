"""Account lifecycle: signup, email verification, login, profile images."""

from auth.exceptions import (
    AuthError,
    ValidationError,
    DuplicateAccountError,
    AccountNotFoundError,
    InvalidCredentialError,
    InvalidTokenError,
    SessionExpiredError,
    UploadError,
    NotificationError,
    InternalError,
)
from auth.types import (
    UserRecord,
    TokenClaims,
    SessionToken,
    SignupRequest,
    LoginRequest,
    SignupResult,
    ProfileImage,
)
from auth.config import AuthConfig
from auth.database import AccountStore, InMemoryAccountStore, ValkeyAccountStore
from auth.password import CredentialHasher
from auth.tokens import TokenSigner
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.session import SessionManager
from auth.service import AccountService
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router
