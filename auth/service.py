"""Account service - orchestrates signup, verification, login and profile images."""

import logging
from datetime import timedelta

import redis

from auth.config import AuthConfig
from auth.database import AccountStore
from auth.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InternalError,
    InvalidCredentialError,
    InvalidTokenError,
    NotificationError,
    UploadError,
    ValidationError,
)
from auth.password import CredentialHasher
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.session import SessionManager
from auth.tokens import PURPOSE_VERIFY, TokenSigner
from auth.types import ProfileImage, SessionToken, SignupResult, UserRecord
from clients.blob_client import BlobStoreClient, BlobStoreError
from clients.email_client import EmailClient, EmailDeliveryError
from utils.timezone import now_utc
from utils.user_context import get_current_email

logger = logging.getLogger(__name__)

# Errors a store implementation may raise; anything here becomes InternalError
_STORE_ERRORS = (redis.RedisError, ValueError, KeyError)


class AccountService:
    """Orchestrates the account lifecycle.

    Handles:
    - Signup (hash, persist unverified record, email a verification link)
    - Email verification (signed token -> verified flag)
    - Login (verified accounts only, returns a session token)
    - Profile image upload
    """

    VERIFICATION_SUBJECT = "Verify Your Email"

    def __init__(
        self,
        config: AuthConfig,
        store: AccountStore,
        hasher: CredentialHasher,
        signer: TokenSigner,
        session_manager: SessionManager,
        email_client: EmailClient,
        blob_client: BlobStoreClient,
        security_logger: SecurityLogger,
    ):
        self._config = config
        self._store = store
        self._hasher = hasher
        self._signer = signer
        self._session_manager = session_manager
        self._email_client = email_client
        self._blob_client = blob_client
        self._security_logger = security_logger

    @property
    def session_max_age_seconds(self) -> int:
        """Session lifetime in seconds, for cookie max-age."""
        return self._config.session_expiry_hours * 3600

    @property
    def max_profile_image_bytes(self) -> int:
        """Largest accepted profile image payload."""
        return self._config.max_profile_image_bytes

    def _get_record(self, email: str) -> UserRecord | None:
        try:
            return self._store.get(email)
        except _STORE_ERRORS as e:
            logger.error(f"Account store read failed: {e}")
            raise InternalError() from e

    def register(self, email: str | None, password: str | None) -> SignupResult:
        """Create an unverified account and email its verification link.

        Flow:
        1. Validate input
        2. Hash password
        3. Insert record (atomic insert-if-absent)
        4. Issue verification token
        5. Send verification email

        The record is persisted before the email goes out and is not rolled
        back if sending fails.

        Raises:
            ValidationError: If email or password is missing.
            DuplicateAccountError: If the email is already registered.
            NotificationError: If the verification email could not be sent.
            InternalError: If the account store fails.
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required")
        email = email.strip()

        self._security_logger.log(SecurityEvent.SIGNUP_REQUESTED, email=email)

        try:
            credential_hash = self._hasher.hash(password)
        except ValueError as e:
            # bcrypt rejects passwords longer than 72 bytes
            raise ValidationError("Password is not acceptable") from e

        record = UserRecord(
            email=email,
            credential_hash=credential_hash,
            verified=False,
            created_at=now_utc(),
        )

        try:
            created = self._store.insert_if_absent(record)
        except _STORE_ERRORS as e:
            logger.error(f"Account store write failed: {e}")
            raise InternalError() from e

        if not created:
            self._security_logger.log(SecurityEvent.SIGNUP_DUPLICATE, email=email)
            raise DuplicateAccountError()

        self._security_logger.log(SecurityEvent.USER_CREATED, email=email)

        try:
            token = self._signer.issue(
                email,
                PURPOSE_VERIFY,
                timedelta(minutes=self._config.verification_token_expiry_minutes),
            )
        except Exception as e:
            logger.error(f"Verification token signing failed: {e!r}")
            raise InternalError() from e
        link = self._config.verification_link(token)

        try:
            self._email_client.send_email(
                to=email,
                subject=self.VERIFICATION_SUBJECT,
                body=f"Click the link to verify your account: {link}",
            )
        except Exception as e:
            if not isinstance(e, EmailDeliveryError):
                logger.error(f"Unexpected email client failure: {e!r}")
            self._security_logger.log(
                SecurityEvent.SIGNUP_FAILED,
                email=email,
                details={"reason": "verification_email_failed"},
            )
            raise NotificationError() from e

        self._security_logger.log(SecurityEvent.VERIFICATION_SENT, email=email)

        return SignupResult(email=email)

    def confirm_verification(self, token: str | None) -> str:
        """Mark the account named by a verification token as verified.

        Idempotent: confirming an already verified account succeeds again.

        Returns:
            The verified email.

        Raises:
            InvalidTokenError: If the token is tampered, malformed or expired.
            AccountNotFoundError: If no account exists for the token's email.
            InternalError: If the account store fails.
        """
        try:
            claims = self._signer.validate(token or "", PURPOSE_VERIFY)
        except InvalidTokenError:
            self._security_logger.log(
                SecurityEvent.VERIFICATION_FAILED, details={"reason": "invalid_token"}
            )
            raise

        try:
            updated = self._store.update_field(claims.email, "verified", True)
        except _STORE_ERRORS as e:
            logger.error(f"Account store update failed: {e}")
            raise InternalError() from e

        if not updated:
            self._security_logger.log(
                SecurityEvent.VERIFICATION_FAILED,
                email=claims.email,
                details={"reason": "user_not_found"},
            )
            raise AccountNotFoundError("User not found")

        self._security_logger.log(SecurityEvent.EMAIL_VERIFIED, email=claims.email)
        return claims.email

    def authenticate(self, email: str | None, password: str | None) -> SessionToken:
        """Check credentials of a verified account and open a session.

        Raises:
            ValidationError: If email or password is missing.
            AccountNotFoundError: If the account is unknown or unverified.
            InvalidCredentialError: If the password does not match.
            InternalError: If the account store fails.
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required")
        email = email.strip()

        record = self._get_record(email)

        if record is None or not record.verified:
            # Same error for both so unknown and unverified look identical
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                details={"reason": "user_not_found" if record is None else "unverified"},
            )
            raise AccountNotFoundError()

        if not self._hasher.verify(password, record.credential_hash):
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=email,
                details={"reason": "invalid_credentials"},
            )
            raise InvalidCredentialError()

        session = self._session_manager.create_session(record.email)
        self._security_logger.log(SecurityEvent.LOGIN_SUCCEEDED, email=record.email)
        return session

    def current_account(self) -> UserRecord:
        """Load the account of the authenticated caller.

        The caller's email comes from the account context that AuthMiddleware
        sets after validating the session.

        Raises:
            RuntimeError: If called outside an authenticated request.
            AccountNotFoundError: If the account no longer exists.
        """
        record = self._get_record(get_current_email())
        if record is None:
            raise AccountNotFoundError()
        return record

    def store_profile_image(
        self,
        data: bytes | None,
        content_type: str | None = None,
    ) -> ProfileImage:
        """Upload a profile image and return its URL.

        Raises:
            ValidationError: If no data, too much data, or a non-image type.
            UploadError: If the blob store fails.
        """
        if not data:
            raise ValidationError("No file uploaded")
        if len(data) > self._config.max_profile_image_bytes:
            raise ValidationError("Profile image is too large")
        if content_type and not content_type.startswith("image/"):
            raise ValidationError("Profile image must be an image")

        try:
            url = self._blob_client.upload(data, content_type=content_type)
        except Exception as e:
            if not isinstance(e, BlobStoreError):
                logger.error(f"Unexpected blob client failure: {e!r}")
            self._security_logger.log(
                SecurityEvent.PROFILE_IMAGE_FAILED, details={"size": len(data)}
            )
            raise UploadError() from e

        self._security_logger.log(
            SecurityEvent.PROFILE_IMAGE_UPLOADED, details={"size": len(data), "url": url}
        )
        return ProfileImage(url=url)
