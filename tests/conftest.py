"""Shared test fixtures for the Lifelike test suite.

No live Valkey, Vault, Brevo or S3 is needed: the in-memory account store
stands in for persistence and the outbound clients are mocks.
"""

from unittest.mock import Mock

import pytest

from auth.config import AuthConfig
from auth.database import InMemoryAccountStore
from auth.password import CredentialHasher
from auth.security_logger import SecurityLogger
from auth.service import AccountService
from auth.session import SessionManager
from auth.tokens import TokenSigner
from clients.blob_client import BlobStoreClient
from clients.email_client import EmailClient
from utils.user_context import clear_current_email


# =============================================================================
# TEST CONSTANTS
# =============================================================================

TEST_TOKEN_SECRET = "test-token-secret-at-least-32-bytes-long!"
TEST_IMAGE_URL = "https://cdn.test.local/profile-images/abc.png"


# =============================================================================
# CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_account_context():
    """Ensure clean account context before and after each test."""
    clear_current_email()
    yield
    clear_current_email()


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def config():
    """Test config with the cheapest bcrypt cost for faster tests."""
    return AuthConfig(
        bcrypt_rounds=4,
        app_base_url="https://test.example.com",
    )


@pytest.fixture
def signer(config):
    return TokenSigner(TEST_TOKEN_SECRET, config)


@pytest.fixture
def session_manager(signer, config):
    return SessionManager(signer, config)


@pytest.fixture
def store():
    """Fresh in-memory account store per test."""
    return InMemoryAccountStore()


@pytest.fixture
def mock_email_client():
    """Mock email client - no actual emails sent in tests."""
    mock = Mock(spec=EmailClient)
    mock.send_email.return_value = None
    return mock


@pytest.fixture
def mock_blob_client():
    """Mock blob store - returns a fixed URL."""
    mock = Mock(spec=BlobStoreClient)
    mock.upload.return_value = TEST_IMAGE_URL
    return mock


@pytest.fixture
def account_service(config, store, signer, session_manager, mock_email_client, mock_blob_client):
    """AccountService with in-memory store and mocked outbound clients."""
    return AccountService(
        config=config,
        store=store,
        hasher=CredentialHasher(config),
        signer=signer,
        session_manager=session_manager,
        email_client=mock_email_client,
        blob_client=mock_blob_client,
        security_logger=SecurityLogger(),
    )


@pytest.fixture
def sent_token(mock_email_client):
    """Callable that pulls the token out of the last verification email sent."""

    def _extract() -> str:
        body = mock_email_client.send_email.call_args.kwargs["body"]
        return body.rsplit("token=", 1)[1].strip()

    return _extract
