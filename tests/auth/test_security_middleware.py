"""Tests for AuthMiddleware - session validation and account context."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from auth.exceptions import SessionExpiredError
from auth.security_middleware import AuthMiddleware
from auth.session import SessionManager
from auth.types import TokenClaims
from utils.timezone import now_utc
from utils.user_context import get_current_email


def make_claims(email="a@x.com") -> TokenClaims:
    now = now_utc()
    return TokenClaims(
        email=email,
        purpose="session",
        issued_at=now,
        expires_at=now + timedelta(days=7),
    )


@pytest.fixture
def mock_session_manager():
    """Mock SessionManager."""
    return Mock(spec=SessionManager)


@pytest.fixture
def app_with_middleware(mock_session_manager):
    """FastAPI app with auth middleware."""
    app = FastAPI()

    app.add_middleware(
        AuthMiddleware,
        session_manager=mock_session_manager,
    )

    @app.get("/me")
    async def protected_route(request: Request):
        return {"email": request.state.email, "context_email": get_current_email()}

    @app.post("/signup")
    async def public_signup():
        return {"public": True}

    @app.get("/verify")
    async def public_verify():
        return {"public": True}

    @app.post("/upload-profile-image")
    async def public_upload():
        return {"public": True}

    @app.get("/")
    async def root():
        return {"public": True}

    @app.get("/redoc/extra")
    async def docs_redirect():
        return {"public": True}

    return app


@pytest.fixture
def client(app_with_middleware):
    return TestClient(app_with_middleware)


class TestPublicPaths:
    """Public paths skip authentication."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/signup"),
            ("get", "/verify?token=abc"),
            ("post", "/upload-profile-image"),
            ("get", "/"),
            ("get", "/redoc/extra"),
        ],
    )
    def test_no_token_succeeds(self, client, mock_session_manager, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 200
        assert response.json()["public"] is True
        mock_session_manager.validate_session.assert_not_called()

    def test_root_does_not_make_everything_public(self, client):
        """'/' is matched exactly, not as a prefix."""
        response = client.get("/me")

        assert response.status_code == 401


class TestProtectedPaths:
    """Protected path authentication."""

    def test_no_token_returns_401(self, client):
        response = client.get("/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"

    def test_invalid_session_returns_401(self, client, mock_session_manager):
        mock_session_manager.validate_session.side_effect = SessionExpiredError("expired")

        response = client.get("/me", headers={"Authorization": "Bearer bad"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "SESSION_EXPIRED"

    def test_bearer_token_sets_request_state(self, client, mock_session_manager):
        mock_session_manager.validate_session.return_value = make_claims()

        response = client.get("/me", headers={"Authorization": "Bearer good"})

        assert response.status_code == 200
        assert response.json() == {"email": "a@x.com", "context_email": "a@x.com"}
        mock_session_manager.validate_session.assert_called_once_with("good")

    def test_cookie_token_accepted(self, client, mock_session_manager):
        mock_session_manager.validate_session.return_value = make_claims()
        client.cookies.set("session_token", "from-cookie")

        response = client.get("/me")

        assert response.status_code == 200
        mock_session_manager.validate_session.assert_called_once_with("from-cookie")

    def test_bearer_wins_over_cookie(self, client, mock_session_manager):
        mock_session_manager.validate_session.return_value = make_claims()
        client.cookies.set("session_token", "from-cookie")

        client.get("/me", headers={"Authorization": "Bearer from-header"})

        mock_session_manager.validate_session.assert_called_once_with("from-header")

    def test_non_bearer_scheme_ignored(self, client, mock_session_manager):
        response = client.get("/me", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401
        mock_session_manager.validate_session.assert_not_called()


class TestAccountContext:
    """Account context lifecycle."""

    def test_context_cleared_after_request(self, client, mock_session_manager):
        mock_session_manager.validate_session.return_value = make_claims()

        client.get("/me", headers={"Authorization": "Bearer good"})

        with pytest.raises(RuntimeError):
            get_current_email()
