"""Tests for VaultClient - hvac is patched out, no live Vault needed."""

from unittest.mock import MagicMock, patch

import pytest
from hvac.exceptions import Forbidden, InvalidPath

import clients.vault_client as vault_module
from clients.vault_client import (
    VaultClient,
    get_blob_config,
    get_email_config,
    get_token_secret,
    get_valkey_url,
)

SECRETS = {
    "lifelike/auth": {"token_secret": "s3cret"},
    "lifelike/valkey": {"url": "redis://valkey:6379/0"},
    "lifelike/email": {"api_key": "brevo-key", "sender_email": "noreply@lifelike.app"},
    "lifelike/blob": {"bucket_name": "lifelike-media", "region": "eu-west-1"},
}


@pytest.fixture
def vault_env(monkeypatch):
    monkeypatch.setenv("VAULT_ADDR", "https://vault.test:8200")
    monkeypatch.setenv("VAULT_ROLE_ID", "role")
    monkeypatch.setenv("VAULT_SECRET_ID", "secret")
    monkeypatch.delenv("VAULT_NAMESPACE", raising=False)


@pytest.fixture
def hvac_client(vault_env):
    """Patched hvac.Client serving SECRETS."""

    def read_secret_version(path, raise_on_deleted_version=True):
        if path not in SECRETS:
            raise InvalidPath()
        return {"data": {"data": SECRETS[path]}}

    with patch("clients.vault_client.hvac.Client") as client_cls:
        client = MagicMock()
        client.auth.approle.login.return_value = {"auth": {"client_token": "tok"}}
        client.is_authenticated.return_value = True
        client.secrets.kv.v2.read_secret_version.side_effect = read_secret_version
        client_cls.return_value = client
        yield client


@pytest.fixture(autouse=True)
def reset_vault_singleton():
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()
    yield
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()


class TestVaultClientInit:
    """Initialization and authentication."""

    def test_missing_vault_addr_raises(self, monkeypatch):
        monkeypatch.delenv("VAULT_ADDR", raising=False)
        with pytest.raises(ValueError, match="VAULT_ADDR"):
            VaultClient()

    def test_missing_approle_credentials_raises(self, monkeypatch):
        monkeypatch.setenv("VAULT_ADDR", "https://vault.test:8200")
        monkeypatch.delenv("VAULT_ROLE_ID", raising=False)
        monkeypatch.delenv("VAULT_SECRET_ID", raising=False)
        with pytest.raises(ValueError, match="VAULT_ROLE_ID"):
            VaultClient()

    def test_failed_login_raises_permission_error(self, hvac_client):
        hvac_client.auth.approle.login.side_effect = Exception("invalid role_id")
        with pytest.raises(PermissionError, match="authentication"):
            VaultClient()

    def test_not_authenticated_raises(self, hvac_client):
        hvac_client.is_authenticated.return_value = False
        with pytest.raises(PermissionError):
            VaultClient()

    def test_valid_approle_authenticates(self, hvac_client):
        client = VaultClient()
        assert client.client.token == "tok"


class TestGetSecret:
    """Secret retrieval - paths automatically scoped to lifelike/."""

    def test_returns_field_value(self, hvac_client):
        assert VaultClient().get_secret("valkey", "url") == "redis://valkey:6379/0"

    def test_missing_path_raises(self, hvac_client):
        with pytest.raises(PermissionError):
            VaultClient().get_secret("nonexistent", "field")

    def test_missing_field_raises_keyerror(self, hvac_client):
        with pytest.raises(KeyError, match="not found"):
            VaultClient().get_secret("valkey", "nonexistent_field")

    def test_forbidden_raises_permission_error(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.side_effect = Forbidden()
        with pytest.raises(PermissionError, match="Access denied"):
            VaultClient().get_secret("valkey", "url")


class TestConvenienceFunctions:
    """Module-level convenience functions."""

    def test_get_token_secret(self, hvac_client):
        assert get_token_secret() == "s3cret"

    def test_get_valkey_url(self, hvac_client):
        assert get_valkey_url().startswith("redis://")

    def test_get_email_config(self, hvac_client):
        assert get_email_config() == SECRETS["lifelike/email"]

    def test_get_blob_config(self, hvac_client):
        assert get_blob_config() == SECRETS["lifelike/blob"]

    def test_values_are_cached(self, hvac_client):
        get_valkey_url()
        get_valkey_url()

        assert hvac_client.secrets.kv.v2.read_secret_version.call_count == 1
