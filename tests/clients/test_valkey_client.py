"""Tests for ValkeyClient - redis-py is patched out."""

import json
from unittest.mock import MagicMock, patch

import pytest
import redis

from clients.valkey_client import ValkeyClient


@pytest.fixture
def mock_redis():
    with patch("clients.valkey_client.redis.from_url") as from_url:
        client = MagicMock()
        from_url.return_value = client
        yield client


@pytest.fixture
def valkey(mock_redis):
    return ValkeyClient("redis://localhost:6379/0")


@pytest.fixture
def pipe(mock_redis):
    """Pipeline mock returned by ``with client.pipeline() as pipe``."""
    pipeline = MagicMock()
    mock_redis.pipeline.return_value.__enter__.return_value = pipeline
    return pipeline


class TestValkeyClientInit:
    """Connection initialization."""

    def test_pings_on_connect(self, mock_redis):
        ValkeyClient("redis://localhost:6379/0")
        mock_redis.ping.assert_called_once()

    def test_connection_failure_raises(self, mock_redis):
        mock_redis.ping.side_effect = redis.ConnectionError("refused")

        with pytest.raises(redis.ConnectionError):
            ValkeyClient("redis://localhost:6379/0")

    def test_decodes_responses(self):
        with patch("clients.valkey_client.redis.from_url") as from_url:
            ValkeyClient("redis://localhost:6379/0")

        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)


class TestBasicOperations:
    def test_get_missing_returns_none(self, valkey, mock_redis):
        mock_redis.get.return_value = None
        assert valkey.get("user:nobody") is None

    def test_set_if_absent_uses_nx(self, valkey, mock_redis):
        mock_redis.set.return_value = True

        assert valkey.set_if_absent("k", "v") is True
        mock_redis.set.assert_called_once_with("k", "v", nx=True)

    def test_set_if_absent_existing_returns_false(self, valkey, mock_redis):
        mock_redis.set.return_value = None

        assert valkey.set_if_absent("k", "v") is False

    def test_ping_returns_true(self, valkey):
        assert valkey.ping() is True

    def test_close(self, valkey, mock_redis):
        valkey.close()
        mock_redis.close.assert_called_once()


class TestJsonHelpers:
    def test_set_json_if_absent_serializes(self, valkey, mock_redis):
        mock_redis.set.return_value = True

        valkey.set_json_if_absent("k", {"verified": False})

        key, value = mock_redis.set.call_args.args
        assert json.loads(value) == {"verified": False}

    def test_get_json_roundtrip(self, valkey, mock_redis):
        mock_redis.get.return_value = '{"email": "a@x.com"}'
        assert valkey.get_json("k") == {"email": "a@x.com"}

    def test_get_json_missing_returns_none(self, valkey, mock_redis):
        mock_redis.get.return_value = None
        assert valkey.get_json("k") is None

    def test_get_json_invalid_raises(self, valkey, mock_redis):
        mock_redis.get.return_value = "not valid json {"
        with pytest.raises(ValueError):
            valkey.get_json("k")


class TestUpdateJson:
    """Optimistic WATCH/MULTI merge."""

    def test_merges_changes(self, valkey, pipe):
        pipe.get.return_value = '{"email": "a@x.com", "verified": false}'

        assert valkey.update_json("user:a@x.com", {"verified": True}) is True

        pipe.watch.assert_called_once_with("user:a@x.com")
        pipe.multi.assert_called_once()
        key, value = pipe.set.call_args.args
        assert key == "user:a@x.com"
        assert json.loads(value) == {"email": "a@x.com", "verified": True}
        pipe.execute.assert_called_once()

    def test_missing_key_returns_false(self, valkey, pipe):
        pipe.get.return_value = None

        assert valkey.update_json("user:nobody", {"verified": True}) is False
        pipe.set.assert_not_called()

    def test_retries_on_watch_error(self, valkey, pipe):
        pipe.get.return_value = '{"verified": false}'
        pipe.execute.side_effect = [redis.WatchError(), [True]]

        assert valkey.update_json("k", {"verified": True}) is True
        assert pipe.execute.call_count == 2

    def test_gives_up_after_retries(self, valkey, pipe):
        pipe.get.return_value = '{"verified": false}'
        pipe.execute.side_effect = redis.WatchError()

        with pytest.raises(redis.WatchError):
            valkey.update_json("k", {"verified": True})

        assert pipe.execute.call_count == ValkeyClient.MAX_WATCH_RETRIES
