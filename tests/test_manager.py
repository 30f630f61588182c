"""Tests for the provider manager."""

import threading
from unittest.mock import patch

import pytest

from dnsplane.errors import (
    AuthError,
    ConfigError,
    NetworkError,
    NotFoundError,
    ProviderNotImplementedError,
)
from dnsplane.models import RetryConfig
from dnsplane.providers import ProviderManager
from dnsplane.providers.cloudflare import CloudflareProvider
from dnsplane.providers.manager import ReadWriteLock


@pytest.fixture
def manager(mock_httpx_client) -> ProviderManager:
    return ProviderManager(retry_config=RetryConfig(initial_delay=0))


class TestRegistration:
    """Tests for register/update/remove."""

    def test_register_cloudflare_and_test(self, manager, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response({"success": True, "result": {}})

        provider = manager.register("cf-prod", "cloudflare", {"token": "tk_xxx"})
        manager.test("cf-prod")

        assert isinstance(provider, CloudflareProvider)
        assert manager.get("cf-prod") is provider
        assert manager.get_config("cf-prod").token == "tk_xxx"
        args, kwargs = mock_httpx_client.request.call_args
        assert args[1].endswith("/user")
        assert kwargs["timeout"] <= 30.0

    def test_unimplemented_vendor_not_inserted(self, manager):
        with pytest.raises(ProviderNotImplementedError):
            manager.register("hw", "huawei", {"api_key": "k"})

        assert "hw" not in manager.list()
        with pytest.raises(NotFoundError):
            manager.get("hw")

    def test_invalid_config_not_inserted(self, manager, mock_httpx_client):
        with pytest.raises(ConfigError):
            manager.register("ali", "aliyun", {"api_key": "k"})

        assert manager.list() == []
        mock_httpx_client.close.assert_called_once()

    def test_unsupported_vendor(self, manager):
        with pytest.raises(ConfigError):
            manager.register("r53", "route53", {})

    def test_register_replaces(self, manager):
        first = manager.register("cf", "cloudflare", {"token": "a"})
        second = manager.register("cf", "cloudflare", {"token": "b"})

        assert first is not second
        assert manager.get("cf") is second
        assert manager.list() == ["cf"]

    def test_update_swaps_adapter(self, manager):
        old = manager.register("cf", "cloudflare", {"token": "a"})

        new = manager.update("cf", "cloudflare", {"token": "b"})

        assert manager.get("cf") is new
        assert new is not old
        assert manager.get_config("cf").token == "b"

    def test_failed_update_keeps_old_adapter(self, manager):
        old = manager.register("cf", "cloudflare", {"token": "a"})

        with pytest.raises(ConfigError):
            manager.update("cf", "cloudflare", {})

        assert manager.get("cf") is old
        assert manager.get_config("cf").token == "a"

    def test_update_never_hides_name_from_readers(self, manager):
        manager.register("cf", "cloudflare", {"token": "t0"})
        stop = threading.Event()
        misses = []

        def reader():
            while not stop.is_set():
                try:
                    manager.get("cf")
                except NotFoundError as e:
                    misses.append(e)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        try:
            for i in range(50):
                manager.update("cf", "cloudflare", {"token": f"t{i + 1}"})
        finally:
            stop.set()
            for thread in threads:
                thread.join()

        assert misses == []
        assert manager.get_config("cf").token == "t50"

    def test_update_unknown_name(self, manager):
        with pytest.raises(NotFoundError):
            manager.update("missing", "cloudflare", {"token": "a"})
        assert manager.list() == []

    def test_list_is_sorted(self, manager):
        manager.register("zeta", "cloudflare", {"token": "a"})
        manager.register("alpha", "cloudflare", {"token": "b"})

        assert manager.list() == ["alpha", "zeta"]

    def test_remove(self, manager):
        manager.register("cf", "cloudflare", {"token": "a"})

        assert manager.remove("cf") is True
        assert manager.remove("cf") is False
        assert manager.list() == []

    def test_remove_closes_adapter(self, manager, mock_httpx_client):
        manager.register("cf", "cloudflare", {"token": "a"})
        mock_httpx_client.close.assert_not_called()

        manager.remove("cf")

        mock_httpx_client.close.assert_called_once()

    def test_replaced_adapter_is_closed(self, manager):
        first = manager.register("cf", "cloudflare", {"token": "a"})

        with patch.object(first, "close") as first_close:
            second = manager.register("cf", "cloudflare", {"token": "b"})
            with patch.object(second, "close") as second_close:
                manager.update("cf", "cloudflare", {"token": "c"})

        first_close.assert_called_once()
        second_close.assert_called_once()
        manager.get("cf").client.close.assert_not_called()

    def test_failed_update_closes_only_replacement(self, manager):
        old = manager.register("cf", "cloudflare", {"token": "a"})

        with patch.object(old, "close") as old_close:
            with pytest.raises(ConfigError):
                manager.update("cf", "cloudflare", {})

        old_close.assert_not_called()

    def test_get_unknown(self, manager):
        with pytest.raises(NotFoundError):
            manager.get("nope")
        with pytest.raises(NotFoundError):
            manager.get_config("nope")

    def test_close_releases_clients(self, manager, mock_httpx_client):
        manager.register("cf", "cloudflare", {"token": "a"})

        manager.close()

        assert manager.list() == []
        mock_httpx_client.close.assert_called_once()


class TestConnectionTests:
    """Tests for test/test_all."""

    def test_test_all(self, manager, mock_httpx_client, json_response):
        manager.register("ok", "cloudflare", {"token": "a"})
        manager.register("bad", "cloudflare", {"token": "b"})

        def respond(method, url, **kwargs):
            if kwargs["headers"]["Authorization"] == "Bearer b":
                return json_response(
                    {"success": False, "errors": [{"code": 9109, "message": "Invalid token"}]},
                    status_code=403,
                )
            return json_response({"success": True, "result": {}})

        mock_httpx_client.request.side_effect = respond

        results = manager.test_all()

        assert results["ok"] is None
        assert isinstance(results["bad"], AuthError)

    def test_test_unknown(self, manager):
        with pytest.raises(NotFoundError):
            manager.test("nope")


class TestRetry:
    """Tests for retry through the manager."""

    def test_transient_errors_are_retried(self, manager):
        attempts = []

        def operation():
            attempts.append(1)
            if len(attempts) < 3:
                raise NetworkError("cloudflare: connection reset: peer closed")
            return "ok"

        assert manager.retry(operation) == "ok"
        assert len(attempts) == 3


class TestReadWriteLock:
    """Tests for ReadWriteLock."""

    def test_readers_share(self):
        lock = ReadWriteLock()

        with lock.read_locked():
            acquired = threading.Event()

            def reader():
                with lock.read_locked():
                    acquired.set()

            thread = threading.Thread(target=reader)
            thread.start()
            assert acquired.wait(1.0)
            thread.join()

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        entered = threading.Event()

        with lock.write_locked():
            def reader():
                with lock.read_locked():
                    entered.set()

            thread = threading.Thread(target=reader)
            thread.start()
            assert not entered.wait(0.1)

        assert entered.wait(1.0)
        thread.join()

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        written = threading.Event()

        with lock.read_locked():
            def writer():
                with lock.write_locked():
                    written.set()

            thread = threading.Thread(target=writer)
            thread.start()
            assert not written.wait(0.1)

        assert written.wait(1.0)
        thread.join()
