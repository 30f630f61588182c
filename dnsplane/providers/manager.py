"""In-memory registry of named, live provider adapters."""

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import TypeVar

from dnsplane.context import Context
from dnsplane.errors import DNSPlaneError, NotFoundError
from dnsplane.models import DEFAULT_RETRY_CONFIG, ProviderConfig, RetryConfig
from dnsplane.providers.base import DNSProvider
from dnsplane.providers.factory import ProviderFactory
from dnsplane.retry import retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

TEST_TIMEOUT = 30.0


class ReadWriteLock:
    """Many readers or one writer; waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ProviderManager:
    """Owns named adapters and their frozen configs.

    Lookups take the shared side of the lock and mutations the exclusive
    side. ``update`` builds and validates the replacement before swapping it
    in, so concurrent readers see either the old or the new adapter.
    The manager owns its adapters: replaced and removed adapters are closed
    once the write lock is released, and ``close`` releases the rest. An
    adapter obtained from ``get`` must not be used after its name is
    replaced or removed.
    """

    def __init__(
        self,
        factory: ProviderFactory | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.factory = factory or ProviderFactory()
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self._providers: dict[str, tuple[DNSProvider, ProviderConfig]] = {}
        self._lock = ReadWriteLock()

    def _build(self, provider_type: str, config: Mapping[str, str]) -> DNSProvider:
        provider = self.factory.create(provider_type, config)
        try:
            provider.validate_config()
        except DNSPlaneError:
            provider.close()
            raise
        return provider

    def register(self, name: str, provider_type: str, config: Mapping[str, str]) -> DNSProvider:
        """Create and validate an adapter, then insert it under ``name``.

        Nothing is inserted when validation fails. An existing registration
        under the same name is replaced.
        """
        provider = self._build(provider_type, config)
        with self._lock.write_locked():
            previous = self._providers.get(name)
            self._providers[name] = (provider, provider.config)
        if previous is not None:
            previous[0].close()
        logger.info("Registered DNS provider %r (%s)", name, provider_type)
        return provider

    def update(self, name: str, provider_type: str, config: Mapping[str, str]) -> DNSProvider:
        """Replace the adapter registered under ``name``.

        A failed validation leaves the existing registration untouched.
        """
        provider = self._build(provider_type, config)
        with self._lock.write_locked():
            previous = self._providers.get(name)
            if previous is not None:
                self._providers[name] = (provider, provider.config)
        if previous is None:
            provider.close()
            raise NotFoundError(f"DNS provider {name!r} is not registered")
        previous[0].close()
        logger.info("Updated DNS provider %r (%s)", name, provider_type)
        return provider

    def get(self, name: str) -> DNSProvider:
        with self._lock.read_locked():
            entry = self._providers.get(name)
        if entry is None:
            raise NotFoundError(f"DNS provider {name!r} is not registered")
        return entry[0]

    def get_config(self, name: str) -> ProviderConfig:
        with self._lock.read_locked():
            entry = self._providers.get(name)
        if entry is None:
            raise NotFoundError(f"DNS provider {name!r} is not registered")
        return entry[1]

    def list(self) -> list[str]:
        with self._lock.read_locked():
            return sorted(self._providers)

    def remove(self, name: str) -> bool:
        """Unregister and close ``name``; return False if it was unknown."""
        with self._lock.write_locked():
            entry = self._providers.pop(name, None)
        if entry is None:
            return False
        entry[0].close()
        logger.info("Removed DNS provider %r", name)
        return True

    def test(self, name: str, ctx: Context | None = None) -> None:
        """Test the connection of one provider under a 30 second cap."""
        provider = self.get(name)
        ctx = (ctx or Context.background()).with_timeout(TEST_TIMEOUT)
        provider.test_connection(ctx)

    def test_all(self, ctx: Context | None = None) -> dict[str, DNSPlaneError | None]:
        """Test every provider; map each name to None on success or its error."""
        results: dict[str, DNSPlaneError | None] = {}
        for name in self.list():
            try:
                self.test(name, ctx)
            except DNSPlaneError as e:
                results[name] = e
            else:
                results[name] = None
        return results

    def retry(self, operation: Callable[[], T], ctx: Context | None = None) -> T:
        """Run ``operation`` with the manager's retry policy."""
        return retry(operation, self.retry_config, ctx)

    def close(self) -> None:
        with self._lock.write_locked():
            entries = list(self._providers.values())
            self._providers.clear()
        for provider, _ in entries:
            provider.close()
