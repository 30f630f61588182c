"""Abstract base class for DNS providers."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from dnsplane.context import Context
from dnsplane.errors import BatchAddError, DNSPlaneError, OperationCancelled
from dnsplane.models import DNSRecord, ProviderConfig

logger = logging.getLogger(__name__)


class DNSProvider(ABC):
    """Abstract DNS provider interface.

    Every operation that talks to the vendor accepts an optional ``ctx``
    carrying the caller's deadline and cancellation signal. Operations that
    return "ok / reason" return None on success and raise a
    :class:`~dnsplane.errors.DNSPlaneError` subclass otherwise.
    Adapters are immutable after construction and safe to share between threads.
    """

    NAME: str = ""

    def __init__(self, config: ProviderConfig):
        self.config = config

    def name(self) -> str:
        """Return the vendor tag (e.g. "aliyun")."""
        return self.NAME

    @abstractmethod
    def validate_config(self) -> None:
        """Check the configuration structurally, without touching the network."""
        pass

    @abstractmethod
    def test_connection(self, ctx: Context | None = None) -> None:
        """Perform the cheapest authenticated call against the vendor."""
        pass

    @abstractmethod
    def list_records(self, domain: str, ctx: Context | None = None) -> list[DNSRecord]:
        """List all DNS records for a domain.

        Args:
            domain: The apex name (e.g. "example.com")

        Returns:
            Canonical records, names relative to the apex ("@" for the apex)
        """
        pass

    @abstractmethod
    def get_record(
        self, domain: str, record_id: str, ctx: Context | None = None
    ) -> DNSRecord:
        """Fetch a single record, raising NotFoundError if it does not exist."""
        pass

    @abstractmethod
    def add_record(
        self, domain: str, record: DNSRecord, ctx: Context | None = None
    ) -> DNSRecord:
        """Create a record.

        Args:
            domain: The apex name
            record: The record to create; its id is ignored

        Returns:
            The input record with the vendor-assigned id populated
        """
        pass

    @abstractmethod
    def update_record(
        self, domain: str, record_id: str, record: DNSRecord, ctx: Context | None = None
    ) -> None:
        """Replace every settable field of an existing record."""
        pass

    @abstractmethod
    def delete_record(self, domain: str, record_id: str, ctx: Context | None = None) -> None:
        """Delete a record."""
        pass

    def batch_add_records(
        self, domain: str, records: Sequence[DNSRecord], ctx: Context | None = None
    ) -> list[DNSRecord]:
        """Add records one by one.

        Each record is committed or not independently. When any record fails,
        BatchAddError is raised carrying the added records and the failed
        indices with their errors.
        """
        added: list[DNSRecord] = []
        failures: list[tuple[int, DNSPlaneError]] = []

        for index, record in enumerate(records):
            try:
                added.append(self.add_record(domain, record, ctx))
            except OperationCancelled as e:
                # Remaining records are never sent.
                failures.extend((i, e) for i in range(index, len(records)))
                break
            except DNSPlaneError as e:
                logger.debug("%s: batch record %d failed: %s", self.NAME, index, e)
                failures.append((index, e))

        if failures:
            raise BatchAddError(added, failures)
        return added

    def close(self) -> None:
        """Release network resources held by the adapter."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.NAME!r})"
