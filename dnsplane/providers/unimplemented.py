"""Adapters for vendors whose integration is not implemented yet.

They construct successfully so every supported tag exposes the same
surface, but every operation raises ProviderNotImplementedError.
"""

from collections.abc import Sequence

from dnsplane.context import Context
from dnsplane.errors import ProviderNotImplementedError
from dnsplane.models import DNSRecord
from dnsplane.providers.base import DNSProvider


class UnimplementedProvider(DNSProvider):
    """Provider placeholder that refuses every operation."""

    DISPLAY_NAME = ""

    def _fail(self) -> ProviderNotImplementedError:
        return ProviderNotImplementedError(
            f"{self.DISPLAY_NAME or self.NAME} DNS adapter is not implemented yet"
        )

    def validate_config(self) -> None:
        raise self._fail()

    def test_connection(self, ctx: Context | None = None) -> None:
        raise self._fail()

    def list_records(self, domain: str, ctx: Context | None = None) -> list[DNSRecord]:
        raise self._fail()

    def get_record(self, domain: str, record_id: str, ctx: Context | None = None) -> DNSRecord:
        raise self._fail()

    def add_record(self, domain: str, record: DNSRecord, ctx: Context | None = None) -> DNSRecord:
        raise self._fail()

    def update_record(
        self, domain: str, record_id: str, record: DNSRecord, ctx: Context | None = None
    ) -> None:
        raise self._fail()

    def delete_record(self, domain: str, record_id: str, ctx: Context | None = None) -> None:
        raise self._fail()

    def batch_add_records(
        self, domain: str, records: Sequence[DNSRecord], ctx: Context | None = None
    ) -> list[DNSRecord]:
        raise self._fail()


class HuaweiProvider(UnimplementedProvider):
    NAME = "huawei"
    DISPLAY_NAME = "Huawei Cloud"


class BaiduProvider(UnimplementedProvider):
    NAME = "baidu"
    DISPLAY_NAME = "Baidu Cloud"


class WestProvider(UnimplementedProvider):
    NAME = "west"
    DISPLAY_NAME = "West.cn"


class VolcengineProvider(UnimplementedProvider):
    NAME = "volcengine"
    DISPLAY_NAME = "Volcengine"


class DNSLAProvider(UnimplementedProvider):
    NAME = "dnsla"
    DISPLAY_NAME = "DNS.LA"


class NamesiloProvider(UnimplementedProvider):
    NAME = "namesilo"
    DISPLAY_NAME = "Namesilo"


class PowerDNSProvider(UnimplementedProvider):
    NAME = "powerdns"
    DISPLAY_NAME = "PowerDNS"
