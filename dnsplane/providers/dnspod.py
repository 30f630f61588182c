"""Tencent Cloud DNSPod provider implementation (API 3.0, TC3-HMAC-SHA256)."""

import json
import time
from typing import Any

import httpx

from dnsplane.context import Context
from dnsplane.errors import ConfigError, NotFoundError, ProviderError, RecordValidationError
from dnsplane.models import PRIORITY_TYPES, DNSRecord
from dnsplane.providers.http import HTTPProvider, VendorError
from dnsplane.providers.signing import tencent_headers

API_VERSION = "2021-03-23"
DEFAULT_REGION = "ap-beijing"
SERVICE = "dnspod"
PAGE_LIMIT = 3000
DEFAULT_LINE = "默认"

# Returned by DescribeRecordList for a zone without records.
NO_RECORDS_CODE = "ResourceNotFound.NoDataOfRecord"


class DNSPodProvider(HTTPProvider):
    """DNS provider implementation for Tencent Cloud DNSPod.

    DNSPod addresses domains by a numeric id. It is resolved on every call
    through ``DescribeDomainList`` and never cached across operations.
    """

    NAME = "dnspod"
    DEFAULT_ENDPOINT = "https://dnspod.tencentcloudapi.com"

    AUTH_CODES = ("AuthFailure", "UnauthorizedOperation")
    NOT_FOUND_CODES = ("ResourceNotFound", "InvalidParameter.DomainNotExist")
    RATE_LIMIT_CODES = ("RequestLimitExceeded",)

    def __init__(self, config):
        super().__init__(config)
        self.host = httpx.URL(self.endpoint).host
        self.region = config.region or DEFAULT_REGION

    def validate_config(self) -> None:
        if not self.config.api_key:
            raise ConfigError("DNSPod SecretId (api_key) must not be empty")
        if not self.config.api_secret:
            raise ConfigError("DNSPod SecretKey (api_secret) must not be empty")

    def test_connection(self, ctx: Context | None = None) -> None:
        self._call(ctx, "DescribeDomainList", {"Limit": 1})

    def list_records(self, domain: str, ctx: Context | None = None) -> list[DNSRecord]:
        domain_id = self._get_domain_id(ctx, domain)
        records: list[DNSRecord] = []
        offset = 0

        while True:
            try:
                data = self._call(
                    ctx,
                    "DescribeRecordList",
                    {"Domain": domain, "DomainId": domain_id, "Offset": offset, "Limit": PAGE_LIMIT},
                )
            except NotFoundError as e:
                if NO_RECORDS_CODE in str(e):
                    break
                raise

            items = data.get("RecordList") or []
            records.extend(self._parse_record(item) for item in items)

            total = int((data.get("RecordCountInfo") or {}).get("TotalCount", len(records)))
            if not items or len(records) >= total:
                break
            offset += len(items)

        return records

    def get_record(
        self, domain: str, record_id: str, ctx: Context | None = None
    ) -> DNSRecord:
        # DNSPod has no single-record read, so filter the listing.
        for record in self.list_records(domain, ctx):
            if record.id == record_id:
                return record
        raise NotFoundError(f"dnspod: record {record_id} not found in {domain}")

    def add_record(
        self, domain: str, record: DNSRecord, ctx: Context | None = None
    ) -> DNSRecord:
        self._check_record(record)
        domain_id = self._get_domain_id(ctx, domain)
        data = self._call(ctx, "CreateRecord", self._record_params(domain, domain_id, record))
        record_id = data.get("RecordId")
        if record_id is None:
            raise ProviderError(
                self.NAME, "MissingRecordId", "response carried no RecordId",
                data.get("RequestId", ""),
            )
        return record.with_id(record_id)

    def update_record(
        self, domain: str, record_id: str, record: DNSRecord, ctx: Context | None = None
    ) -> None:
        self._check_record(record)
        numeric_id = _numeric_id(record_id)
        domain_id = self._get_domain_id(ctx, domain)
        params = self._record_params(domain, domain_id, record)
        params["RecordId"] = numeric_id
        self._call(ctx, "ModifyRecord", params)

    def delete_record(self, domain: str, record_id: str, ctx: Context | None = None) -> None:
        numeric_id = _numeric_id(record_id)
        domain_id = self._get_domain_id(ctx, domain)
        self._call(
            ctx, "DeleteRecord", {"Domain": domain, "DomainId": domain_id, "RecordId": numeric_id}
        )

    # -- helpers -----------------------------------------------------------

    def _get_domain_id(self, ctx: Context | None, domain: str) -> int:
        """Resolve the numeric DNSPod domain id by exact apex match."""
        offset = 0
        while True:
            data = self._call(ctx, "DescribeDomainList", {"Offset": offset, "Limit": PAGE_LIMIT})
            domains = data.get("DomainList") or []
            for item in domains:
                if item.get("Name") == domain:
                    return int(item["DomainId"])

            total = int((data.get("DomainCountInfo") or {}).get("AllTotal", 0))
            offset += len(domains)
            if not domains or offset >= total:
                raise NotFoundError(f"dnspod: domain {domain} not found")

    @staticmethod
    def _record_params(domain: str, domain_id: int, record: DNSRecord) -> dict[str, Any]:
        params: dict[str, Any] = {
            "Domain": domain,
            "DomainId": domain_id,
            "SubDomain": record.name,
            "RecordType": record.type,
            "RecordLine": record.line or DEFAULT_LINE,
            "Value": record.value,
            "TTL": record.ttl,
        }
        if record.type in PRIORITY_TYPES and record.priority is not None:
            params["MX"] = record.priority
        if record.weight is not None and record.type != "SRV":
            params["Weight"] = record.weight
        return params

    @staticmethod
    def _parse_record(item: dict[str, Any]) -> DNSRecord:
        rtype = item["Type"]
        mx = item.get("MX")
        return DNSRecord(
            id=str(item["RecordId"]),
            name=item.get("Name", "@"),
            type=rtype,
            value=item["Value"],
            ttl=int(item.get("TTL", 600)),
            priority=int(mx) if rtype in PRIORITY_TYPES and mx is not None else None,
            line=item.get("Line", "") or "",
            status=item.get("Status", "") or "",
        )

    def _call(self, ctx: Context | None, action: str, params: dict[str, Any]) -> dict[str, Any]:
        """Sign and POST one API action, returning the ``Response`` object."""
        payload = json.dumps(params, separators=(",", ":"), ensure_ascii=False)
        headers = tencent_headers(
            self.config.api_key,
            self.config.api_secret,
            action=action,
            payload=payload,
            timestamp=self._timestamp(),
            host=self.host,
            version=API_VERSION,
            region=self.region,
            service=SERVICE,
        )
        data = self._send(ctx, "POST", self.endpoint, headers=headers, content=payload.encode("utf-8"))
        return data.get("Response", {})

    def _envelope_error(self, payload: Any) -> VendorError | None:
        if not isinstance(payload, dict):
            return None
        response = payload.get("Response") or {}
        error = response.get("Error")
        if error and error.get("Code"):
            return VendorError(
                str(error["Code"]), str(error.get("Message", "")), str(response.get("RequestId", ""))
            )
        return None

    def _timestamp(self) -> int:
        return int(time.time())


def _numeric_id(record_id: str) -> int:
    try:
        return int(record_id)
    except (TypeError, ValueError):
        raise RecordValidationError(f"dnspod: record id must be numeric, got {record_id!r}")
