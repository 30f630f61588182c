"""Aliyun (Alibaba Cloud DNS) provider implementation."""

import uuid
from datetime import datetime, timezone
from typing import Any

from dnsplane.context import Context
from dnsplane.errors import ConfigError, NotFoundError, ProviderError
from dnsplane.models import PRIORITY_TYPES, DNSRecord
from dnsplane.providers.http import HTTPProvider, VendorError
from dnsplane.providers.signing import aliyun_query_string, sign_aliyun_params

API_VERSION = "2015-01-09"
PAGE_SIZE = 500


def record_to_params(domain: str, record: DNSRecord) -> dict[str, str]:
    """Settable fields of a record as Aliyun request parameters."""
    params = {
        "DomainName": domain,
        "RR": record.name,
        "Type": record.type,
        "Value": record.value,
        "TTL": str(record.ttl),
    }
    if record.type in PRIORITY_TYPES and record.priority is not None:
        params["Priority"] = str(record.priority)
    if record.line:
        params["Line"] = record.line
    return params


def record_from_payload(item: dict[str, Any]) -> DNSRecord:
    """Canonical record from an Aliyun ``Record`` object (or request parameters)."""
    priority = item.get("Priority")
    return DNSRecord(
        id=str(item.get("RecordId", "")),
        name=item.get("RR", "@"),
        type=item["Type"],
        value=item["Value"],
        ttl=int(item.get("TTL", 600)),
        priority=int(priority) if priority not in (None, "") else None,
        line=item.get("Line", "") or "",
        status=item.get("Status", "") or "",
    )


class AliyunProvider(HTTPProvider):
    """DNS provider implementation for Aliyun DNS (RPC API, HMAC-SHA1 signatures)."""

    NAME = "aliyun"
    DEFAULT_ENDPOINT = "https://alidns.aliyuncs.com"

    AUTH_CODES = (
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "IncompleteSignature",
        "Forbidden",
        "InvalidTimeStamp",
    )
    NOT_FOUND_CODES = (
        "InvalidDomainName.NoExist",
        "DomainRecordNotBelongToUser",
        "InvalidRecordId",
    )
    RATE_LIMIT_CODES = ("Throttling",)

    def validate_config(self) -> None:
        if not self.config.api_key:
            raise ConfigError("Aliyun API key must not be empty")
        if not self.config.api_secret:
            raise ConfigError("Aliyun API secret must not be empty")

    def test_connection(self, ctx: Context | None = None) -> None:
        self._call(ctx, "DescribeDomains", {"PageNumber": "1", "PageSize": "1"})

    def list_records(self, domain: str, ctx: Context | None = None) -> list[DNSRecord]:
        records: list[DNSRecord] = []
        page = 1

        while True:
            data = self._call(
                ctx,
                "DescribeDomainRecords",
                {"DomainName": domain, "PageNumber": str(page), "PageSize": str(PAGE_SIZE)},
            )
            items = data.get("DomainRecords", {}).get("Record", [])
            records.extend(record_from_payload(item) for item in items)

            total = int(data.get("TotalCount", len(records)))
            if not items or len(records) >= total:
                break
            page += 1

        return records

    def get_record(
        self, domain: str, record_id: str, ctx: Context | None = None
    ) -> DNSRecord:
        data = self._call(ctx, "DescribeDomainRecordInfo", {"RecordId": record_id})
        if data.get("DomainName") and data["DomainName"] != domain:
            raise NotFoundError(f"aliyun: record {record_id} does not belong to {domain}")
        return record_from_payload(data)

    def add_record(
        self, domain: str, record: DNSRecord, ctx: Context | None = None
    ) -> DNSRecord:
        self._check_record(record)
        data = self._call(ctx, "AddDomainRecord", record_to_params(domain, record))
        record_id = data.get("RecordId")
        if not record_id:
            raise ProviderError(
                self.NAME, "MissingRecordId", "response carried no RecordId",
                data.get("RequestId", ""),
            )
        return record.with_id(record_id)

    def update_record(
        self, domain: str, record_id: str, record: DNSRecord, ctx: Context | None = None
    ) -> None:
        self._check_record(record)
        params = record_to_params(domain, record)
        # UpdateDomainRecord addresses the record by id only.
        del params["DomainName"]
        params["RecordId"] = record_id
        self._call(ctx, "UpdateDomainRecord", params)

    def delete_record(self, domain: str, record_id: str, ctx: Context | None = None) -> None:
        self._call(ctx, "DeleteDomainRecord", {"RecordId": record_id})

    # -- transport ---------------------------------------------------------

    def _call(self, ctx: Context | None, action: str, params: dict[str, str]) -> dict[str, Any]:
        """Sign and send one RPC action; the request is signed exactly once."""
        request = {"Action": action, "Version": API_VERSION, **params}
        signed = sign_aliyun_params(
            request,
            self.config.api_key,
            self.config.api_secret,
            timestamp=self._now(),
            nonce=self._nonce(),
        )
        url = f"{self.endpoint}/?{aliyun_query_string(signed)}"
        return self._send(ctx, "GET", url)

    def _envelope_error(self, payload: Any) -> VendorError | None:
        if isinstance(payload, dict) and payload.get("Code"):
            return VendorError(
                str(payload["Code"]),
                str(payload.get("Message", "")),
                str(payload.get("RequestId", "")),
            )
        return None

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _nonce(self) -> str:
        return uuid.uuid4().hex
