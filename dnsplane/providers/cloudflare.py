"""Cloudflare DNS provider implementation."""

import json
from typing import Any

from dnsplane.context import Context
from dnsplane.errors import NotFoundError, ProviderError
from dnsplane.models import PRIORITY_TYPES, DNSRecord
from dnsplane.providers.http import HTTPProvider, VendorError
from dnsplane.providers.signing import cloudflare_auth_headers

PER_PAGE = 100


def to_fqdn(name: str, domain: str) -> str:
    """Record label to the fully-qualified name Cloudflare expects."""
    if name in ("", "@") or name == domain:
        return domain
    if name.endswith(f".{domain}"):
        return name
    return f"{name}.{domain}"


def from_fqdn(fqdn: str, domain: str) -> str:
    """Fully-qualified Cloudflare name back to a label relative to the apex."""
    fqdn = fqdn.rstrip(".")
    if fqdn == domain:
        return "@"
    suffix = f".{domain}"
    if fqdn.endswith(suffix):
        return fqdn[: -len(suffix)]
    return fqdn


class CloudflareProvider(HTTPProvider):
    """DNS provider implementation for Cloudflare (API v4).

    Authenticates with a Bearer token, or with the Global API Key plus
    ``extra_params["email"]``. Zone ids are resolved on every call.
    """

    NAME = "cloudflare"
    DEFAULT_ENDPOINT = "https://api.cloudflare.com/client/v4"

    AUTH_CODES = ("9103", "9106", "9109", "10000", "10001")
    NOT_FOUND_CODES = ("7003", "81044", "1001")
    RATE_LIMIT_CODES = ("971", "10013")

    def validate_config(self) -> None:
        cloudflare_auth_headers(self.config)

    def test_connection(self, ctx: Context | None = None) -> None:
        self._request(ctx, "GET", "/user")

    def list_records(self, domain: str, ctx: Context | None = None) -> list[DNSRecord]:
        zone_id = self._get_zone_id(ctx, domain)
        records: list[DNSRecord] = []
        page = 1

        while True:
            data = self._request(
                ctx,
                "GET",
                f"/zones/{zone_id}/dns_records",
                params={"page": page, "per_page": PER_PAGE},
            )
            items = data.get("result") or []
            records.extend(self._parse_record(item, domain) for item in items)

            total_pages = int((data.get("result_info") or {}).get("total_pages", 1))
            if not items or page >= total_pages:
                break
            page += 1

        return records

    def get_record(
        self, domain: str, record_id: str, ctx: Context | None = None
    ) -> DNSRecord:
        zone_id = self._get_zone_id(ctx, domain)
        data = self._request(ctx, "GET", f"/zones/{zone_id}/dns_records/{record_id}")
        return self._parse_record(data["result"], domain)

    def add_record(
        self, domain: str, record: DNSRecord, ctx: Context | None = None
    ) -> DNSRecord:
        self._check_record(record)
        zone_id = self._get_zone_id(ctx, domain)
        data = self._request(
            ctx, "POST", f"/zones/{zone_id}/dns_records", json_body=self._record_body(domain, record)
        )
        result = data.get("result") or {}
        if not result.get("id"):
            raise ProviderError(self.NAME, "MissingRecordId", "response carried no record id")
        return record.with_id(result["id"])

    def update_record(
        self, domain: str, record_id: str, record: DNSRecord, ctx: Context | None = None
    ) -> None:
        self._check_record(record)
        zone_id = self._get_zone_id(ctx, domain)
        self._request(
            ctx,
            "PUT",
            f"/zones/{zone_id}/dns_records/{record_id}",
            json_body=self._record_body(domain, record),
        )

    def delete_record(self, domain: str, record_id: str, ctx: Context | None = None) -> None:
        zone_id = self._get_zone_id(ctx, domain)
        self._request(ctx, "DELETE", f"/zones/{zone_id}/dns_records/{record_id}")

    # -- helpers -----------------------------------------------------------

    def _get_zone_id(self, ctx: Context | None, domain: str) -> str:
        """Resolve the zone id whose name exactly matches the apex."""
        data = self._request(ctx, "GET", "/zones", params={"name": domain})
        for zone in data.get("result") or []:
            if zone.get("name") == domain:
                return zone["id"]
        raise NotFoundError(f"cloudflare: zone {domain} not found")

    @staticmethod
    def _record_body(domain: str, record: DNSRecord) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": record.type,
            "name": to_fqdn(record.name, domain),
            "content": record.value,
            "ttl": record.ttl,
        }
        if record.type in PRIORITY_TYPES and record.priority is not None:
            body["priority"] = record.priority
        if record.type == "SRV":
            body["data"] = {
                "priority": record.priority,
                "weight": record.weight,
                "port": record.port,
                "target": record.value,
            }
            body["content"] = f"{record.priority} {record.weight} {record.port} {record.value}"
        return body

    @staticmethod
    def _parse_record(item: dict[str, Any], domain: str) -> DNSRecord:
        rtype = item["type"]
        data = item.get("data") or {}

        priority = item.get("priority")
        if priority is None:
            priority = data.get("priority")

        value = item.get("content", "")
        if rtype == "SRV" and data.get("target"):
            value = data["target"]

        return DNSRecord(
            id=item["id"],
            name=from_fqdn(item["name"], domain),
            type=rtype,
            value=value,
            ttl=int(item.get("ttl", 1)),
            priority=int(priority) if rtype in PRIORITY_TYPES and priority is not None else None,
            weight=data.get("weight") if rtype == "SRV" else None,
            port=data.get("port") if rtype == "SRV" else None,
            status="proxied" if item.get("proxied") else "active",
        )

    def _request(
        self,
        ctx: Context | None,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json", **cloudflare_auth_headers(self.config)}
        content = json.dumps(json_body).encode("utf-8") if json_body is not None else None
        return self._send(
            ctx, method, f"{self.endpoint}{path}", headers=headers, content=content, params=params
        )

    def _envelope_error(self, payload: Any) -> VendorError | None:
        if not isinstance(payload, dict) or payload.get("success", True):
            return None
        errors = payload.get("errors") or []
        if not errors:
            return VendorError("unknown", "request was not successful")
        first = errors[0]
        message = "; ".join(f"[{e.get('code')}] {e.get('message', '')}" for e in errors)
        return VendorError(str(first.get("code", "unknown")), message)
