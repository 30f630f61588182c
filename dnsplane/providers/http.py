"""Shared HTTP request flow for vendor adapters."""

import json
import logging
from typing import Any

import httpx

from dnsplane.context import Context
from dnsplane.errors import (
    AuthError,
    DNSPlaneError,
    NetworkError,
    NotFoundError,
    OperationCancelled,
    ProviderError,
    RateLimitedError,
)
from dnsplane.features import get_provider_features
from dnsplane.models import DNSRecord, ProviderConfig
from dnsplane.providers.base import DNSProvider
from dnsplane.validation import validate_record

logger = logging.getLogger(__name__)

BODY_PREFIX_LENGTH = 512


class VendorError(Exception):
    """Structured error extracted from a vendor response envelope."""

    def __init__(self, code: str, message: str, request_id: str = ""):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.request_id = request_id


class HTTPProvider(DNSProvider):
    """Base class for adapters that talk to a vendor over HTTP.

    Subclasses set ``DEFAULT_ENDPOINT`` and the vendor error-code prefixes,
    and implement :meth:`_envelope_error`. Each request goes through
    build -> sign -> send -> parse envelope exactly once; a retried operation
    builds and signs a new request.
    """

    DEFAULT_ENDPOINT = ""
    TIMEOUT = 30.0

    # Vendor error-code prefixes used to classify envelope errors.
    AUTH_CODES: tuple[str, ...] = ()
    NOT_FOUND_CODES: tuple[str, ...] = ()
    RATE_LIMIT_CODES: tuple[str, ...] = ()

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.endpoint = (config.endpoint or self.DEFAULT_ENDPOINT).rstrip("/")
        self.client = httpx.Client(
            headers={"Accept": "application/json"},
            timeout=self.TIMEOUT,
        )

    def close(self) -> None:
        self.client.close()

    def _check_record(self, record: DNSRecord) -> None:
        validate_record(record, get_provider_features(self.NAME))

    # -- request flow ------------------------------------------------------

    def _send(
        self,
        ctx: Context | None,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one HTTP call bound to the caller's deadline and parse the envelope."""
        ctx = ctx or Context.background()
        ctx.check()

        logger.debug("%s: %s %s", self.NAME, method, url.split("?", 1)[0])
        try:
            response = self.client.request(
                method,
                url,
                headers=headers,
                content=content,
                params=params,
                timeout=ctx.request_timeout(self.TIMEOUT),
            )
        except httpx.TimeoutException as e:
            if ctx.done():
                raise OperationCancelled(f"{self.NAME}: deadline exceeded") from e
            raise NetworkError(f"{self.NAME}: request timeout: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"{self.NAME}: {_describe_transport_error(e)}") from e

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> Any:
        status = response.status_code
        text = response.text
        try:
            payload = json.loads(text) if text else None
        except ValueError:
            payload = None

        # Server faults stay retryable even when the body carries a vendor error.
        if status >= 500:
            raise self._http_error(status, text)

        vendor_error = self._envelope_error(payload) if payload is not None else None
        if vendor_error is not None:
            raise self._classify(vendor_error, status)

        if not 200 <= status < 300:
            raise self._http_error(status, text)

        if payload is None:
            raise NetworkError(
                f"{self.NAME}: response is not JSON: {text[:BODY_PREFIX_LENGTH]}",
                status=status,
                body=text[:BODY_PREFIX_LENGTH],
            )
        return payload

    def _envelope_error(self, payload: Any) -> VendorError | None:
        """Return the API-level error carried by a parsed response, if any."""
        return None

    # -- error classification ----------------------------------------------

    def _http_error(self, status: int, text: str) -> DNSPlaneError:
        body = text[:BODY_PREFIX_LENGTH]
        if status == 429:
            return RateLimitedError(f"{self.NAME}: too many requests (HTTP 429)")
        if status in (401, 403):
            return AuthError(f"{self.NAME}: credentials rejected (HTTP {status})")
        if status == 404:
            return NotFoundError(f"{self.NAME}: not found (HTTP 404)")
        if status >= 500:
            message = f"{self.NAME}: server error (HTTP {status}): {body}"
        else:
            message = f"{self.NAME}: request failed (HTTP {status}): {body}"
        return NetworkError(message, status=status, body=body)

    def _classify(self, error: VendorError, status: int) -> DNSPlaneError:
        code = error.code
        text = f"{self.NAME}: {code} - {error.message}"
        if status == 429 or _matches(code, self.RATE_LIMIT_CODES):
            return RateLimitedError(text)
        if status in (401, 403) or _matches(code, self.AUTH_CODES):
            return AuthError(text)
        if status == 404 or _matches(code, self.NOT_FOUND_CODES):
            return NotFoundError(text)
        return ProviderError(self.NAME, code, error.message, error.request_id)


def _matches(code: str, codes: tuple[str, ...]) -> bool:
    """Exact match, or a dotted sub-code of a listed code (``Throttling.User`` under ``Throttling``)."""
    return any(code == p or code.startswith(f"{p}.") for p in codes)


def _describe_transport_error(error: httpx.TransportError) -> str:
    """Message for a transport failure, naming the cause in plain words."""
    text = str(error) or type(error).__name__
    lowered = text.lower()
    if isinstance(error, httpx.ConnectError):
        if "refused" in lowered:
            return f"connection refused: {text}"
        if "unreachable" in lowered:
            return f"network is unreachable: {text}"
        if "name or service" in lowered or "nodename" in lowered or "temporary failure" in lowered:
            return f"temporary failure in name resolution: {text}"
        return f"connection failed: {text}"
    if isinstance(error, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
        if "reset" in lowered or isinstance(error, httpx.RemoteProtocolError):
            return f"connection reset: {text}"
        return f"connection error: {text}"
    return text
