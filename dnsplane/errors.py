"""Error taxonomy raised by the provider layer.

Adapters translate every vendor outcome into one of these kinds and never
surface raw vendor structures. ``to_dict`` renders the canonical
``{error, code, message}`` envelope handed to upstream API layers.
"""

from typing import Any


class DNSPlaneError(Exception):
    """Base class for all classified errors."""

    code = "INTERNAL_ERROR"
    title = "Internal error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.title)
        self.message = message or self.title

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.title, "code": self.code, "message": self.message}


class ConfigError(DNSPlaneError):
    """Missing or malformed configuration, or an unsupported vendor tag."""

    code = "CONFIG_ERROR"
    title = "Invalid provider configuration"


class ProviderNotImplementedError(DNSPlaneError):
    """The vendor tag is known but its integration is not implemented."""

    code = "NOT_IMPLEMENTED"
    title = "Provider not implemented"


class AuthError(DNSPlaneError):
    """The vendor rejected the credentials."""

    code = "AUTH_ERROR"
    title = "Authentication failed"


class NotFoundError(DNSPlaneError):
    """Domain, record or registration unknown."""

    code = "NOT_FOUND"
    title = "Not found"


class RecordValidationError(DNSPlaneError):
    """A record violates the canonical record invariants."""

    code = "VALIDATION_ERROR"
    title = "Invalid DNS record"


class ProviderError(DNSPlaneError):
    """The vendor returned a business-logic error."""

    code = "PROVIDER_ERROR"
    title = "Provider API error"

    def __init__(
        self,
        vendor: str,
        vendor_code: str,
        message: str,
        request_id: str = "",
    ):
        self.vendor = vendor
        self.vendor_code = vendor_code
        self.vendor_message = message
        self.request_id = request_id
        text = f"{vendor} API error: {vendor_code} - {message}"
        if request_id:
            text += f" (RequestId: {request_id})"
        super().__init__(text)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["vendor_code"] = self.vendor_code
        if self.request_id:
            data["request_id"] = self.request_id
        return data


class NetworkError(DNSPlaneError):
    """Transport failure, or a non-2xx response without a structured body."""

    code = "NETWORK_ERROR"
    title = "Network error"

    def __init__(self, message: str, status: int | None = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class RateLimitedError(DNSPlaneError):
    """The vendor throttled the request."""

    code = "RATE_LIMITED"
    title = "Rate limited"

    def __init__(self, message: str = "rate limit exceeded", retry_after: float | None = None):
        if "rate limit" not in message.lower():
            message = f"rate limit: {message}"
        super().__init__(message)
        self.retry_after = retry_after


class CryptoError(DNSPlaneError):
    """AEAD verification failure or a malformed credential envelope."""

    code = "CRYPTO_ERROR"
    title = "Credential decryption failed"


class OperationCancelled(DNSPlaneError):
    """The caller's deadline expired or the operation was cancelled."""

    code = "CANCELLED"
    title = "Operation cancelled"

    def __init__(self, message: str = "", last_error: BaseException | None = None):
        super().__init__(message)
        self.last_error = last_error


class BatchAddError(DNSPlaneError):
    """Some records of a batch could not be added.

    ``added`` holds the records that were committed; ``failures`` lists
    ``(index, error)`` pairs for the records that were not.
    """

    code = "BATCH_PARTIAL_FAILURE"
    title = "Batch add partially failed"

    def __init__(self, added: list, failures: list[tuple[int, DNSPlaneError]]):
        self.added = added
        self.failures = failures
        details = "; ".join(f"[{index}] {error}" for index, error in failures)
        super().__init__(
            f"{len(failures)} of {len(added) + len(failures)} records failed: {details}"
        )

    @property
    def failed_indices(self) -> list[int]:
        return [index for index, _ in self.failures]

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["failures"] = [
            {"index": index, **error.to_dict()} for index, error in self.failures
        ]
        return data


class RetryExhaustedError(DNSPlaneError):
    """An operation kept failing with retryable errors until attempts ran out."""

    title = "Retries exhausted"

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"operation failed after {attempts} attempts: {last_error}")

    @property
    def code(self) -> str:  # type: ignore[override]
        return getattr(self.last_error, "code", DNSPlaneError.code)
