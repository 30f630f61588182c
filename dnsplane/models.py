"""Vendor-neutral data types shared by every DNS provider adapter."""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

RECORD_TYPES = ("A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV", "PTR", "CAA")

# Record types that carry a priority on the wire.
PRIORITY_TYPES = ("MX", "SRV")


class DNSRecord(BaseModel):
    """Canonical DNS record.

    ``name`` is the label relative to the apex; ``@`` (or an empty string,
    which is normalized to ``@``) addresses the apex itself.
    """

    id: str = ""
    name: str = "@"
    type: str
    value: str
    ttl: int = 600
    priority: int | None = None  # MX, SRV
    weight: int | None = None  # SRV
    port: int | None = None  # SRV
    line: str = ""
    status: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str | None) -> str:
        if v is None:
            return "@"
        v = str(v).strip()
        return v or "@"

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return str(v).strip().upper()

    @property
    def is_apex(self) -> bool:
        return self.name == "@"

    def with_id(self, record_id: str) -> "DNSRecord":
        """Return a copy of this record carrying a vendor-assigned id."""
        return self.model_copy(update={"id": str(record_id)})


class ProviderConfig(BaseModel):
    """Credentials and options for one provider account.

    Materialized from a decrypted credential envelope; never persisted in
    plaintext. Secrets are excluded from ``repr`` so they do not leak into
    logs or tracebacks.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(default="", repr=False)
    api_secret: str = Field(default="", repr=False)
    token: str = Field(default="", repr=False)
    region: str = ""
    endpoint: str = ""
    extra_params: dict[str, str] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_map(cls, config: Mapping[str, str]) -> "ProviderConfig":
        """Build a config from the flat map used at registration.

        The recognized keys are pulled into fields and the whole map is kept
        as ``extra_params`` so vendor-specific options (e.g. Cloudflare's
        ``email``) stay reachable.
        """
        params = {str(k): str(v) for k, v in config.items() if v is not None}
        return cls(
            api_key=params.get("api_key", ""),
            api_secret=params.get("api_secret", ""),
            token=params.get("token", ""),
            region=params.get("region", ""),
            endpoint=params.get("endpoint", ""),
            extra_params=params,
        )

    def has_credentials(self) -> bool:
        return bool((self.api_key and self.api_secret) or self.token)


class ProviderFeatures(BaseModel):
    """Static capability descriptor of a vendor, used for client-side preflight."""

    model_config = ConfigDict(frozen=True)

    supported_record_types: tuple[str, ...]
    supports_batch: bool = False
    supports_line_types: bool = False
    max_records_per_domain: int = 1000
    min_ttl: int = 300
    max_ttl: int = 86400
    # Sentinel TTL meaning "automatic", accepted outside the range.
    auto_ttl: int | None = None


class RetryConfig(BaseModel):
    """Backoff parameters for retried provider operations (delays in seconds)."""

    max_retries: int = Field(default=3, ge=0)
    initial_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=60.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1.0)


DEFAULT_RETRY_CONFIG = RetryConfig()
