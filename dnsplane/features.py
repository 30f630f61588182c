"""Static per-vendor capability table."""

from dnsplane.models import ProviderFeatures

PROVIDER_FEATURES: dict[str, ProviderFeatures] = {
    "aliyun": ProviderFeatures(
        supported_record_types=("A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV", "CAA"),
        supports_batch=True,
        supports_line_types=True,
        max_records_per_domain=10000,
        min_ttl=1,
        max_ttl=604800,
    ),
    "dnspod": ProviderFeatures(
        supported_record_types=("A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV"),
        supports_batch=True,
        supports_line_types=True,
        max_records_per_domain=10000,
        min_ttl=1,
        max_ttl=604800,
    ),
    "cloudflare": ProviderFeatures(
        supported_record_types=("A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV", "CAA"),
        supports_batch=False,
        supports_line_types=False,
        max_records_per_domain=20000,
        min_ttl=60,
        max_ttl=604800,
        auto_ttl=1,
    ),
}

DEFAULT_FEATURES = ProviderFeatures(
    supported_record_types=("A", "AAAA", "CNAME", "MX", "TXT", "NS"),
    supports_batch=False,
    supports_line_types=False,
    max_records_per_domain=1000,
    min_ttl=300,
    max_ttl=86400,
)


def get_provider_features(provider_type: str) -> ProviderFeatures:
    """Return the feature descriptor for a vendor tag (a conservative default if unknown)."""
    return PROVIDER_FEATURES.get(provider_type, DEFAULT_FEATURES)
