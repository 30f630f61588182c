"""DNS provider implementations."""

from dnsplane.providers.aliyun import AliyunProvider
from dnsplane.providers.base import DNSProvider
from dnsplane.providers.cloudflare import CloudflareProvider
from dnsplane.providers.dnspod import DNSPodProvider
from dnsplane.providers.factory import SUPPORTED_PROVIDERS, ProviderFactory
from dnsplane.providers.manager import ProviderManager

__all__ = [
    "AliyunProvider",
    "CloudflareProvider",
    "DNSPodProvider",
    "DNSProvider",
    "ProviderFactory",
    "ProviderManager",
    "SUPPORTED_PROVIDERS",
]
