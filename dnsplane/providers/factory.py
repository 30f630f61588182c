"""Construction of provider adapters from vendor tags."""

from collections.abc import Mapping

from dnsplane.errors import ConfigError
from dnsplane.features import get_provider_features
from dnsplane.models import ProviderConfig, ProviderFeatures
from dnsplane.providers.aliyun import AliyunProvider
from dnsplane.providers.base import DNSProvider
from dnsplane.providers.cloudflare import CloudflareProvider
from dnsplane.providers.dnspod import DNSPodProvider
from dnsplane.providers.unimplemented import (
    BaiduProvider,
    DNSLAProvider,
    HuaweiProvider,
    NamesiloProvider,
    PowerDNSProvider,
    VolcengineProvider,
    WestProvider,
)

SUPPORTED_PROVIDERS = (
    "aliyun",
    "dnspod",
    "huawei",
    "baidu",
    "west",
    "volcengine",
    "dnsla",
    "cloudflare",
    "namesilo",
    "powerdns",
)

PROVIDER_CLASSES: dict[str, type[DNSProvider]] = {
    "aliyun": AliyunProvider,
    "dnspod": DNSPodProvider,
    "huawei": HuaweiProvider,
    "baidu": BaiduProvider,
    "west": WestProvider,
    "volcengine": VolcengineProvider,
    "dnsla": DNSLAProvider,
    "cloudflare": CloudflareProvider,
    "namesilo": NamesiloProvider,
    "powerdns": PowerDNSProvider,
}


class ProviderFactory:
    """Maps ``(vendor tag, flat config map)`` to an adapter instance."""

    def supported_types(self) -> list[str]:
        return list(SUPPORTED_PROVIDERS)

    def is_supported(self, provider_type: str) -> bool:
        return provider_type in PROVIDER_CLASSES

    def features(self, provider_type: str) -> ProviderFeatures:
        if not self.is_supported(provider_type):
            raise ConfigError(f"unsupported DNS provider: {provider_type}")
        return get_provider_features(provider_type)

    @staticmethod
    def build_config(config: Mapping[str, str]) -> ProviderConfig:
        return ProviderConfig.from_map(config)

    def create(self, provider_type: str, config: Mapping[str, str]) -> DNSProvider:
        """Construct the adapter for ``provider_type``.

        Construction never touches the network and succeeds for every
        supported tag; call ``validate_config`` to check the credentials.
        """
        provider_class = PROVIDER_CLASSES.get(provider_type)
        if provider_class is None:
            raise ConfigError(f"unsupported DNS provider: {provider_type}")
        return provider_class(self.build_config(config))
