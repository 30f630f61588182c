"""Configuration management for dnsplane."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnsplane.models import RetryConfig

REGISTRY_FILENAMES = ("dnsplane.yaml", "dnsplane.yml")


class ProviderEntry(BaseModel):
    """A stored provider registration.

    ``config`` is the credential envelope (base64 AES-GCM of the JSON config
    map), never the plaintext map.
    """

    type: str
    config: str
    description: str = ""
    is_default: bool = False


class RegistryFile(BaseModel):
    """Contents of dnsplane.yaml."""

    providers: dict[str, ProviderEntry] = Field(default_factory=dict)

    @field_validator("providers", mode="before")
    @classmethod
    def empty_providers(cls, v: dict | None) -> dict:
        return v or {}

    def default_provider(self) -> str | None:
        for name, entry in self.providers.items():
            if entry.is_default:
                return name
        return None


class Settings(BaseSettings):
    """Environment variables for sensitive and tunable configuration."""

    model_config = SettingsConfigDict(env_prefix="DNSPLANE_", env_file=".env", extra="ignore")

    # Passphrase for credential envelopes
    encryption_key: str | None = None
    # Enables PBKDF2 key stretching when set
    kdf_salt: str | None = None

    request_timeout: float = 30.0

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 60.0
    backoff_factor: float = 2.0

    log_level: str = "WARNING"

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            backoff_factor=self.backoff_factor,
        )


def load_settings() -> Settings:
    """Load settings from .env and environment variables."""
    return Settings()


def find_registry_file(start_path: Path | None = None) -> Path | None:
    """Find dnsplane.yaml in current or parent directories."""
    search_path = start_path or Path.cwd()

    for path in [search_path, *search_path.parents]:
        for filename in REGISTRY_FILENAMES:
            registry_file = path / filename
            if registry_file.exists():
                return registry_file

    return None


def load_registry(registry_path: Path | None = None) -> RegistryFile:
    """Load provider registrations from YAML; an absent file is an empty registry."""
    if registry_path is None:
        registry_path = find_registry_file()

    if registry_path is None or not registry_path.exists():
        return RegistryFile()

    with open(registry_path) as f:
        data = yaml.safe_load(f) or {}

    return RegistryFile(**data)


def save_registry(registry: RegistryFile, registry_path: Path | None = None) -> Path:
    """Write provider registrations, next to an existing file or in the working directory."""
    if registry_path is None:
        registry_path = find_registry_file() or Path.cwd() / REGISTRY_FILENAMES[0]

    with open(registry_path, "w") as f:
        yaml.safe_dump(
            registry.model_dump(),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

    return registry_path
