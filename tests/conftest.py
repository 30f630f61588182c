"""Shared test fixtures for dnsplane tests."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from dnsplane.crypto import CryptoService
from dnsplane.models import ProviderConfig


# ============================================================================
# CLI Fixtures
# ============================================================================


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


# ============================================================================
# Project Directory Fixtures
# ============================================================================


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch) -> Path:
    """An empty working directory with an encryption key configured."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DNSPLANE_ENCRYPTION_KEY", "test-passphrase")
    monkeypatch.delenv("DNSPLANE_KDF_SALT", raising=False)
    # Keep CLI retries fast.
    monkeypatch.setenv("DNSPLANE_INITIAL_DELAY", "0")
    return tmp_path


@pytest.fixture
def crypto() -> CryptoService:
    """Crypto service keyed like project_dir."""
    return CryptoService("test-passphrase")


# ============================================================================
# Mock Fixtures - HTTP/API
# ============================================================================


def make_response(payload=None, status_code: int = 200, text: str | None = None) -> MagicMock:
    """Build a fake httpx.Response carrying a JSON body."""
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    return MagicMock(status_code=status_code, text=text)


@pytest.fixture
def json_response():
    """Factory for fake JSON responses."""
    return make_response


@pytest.fixture
def mock_httpx_client():
    """Mock httpx.Client for API calls."""
    with patch("httpx.Client") as mock_client_class:
        mock_client = MagicMock()
        mock_client_class.return_value = mock_client
        yield mock_client


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def aliyun_config() -> ProviderConfig:
    return ProviderConfig.from_map({"api_key": "AK", "api_secret": "SK"})


@pytest.fixture
def dnspod_config() -> ProviderConfig:
    return ProviderConfig.from_map({"api_key": "AKID", "api_secret": "SK"})


@pytest.fixture
def cloudflare_config() -> ProviderConfig:
    return ProviderConfig.from_map({"token": "tk_xxx"})


@pytest.fixture
def sample_aliyun_records() -> list[dict]:
    """Provide sample Aliyun DescribeDomainRecords items."""
    return [
        {
            "RecordId": "1001",
            "RR": "www",
            "Type": "A",
            "Value": "1.2.3.4",
            "TTL": 600,
            "Line": "default",
            "Status": "ENABLE",
        },
        {
            "RecordId": "1002",
            "RR": "@",
            "Type": "MX",
            "Value": "mx.x",
            "TTL": 600,
            "Priority": 10,
            "Line": "default",
            "Status": "ENABLE",
        },
    ]
