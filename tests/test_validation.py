"""Tests for record validation."""

import pytest

from dnsplane.errors import RecordValidationError
from dnsplane.features import DEFAULT_FEATURES, get_provider_features
from dnsplane.models import DNSRecord
from dnsplane.validation import is_domain_name, is_ipv4, is_ipv6, validate_record

ALIYUN = get_provider_features("aliyun")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("example.com", True),
        ("mx.example.com.", True),
        ("_sip._tcp.example.com", True),
        ("a" * 64 + ".com", False),
        ("-bad.example.com", False),
        ("", False),
    ],
)
def test_is_domain_name(value, expected):
    assert is_domain_name(value) is expected


def test_ip_checks():
    assert is_ipv4("203.0.113.9")
    assert not is_ipv4("2001:db8::1")
    assert not is_ipv4("300.1.1.1")
    assert is_ipv6("2001:db8::1")
    assert not is_ipv6("203.0.113.9")


def test_valid_records_pass():
    validate_record(DNSRecord(name="www", type="A", value="1.2.3.4"), ALIYUN)
    validate_record(DNSRecord(type="MX", value="mx.example.com", priority=10), ALIYUN)
    validate_record(
        DNSRecord(name="_sip._tcp", type="SRV", value="sip.example.com", priority=1, weight=5, port=5060),
        ALIYUN,
    )


@pytest.mark.parametrize(
    "record",
    [
        DNSRecord(type="A", value="not-an-ip"),
        DNSRecord(type="AAAA", value="1.2.3.4"),
        DNSRecord(type="CNAME", value="bad name!"),
        DNSRecord(type="TXT", value="x" * 256),
        DNSRecord(type="MX", value="mx.example.com"),
        DNSRecord(type="MX", value="mx.example.com", priority=-1),
        DNSRecord(type="SRV", value="sip.example.com", priority=1, port=5060),
        DNSRecord(type="SRV", value="sip.example.com", priority=1, weight=1, port=70000),
        DNSRecord(type="A", value="1.2.3.4", ttl=0),
        DNSRecord(type="HINFO", value="x"),
        DNSRecord(type="A", value=""),
    ],
)
def test_invalid_records_rejected(record):
    with pytest.raises(RecordValidationError):
        validate_record(record, ALIYUN)


def test_type_unsupported_by_vendor():
    # PTR is canonical but absent from the default feature set.
    with pytest.raises(RecordValidationError, match="not supported"):
        validate_record(DNSRecord(type="PTR", value="host.example.com"), DEFAULT_FEATURES)


def test_ttl_bounds_follow_features():
    cloudflare = get_provider_features("cloudflare")

    with pytest.raises(RecordValidationError, match="TTL"):
        validate_record(DNSRecord(type="A", value="1.2.3.4", ttl=30), cloudflare)

    validate_record(DNSRecord(type="A", value="1.2.3.4", ttl=60), cloudflare)


def test_unknown_tag_gets_default_features():
    assert get_provider_features("huawei") is DEFAULT_FEATURES
    assert get_provider_features("aliyun").supports_batch


def test_automatic_ttl_accepted_outside_range():
    cloudflare = get_provider_features("cloudflare")

    validate_record(DNSRecord(type="A", value="1.2.3.4", ttl=1), cloudflare)
    with pytest.raises(RecordValidationError, match="TTL"):
        validate_record(DNSRecord(type="A", value="1.2.3.4", ttl=2), cloudflare)
    with pytest.raises(RecordValidationError, match="TTL"):
        validate_record(DNSRecord(type="A", value="1.2.3.4", ttl=1), DEFAULT_FEATURES)
