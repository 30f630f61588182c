"""Canonical record validation, run before records are sent to a vendor."""

import ipaddress
import re

from dnsplane.errors import RecordValidationError
from dnsplane.models import PRIORITY_TYPES, RECORD_TYPES, DNSRecord, ProviderFeatures

_LABEL = r"[a-zA-Z0-9_]([a-zA-Z0-9\-_]{0,61}[a-zA-Z0-9])?"
DOMAIN_RE = re.compile(rf"^({_LABEL}\.)*{_LABEL}$")

MAX_TXT_LENGTH = 255


def is_domain_name(value: str) -> bool:
    """Check hostname syntax (a single trailing dot is allowed)."""
    if not value or len(value) > 253:
        return False
    return bool(DOMAIN_RE.match(value.removesuffix(".")))


def is_ipv4(value: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(value), ipaddress.IPv4Address)
    except ValueError:
        return False


def is_ipv6(value: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(value), ipaddress.IPv6Address)
    except ValueError:
        return False


def validate_record(record: DNSRecord, features: ProviderFeatures) -> None:
    """Raise RecordValidationError if ``record`` breaks a canonical invariant.

    Args:
        record: The record about to be submitted
        features: Capability descriptor of the target vendor
    """
    rtype = record.type
    if rtype not in RECORD_TYPES:
        raise RecordValidationError(f"unsupported record type: {rtype}")
    if rtype not in features.supported_record_types:
        raise RecordValidationError(f"record type {rtype} is not supported by this provider")

    value = record.value
    if not value:
        raise RecordValidationError("record value must not be empty")

    if rtype == "A" and not is_ipv4(value):
        raise RecordValidationError(f"A record value must be a valid IPv4 address: {value}")
    if rtype == "AAAA" and not is_ipv6(value):
        raise RecordValidationError(f"AAAA record value must be a valid IPv6 address: {value}")
    if rtype in ("CNAME", "NS", "PTR", "MX", "SRV") and not is_domain_name(value):
        raise RecordValidationError(f"{rtype} record value must be a domain name: {value}")
    if rtype == "TXT" and len(value) > MAX_TXT_LENGTH:
        raise RecordValidationError(
            f"TXT record value must not exceed {MAX_TXT_LENGTH} characters"
        )

    if rtype in PRIORITY_TYPES and (record.priority is None or record.priority < 0):
        raise RecordValidationError(f"{rtype} record requires a priority >= 0")
    if rtype == "SRV":
        if record.weight is None or record.weight < 0:
            raise RecordValidationError("SRV record requires a weight >= 0")
        if record.port is None or not 0 <= record.port <= 65535:
            raise RecordValidationError("SRV record requires a port between 0 and 65535")

    in_range = features.min_ttl <= record.ttl <= features.max_ttl
    if not in_range and record.ttl != features.auto_ttl:
        raise RecordValidationError(
            f"TTL {record.ttl} outside allowed range "
            f"[{features.min_ttl}, {features.max_ttl}]"
        )
