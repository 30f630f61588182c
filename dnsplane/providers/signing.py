"""Request signing for vendor APIs.

Everything here is a pure function of its inputs: the clock and the nonce
are passed in by the caller so that signatures can be checked against fixed
vectors.
"""

import base64
import hashlib
import hmac
from collections.abc import Mapping
from datetime import datetime, timezone
from urllib.parse import quote

from dnsplane.errors import ConfigError
from dnsplane.models import ProviderConfig

# ---------------------------------------------------------------------------
# Aliyun (RPC style, HMAC-SHA1)
# ---------------------------------------------------------------------------

ALIYUN_SIGNATURE_METHOD = "HMAC-SHA1"
ALIYUN_SIGNATURE_VERSION = "1.0"


def percent_encode(value: str) -> str:
    """RFC 3986 percent-encoding with uppercase hex; space becomes %20, not +."""
    return quote(str(value), safe="~")


def aliyun_timestamp(moment: datetime) -> str:
    """Format a moment as ISO 8601 UTC (YYYY-MM-DDTHH:MM:SSZ)."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def aliyun_common_params(access_key_id: str, timestamp: datetime, nonce: str) -> dict[str, str]:
    """Common request parameters every Aliyun RPC call carries."""
    return {
        "Format": "JSON",
        "AccessKeyId": access_key_id,
        "SignatureMethod": ALIYUN_SIGNATURE_METHOD,
        "SignatureVersion": ALIYUN_SIGNATURE_VERSION,
        "SignatureNonce": nonce,
        "Timestamp": aliyun_timestamp(timestamp),
    }


def aliyun_canonical_query(params: Mapping[str, str]) -> str:
    """Sorted, percent-encoded ``key=value`` pairs joined with ``&`` (Signature excluded)."""
    pairs = sorted((k, v) for k, v in params.items() if k != "Signature")
    return "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in pairs)


def aliyun_string_to_sign(canonical_query: str, method: str = "GET") -> str:
    return f"{method}&{percent_encode('/')}&{percent_encode(canonical_query)}"


def aliyun_signature(secret: str, params: Mapping[str, str], method: str = "GET") -> str:
    """base64(HMAC-SHA1(secret + "&", string-to-sign))."""
    string_to_sign = aliyun_string_to_sign(aliyun_canonical_query(params), method)
    digest = hmac.new(
        f"{secret}&".encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha1
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_aliyun_params(
    params: Mapping[str, str],
    access_key_id: str,
    secret: str,
    timestamp: datetime,
    nonce: str,
) -> dict[str, str]:
    """Return ``params`` with the common parameters and ``Signature`` added."""
    signed = {str(k): str(v) for k, v in params.items()}
    signed.update(aliyun_common_params(access_key_id, timestamp, nonce))
    signed["Signature"] = aliyun_signature(secret, signed)
    return signed


def aliyun_query_string(signed_params: Mapping[str, str]) -> str:
    """Query string for a signed parameter map, ``Signature`` last."""
    query = aliyun_canonical_query(signed_params)
    return f"{query}&Signature={percent_encode(signed_params['Signature'])}"


# ---------------------------------------------------------------------------
# Tencent Cloud (TC3-HMAC-SHA256)
# ---------------------------------------------------------------------------

TC3_ALGORITHM = "TC3-HMAC-SHA256"
TC3_CONTENT_TYPE = "application/json; charset=utf-8"
TC3_SIGNED_HEADERS = "content-type;host"


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def tc3_date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def tencent_canonical_request(
    payload: str,
    host: str,
    method: str = "POST",
    uri: str = "/",
    query: str = "",
    content_type: str = TC3_CONTENT_TYPE,
) -> str:
    canonical_headers = f"content-type:{content_type.lower()}\nhost:{host.lower()}\n"
    return "\n".join(
        [method, uri, query, canonical_headers, TC3_SIGNED_HEADERS, _sha256_hex(payload)]
    )


def tencent_string_to_sign(canonical_request: str, timestamp: int, service: str) -> str:
    scope = f"{tc3_date(timestamp)}/{service}/tc3_request"
    return "\n".join([TC3_ALGORITHM, str(timestamp), scope, _sha256_hex(canonical_request)])


def tencent_signature(secret_key: str, date: str, string_to_sign: str, service: str) -> str:
    """hex(HMAC(k3, string-to-sign)) with the TC3 derived key chain."""
    secret_date = _hmac_sha256(f"TC3{secret_key}".encode("utf-8"), date)
    secret_service = _hmac_sha256(secret_date, service)
    secret_signing = _hmac_sha256(secret_service, "tc3_request")
    return hmac.new(
        secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def tencent_authorization(
    secret_id: str,
    secret_key: str,
    payload: str,
    timestamp: int,
    host: str,
    service: str = "dnspod",
) -> str:
    """Value of the ``Authorization`` header for a JSON POST to ``/``."""
    canonical_request = tencent_canonical_request(payload, host)
    string_to_sign = tencent_string_to_sign(canonical_request, timestamp, service)
    date = tc3_date(timestamp)
    signature = tencent_signature(secret_key, date, string_to_sign, service)
    return (
        f"{TC3_ALGORITHM} Credential={secret_id}/{date}/{service}/tc3_request, "
        f"SignedHeaders={TC3_SIGNED_HEADERS}, Signature={signature}"
    )


def tencent_headers(
    secret_id: str,
    secret_key: str,
    action: str,
    payload: str,
    timestamp: int,
    host: str,
    version: str,
    region: str,
    service: str = "dnspod",
) -> dict[str, str]:
    """Complete header set for a signed Tencent Cloud API 3.0 call."""
    return {
        "Authorization": tencent_authorization(
            secret_id, secret_key, payload, timestamp, host, service
        ),
        "Content-Type": TC3_CONTENT_TYPE,
        "Host": host,
        "X-TC-Action": action,
        "X-TC-Timestamp": str(timestamp),
        "X-TC-Version": version,
        "X-TC-Region": region,
    }


# ---------------------------------------------------------------------------
# Cloudflare (header authentication)
# ---------------------------------------------------------------------------


def cloudflare_auth_headers(config: ProviderConfig) -> dict[str, str]:
    """Bearer token if present, otherwise Global API Key plus account email."""
    if config.token:
        return {"Authorization": f"Bearer {config.token}"}
    if config.api_key:
        email = config.extra_params.get("email", "")
        if not email:
            raise ConfigError("Cloudflare Global API Key requires an account email")
        return {"X-Auth-Email": email, "X-Auth-Key": config.api_key}
    raise ConfigError("Cloudflare requires an API token or a Global API Key")
