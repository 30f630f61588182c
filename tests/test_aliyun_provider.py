"""Tests for the Aliyun DNS provider."""

from datetime import datetime, timezone
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from dnsplane.errors import (
    AuthError,
    ConfigError,
    NetworkError,
    NotFoundError,
    ProviderError,
    RateLimitedError,
    RecordValidationError,
)
from dnsplane.models import DNSRecord, ProviderConfig
from dnsplane.providers.aliyun import AliyunProvider, record_from_payload, record_to_params


def sent_params(mock_client, call_index: int = -1) -> dict[str, str]:
    """Query parameters of a request issued through the mocked client."""
    args, _ = mock_client.request.call_args_list[call_index]
    query = urlsplit(args[1]).query
    return {k: v[0] for k, v in parse_qs(query, keep_blank_values=True).items()}


@pytest.fixture
def provider(mock_httpx_client, aliyun_config):
    return AliyunProvider(aliyun_config)


class TestAliyunProvider:
    """Tests for AliyunProvider."""

    def test_name(self, provider):
        assert provider.name() == "aliyun"

    def test_default_endpoint(self, provider):
        assert provider.endpoint == "https://alidns.aliyuncs.com"

    def test_custom_endpoint(self, mock_httpx_client):
        provider = AliyunProvider(
            ProviderConfig(api_key="k", api_secret="s", endpoint="https://dns.example.test/")
        )
        assert provider.endpoint == "https://dns.example.test"

    def test_validate_config(self, mock_httpx_client):
        AliyunProvider(ProviderConfig(api_key="k", api_secret="s")).validate_config()

        with pytest.raises(ConfigError):
            AliyunProvider(ProviderConfig(api_key="k")).validate_config()
        with pytest.raises(ConfigError):
            AliyunProvider(ProviderConfig(api_secret="s")).validate_config()

    def test_list_records(
        self, provider, mock_httpx_client, json_response, sample_aliyun_records
    ):
        mock_httpx_client.request.return_value = json_response(
            {
                "RequestId": "req-1",
                "TotalCount": 2,
                "DomainRecords": {"Record": sample_aliyun_records},
            }
        )

        records = provider.list_records("example.com")

        assert len(records) == 2
        assert records[0].name == "www"
        assert records[0].type == "A"
        assert records[0].value == "1.2.3.4"
        assert records[0].ttl == 600
        assert records[0].priority is None
        assert records[1].name == "@"
        assert records[1].type == "MX"
        assert records[1].value == "mx.x"
        assert records[1].priority == 10

        params = sent_params(mock_httpx_client)
        assert params["Action"] == "DescribeDomainRecords"
        assert params["DomainName"] == "example.com"
        assert params["Version"] == "2015-01-09"
        assert "Signature" in params

    def test_list_records_paginates(self, provider, mock_httpx_client, json_response):
        first = {"RecordId": "1", "RR": "a", "Type": "A", "Value": "1.1.1.1", "TTL": 600}
        second = {"RecordId": "2", "RR": "b", "Type": "A", "Value": "2.2.2.2", "TTL": 600}
        mock_httpx_client.request.side_effect = [
            json_response({"TotalCount": 2, "DomainRecords": {"Record": [first]}}),
            json_response({"TotalCount": 2, "DomainRecords": {"Record": [second]}}),
        ]

        records = provider.list_records("example.com")

        assert [r.id for r in records] == ["1", "2"]
        assert sent_params(mock_httpx_client, 0)["PageNumber"] == "1"
        assert sent_params(mock_httpx_client, 1)["PageNumber"] == "2"

    def test_request_is_signed_with_fixed_clock(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response({"TotalCount": 0})

        with patch.object(
            provider, "_now", return_value=datetime(2024, 1, 1, tzinfo=timezone.utc)
        ), patch.object(provider, "_nonce", return_value="N"):
            provider.test_connection()

        args, kwargs = mock_httpx_client.request.call_args
        assert args[0] == "GET"
        params = sent_params(mock_httpx_client)
        assert params["Action"] == "DescribeDomains"
        assert params["Timestamp"] == "2024-01-01T00:00:00Z"
        assert params["SignatureNonce"] == "N"
        assert kwargs["timeout"] == 30.0

    def test_add_record(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response(
            {"RequestId": "req-2", "RecordId": "9999"}
        )
        record = DNSRecord(name="www", type="A", value="203.0.113.9", ttl=600)

        created = provider.add_record("example.com", record)

        assert created == record.with_id("9999")
        params = sent_params(mock_httpx_client)
        assert params["Action"] == "AddDomainRecord"
        assert params["RR"] == "www"
        assert params["Type"] == "A"
        assert params["Value"] == "203.0.113.9"
        assert params["TTL"] == "600"
        assert "Priority" not in params

    def test_add_mx_sends_priority(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response({"RecordId": "1"})

        provider.add_record(
            "example.com", DNSRecord(type="MX", value="mx.example.com", priority=5)
        )

        params = sent_params(mock_httpx_client)
        assert params["RR"] == "@"
        assert params["Priority"] == "5"

    def test_add_invalid_record_not_sent(self, provider, mock_httpx_client):
        with pytest.raises(RecordValidationError):
            provider.add_record("example.com", DNSRecord(type="A", value="nope"))

        mock_httpx_client.request.assert_not_called()

    def test_add_without_record_id(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response({"RequestId": "req-3"})

        with pytest.raises(ProviderError):
            provider.add_record("example.com", DNSRecord(type="A", value="1.2.3.4"))

    def test_update_record(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response({"RecordId": "1001"})

        provider.update_record(
            "example.com", "1001", DNSRecord(name="www", type="A", value="5.6.7.8", ttl=300)
        )

        params = sent_params(mock_httpx_client)
        assert params["Action"] == "UpdateDomainRecord"
        assert params["RecordId"] == "1001"
        assert params["Value"] == "5.6.7.8"
        assert "DomainName" not in params

    def test_delete_record(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response({"RecordId": "1001"})

        provider.delete_record("example.com", "1001")

        params = sent_params(mock_httpx_client)
        assert params["Action"] == "DeleteDomainRecord"
        assert params["RecordId"] == "1001"

    def test_get_record(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response(
            {"DomainName": "example.com", "RecordId": "1001", "RR": "www", "Type": "A",
             "Value": "1.2.3.4", "TTL": 600}
        )

        record = provider.get_record("example.com", "1001")

        assert record.id == "1001"
        assert record.name == "www"

    def test_get_record_of_other_domain(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response(
            {"DomainName": "other.com", "RecordId": "1001", "RR": "www", "Type": "A",
             "Value": "1.2.3.4", "TTL": 600}
        )

        with pytest.raises(NotFoundError):
            provider.get_record("example.com", "1001")


class TestAliyunErrors:
    """Tests for Aliyun error classification."""

    @pytest.mark.parametrize(
        "code,status,error_class",
        [
            ("InvalidAccessKeyId.NotFound", 404, AuthError),
            ("SignatureDoesNotMatch", 400, AuthError),
            ("InvalidDomainName.NoExist", 400, NotFoundError),
            ("Throttling.User", 400, RateLimitedError),
            ("DomainRecordDuplicate", 400, ProviderError),
        ],
    )
    def test_envelope_errors(
        self, provider, mock_httpx_client, json_response, code, status, error_class
    ):
        mock_httpx_client.request.return_value = json_response(
            {"Code": code, "Message": "boom", "RequestId": "req-9"}, status_code=status
        )

        with pytest.raises(error_class):
            provider.list_records("example.com")

    def test_provider_error_keeps_vendor_details(
        self, provider, mock_httpx_client, json_response
    ):
        mock_httpx_client.request.return_value = json_response(
            {"Code": "DomainRecordDuplicate", "Message": "exists", "RequestId": "req-9"},
            status_code=400,
        )

        with pytest.raises(ProviderError) as exc_info:
            provider.add_record("example.com", DNSRecord(type="A", value="1.2.3.4"))

        assert exc_info.value.vendor_code == "DomainRecordDuplicate"
        assert exc_info.value.request_id == "req-9"
        assert "req-9" in str(exc_info.value)

    def test_server_error_without_envelope(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response(
            status_code=503, text="<html>unavailable</html>"
        )

        with pytest.raises(NetworkError) as exc_info:
            provider.test_connection()

        assert exc_info.value.status == 503
        assert "server error" in str(exc_info.value)

    def test_server_error_with_envelope(self, provider, mock_httpx_client, json_response):
        mock_httpx_client.request.return_value = json_response(
            {"Code": "ServiceUnavailable", "Message": "busy", "RequestId": "req-9"},
            status_code=503,
        )

        with pytest.raises(NetworkError) as exc_info:
            provider.test_connection()

        assert "server error" in str(exc_info.value)
        assert "ServiceUnavailable" in str(exc_info.value)

    def test_transport_error(self, provider, mock_httpx_client):
        mock_httpx_client.request.side_effect = httpx.ConnectError("Connection refused")

        with pytest.raises(NetworkError, match="connection refused"):
            provider.test_connection()

    def test_timeout(self, provider, mock_httpx_client):
        mock_httpx_client.request.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(NetworkError, match="timeout"):
            provider.test_connection()


class TestRecordMapping:
    """Tests for canonical <-> Aliyun mapping."""

    def test_round_trip(self):
        record = DNSRecord(name="@", type="MX", value="mx.example.com", ttl=600, priority=10)

        restored = record_from_payload(record_to_params("example.com", record))

        assert restored == record

    def test_line_is_kept(self):
        record = DNSRecord(name="www", type="A", value="1.2.3.4", line="telecom")

        params = record_to_params("example.com", record)

        assert params["Line"] == "telecom"
        assert record_from_payload(params).line == "telecom"
