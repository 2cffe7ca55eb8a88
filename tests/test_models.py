"""Tests for data models."""

import pytest

from obscli.errors import ProtocolError
from obscli.models import (
    BatchResult,
    CanonicalRequest,
    ContentType,
    Credentials,
    ObsConfig,
    ObsResponse,
    UnitResult,
)


class TestContentType:
    def test_values(self):
        assert ContentType.XML.value == "application/xml"
        assert ContentType.OCTET_STREAM.value == "application/octet-stream"


class TestCredentials:
    def test_repr_masks_secret(self):
        credentials = Credentials(access_key="AK", secret_key="super-secret")
        assert "super-secret" not in repr(credentials)
        assert "AK" in repr(credentials)

    def test_frozen(self):
        credentials = Credentials(access_key="AK", secret_key="SK")
        with pytest.raises(AttributeError):
            credentials.access_key = "other"


class TestObsConfig:
    """Tests for ObsConfig dataclass."""

    def test_defaults(self):
        config = ObsConfig(region="la-south-2")

        assert config.part_size == 50 * 1024 * 1024
        assert config.max_parts == 10_000
        assert config.max_concurrent_parts == 32
        assert config.batch_concurrency is None
        assert config.scheme == "http"

    def test_service_host(self):
        assert ObsConfig(region="ap-southeast-1").service_host == "obs.ap-southeast-1.myhuaweicloud.com"

    def test_threshold_defaults_to_part_size(self):
        config = ObsConfig(region="r", part_size=1000)
        assert config.effective_multipart_threshold == 1000

    def test_explicit_threshold(self):
        config = ObsConfig(region="r", part_size=1000, multipart_threshold=0)
        assert config.effective_multipart_threshold == 0


class TestCanonicalRequest:
    def test_text_body_encoded(self):
        request = CanonicalRequest(method="PUT", url="u", canonical_resource="/", body="<a>é</a>")
        assert request.body_bytes == "<a>é</a>".encode("utf-8")

    def test_bytes_body_unchanged(self):
        request = CanonicalRequest(method="PUT", url="u", canonical_resource="/", body=b"\x00\x01")
        assert request.body_bytes == b"\x00\x01"

    def test_empty_by_default(self):
        request = CanonicalRequest(method="GET", url="u", canonical_resource="/")
        assert request.body_bytes == b""
        assert request.content_type is None
        assert request.content_md5 == ""


class TestObsResponse:
    """Tests for ObsResponse."""

    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (299, True), (301, False), (404, False), (500, False)])
    def test_ok(self, status, ok):
        assert ObsResponse(status_code=status).ok is ok

    def test_header_case_insensitive(self):
        response = ObsResponse(status_code=200, headers={"etag": '"abc"'})
        assert response.header("ETag") == '"abc"'
        assert response.header("x-missing") is None

    def test_text_replaces_invalid_utf8(self):
        assert ObsResponse(status_code=200, body=b"ok\xff").text == "ok�"

    def test_raise_for_status_success_returns_self(self):
        response = ObsResponse(status_code=200)
        assert response.raise_for_status() is response

    def test_raise_for_status_error(self):
        response = ObsResponse(status_code=403, body=b"<Error><Code>AccessDenied</Code></Error>")

        with pytest.raises(ProtocolError) as exc_info:
            response.raise_for_status("Complete multipart upload")

        assert exc_info.value.status_code == 403
        assert "AccessDenied" in exc_info.value.body
        assert str(exc_info.value).startswith("Complete multipart upload failed with HTTP 403")


class TestBatchResult:
    def test_partition(self):
        result = BatchResult(units=[
            UnitResult(name="a", response=ObsResponse(status_code=204)),
            UnitResult(name="b", error="Connection refused"),
            UnitResult(name="c", response=ObsResponse(status_code=409)),
        ])

        assert [unit.name for unit in result.succeeded] == ["a"]
        assert [unit.name for unit in result.failed] == ["b", "c"]
        assert result.all_ok is False

    def test_empty_is_ok(self):
        assert BatchResult().all_ok is True

    def test_unit_without_response_not_ok(self):
        assert UnitResult(name="x").ok is False
