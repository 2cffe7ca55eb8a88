"""Tests for URL and canonical-resource construction."""

import pytest

from obscli.endpoints import (
    UPLOADS_SUBRESOURCE,
    Endpoint,
    part_subresource,
    strip_leading_slash,
    upload_id_subresource,
)
from obscli.models import ObsConfig


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint("obs.la-south-2.myhuaweicloud.com")


class TestStripLeadingSlash:
    def test_strips_one_slash(self):
        assert strip_leading_slash("/a/b.txt") == "a/b.txt"

    def test_unchanged_without_slash(self):
        assert strip_leading_slash("a/b.txt") == "a/b.txt"

    def test_idempotent(self):
        once = strip_leading_slash("/a/b.txt")
        assert strip_leading_slash(once) == once

    def test_only_first_slash(self):
        assert strip_leading_slash("//a") == "/a"


class TestEndpoint:
    def test_from_config(self):
        endpoint = Endpoint.from_config(ObsConfig(region="ap-southeast-1", scheme="https"))
        assert endpoint.service_url() == "https://obs.ap-southeast-1.myhuaweicloud.com"

    def test_service_url(self, endpoint):
        assert endpoint.service_url() == "http://obs.la-south-2.myhuaweicloud.com"

    def test_bucket_url(self, endpoint):
        assert endpoint.bucket_url("photos") == "http://photos.obs.la-south-2.myhuaweicloud.com/"

    def test_object_url(self, endpoint):
        assert (
            endpoint.bucket_url("photos", "2024/cat.jpg")
            == "http://photos.obs.la-south-2.myhuaweicloud.com/2024/cat.jpg"
        )

    @pytest.mark.parametrize(
        "key,path",
        [
            ("notes#1.txt", "/notes%231.txt"),
            ("my file.txt", "/my%20file.txt"),
            ("a?b", "/a%3Fb"),
            ("100%.csv", "/100%25.csv"),
            ("dir/sub dir/f.txt", "/dir/sub%20dir/f.txt"),
        ],
    )
    def test_object_key_percent_encoded(self, endpoint, key, path):
        url = endpoint.bucket_url("b", key)
        assert url == f"http://b.obs.la-south-2.myhuaweicloud.com{path}"
        assert Endpoint.canonical_resource("b", key) == f"/b{path}"

    def test_subresource_appended_literally(self, endpoint):
        url = endpoint.bucket_url("b", "big.iso", part_subresource(3, "abc"))
        assert url == "http://b.obs.la-south-2.myhuaweicloud.com/big.iso?partNumber=3&uploadId=abc"

    def test_query_params_skip_none(self, endpoint):
        url = endpoint.bucket_url("b", query={"prefix": "logs/", "marker": None})
        assert url == "http://b.obs.la-south-2.myhuaweicloud.com/?prefix=logs%2F"

    def test_query_params_both(self, endpoint):
        url = endpoint.bucket_url("b", query={"prefix": "a", "marker": "m"})
        assert url.endswith("/?prefix=a&marker=m")

    def test_no_query_params(self, endpoint):
        url = endpoint.bucket_url("b", query={"prefix": None, "marker": None})
        assert url == "http://b.obs.la-south-2.myhuaweicloud.com/"


class TestCanonicalResource:
    def test_account_root(self):
        assert Endpoint.canonical_resource() == "/"

    def test_bucket(self):
        assert Endpoint.canonical_resource("b") == "/b/"

    def test_object(self):
        assert Endpoint.canonical_resource("b", "a/b.txt") == "/b/a/b.txt"

    def test_uploads_subresource(self):
        assert Endpoint.canonical_resource("b", "k", UPLOADS_SUBRESOURCE) == "/b/k?uploads"

    def test_part_subresource(self):
        resource = Endpoint.canonical_resource("b", "k", part_subresource(7, "id-1"))
        assert resource == "/b/k?partNumber=7&uploadId=id-1"

    def test_upload_id_subresource(self):
        resource = Endpoint.canonical_resource("b", "k", upload_id_subresource("id-1"))
        assert resource == "/b/k?uploadId=id-1"
