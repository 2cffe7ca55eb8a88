"""URL and canonical-resource construction.

Buckets are addressed virtual-host style:

    {scheme}://{bucket}.{service_host}/{object_key}

Account-level calls (listing buckets) go to ``{scheme}://{service_host}``.
Sub-resources such as ``uploads`` or ``partNumber=1&uploadId=x`` are
appended literally to both the URL and the signed resource; ordinary
query parameters (``prefix``, ``marker``) only ever go on the URL.

Object keys are percent-encoded (``/`` kept) in the URL and in the signed
resource alike, so keys holding ``#``, ``?``, ``%`` or spaces address the
object they name.
"""

from typing import Optional
from urllib.parse import quote, urlencode

from obscli.models import ObsConfig


def strip_leading_slash(object_path: str) -> str:
    """Drop a single leading '/' so '/a/b.txt' and 'a/b.txt' are the same key."""
    if object_path.startswith("/"):
        return object_path[1:]
    return object_path


def encode_key(object_key: str) -> str:
    """Percent-encode an object key for the request path."""
    return quote(object_key, safe="/")


def part_subresource(part_number: int, upload_id: str) -> str:
    return f"partNumber={part_number}&uploadId={upload_id}"


def upload_id_subresource(upload_id: str) -> str:
    return f"uploadId={upload_id}"


UPLOADS_SUBRESOURCE = "uploads"


class Endpoint:
    """Service host for one region plus the URL scheme to reach it."""

    def __init__(self, service_host: str, scheme: str = "http"):
        self.service_host = service_host
        self.scheme = scheme

    @classmethod
    def from_config(cls, config: ObsConfig) -> "Endpoint":
        return cls(config.service_host, config.scheme)

    def service_url(self) -> str:
        return f"{self.scheme}://{self.service_host}"

    def bucket_url(
        self,
        bucket: str,
        object_key: str = "",
        subresource: str = "",
        query: Optional[dict[str, Optional[str]]] = None,
    ) -> str:
        """Build the URL for a bucket, object, or object sub-resource."""
        url = f"{self.scheme}://{bucket}.{self.service_host}/{encode_key(object_key)}"
        if subresource:
            return f"{url}?{subresource}"
        params = {k: v for k, v in (query or {}).items() if v is not None}
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    @staticmethod
    def canonical_resource(bucket: str = "", object_key: str = "", subresource: str = "") -> str:
        """Build the resource string that goes into the signature.

        With no bucket this is the account root, ``/``.
        """
        if not bucket:
            return "/"
        resource = f"/{bucket}/{encode_key(object_key)}"
        if subresource:
            resource = f"{resource}?{subresource}"
        return resource

    def __repr__(self) -> str:
        return f"Endpoint({self.service_url()!r})"
