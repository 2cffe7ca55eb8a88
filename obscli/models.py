"""Data models for the OBS client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from obscli.errors import ProtocolError


class ContentType(Enum):
    """Media types the service accepts on request bodies."""

    XML = "application/xml"
    OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class Credentials:
    """Access key / secret key pair used to sign every request."""

    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key!r}, secret_key='***')"


MIB = 1024 * 1024

# Reference part size and ceilings for multipart uploads
DEFAULT_PART_SIZE = 50 * MIB
DEFAULT_MAX_PARTS = 10_000
DEFAULT_MAX_CONCURRENT_PARTS = 32

DEFAULT_ENDPOINT_TEMPLATE = "obs.{region}.myhuaweicloud.com"


@dataclass(frozen=True)
class ObsConfig:
    """Settings for one CLI invocation, passed explicitly to every operation."""

    region: str
    endpoint_template: str = DEFAULT_ENDPOINT_TEMPLATE
    scheme: str = "http"
    timeout: float = 60.0
    part_size: int = DEFAULT_PART_SIZE
    max_parts: int = DEFAULT_MAX_PARTS
    max_concurrent_parts: int = DEFAULT_MAX_CONCURRENT_PARTS
    batch_concurrency: Optional[int] = None
    multipart_threshold: Optional[int] = None
    abort_on_failure: bool = True

    @property
    def service_host(self) -> str:
        return self.endpoint_template.format(region=self.region)

    @property
    def effective_multipart_threshold(self) -> int:
        if self.multipart_threshold is None:
            return self.part_size
        return self.multipart_threshold


@dataclass(frozen=True)
class CanonicalRequest:
    """Everything needed to sign and send a single HTTP call.

    ``body`` is either text (XML payloads, empty bodies) or raw bytes
    (object data). ``canonical_resource`` is the signed resource path,
    including any sub-resource marker such as ``?uploads``.
    """

    method: str
    url: str
    canonical_resource: str
    content_type: Optional[ContentType] = None
    content_md5: str = ""
    body: Union[str, bytes] = ""

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")


@dataclass
class ObsResponse:
    """Raw HTTP response handed back to callers."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def raise_for_status(self, action: str = "request") -> "ObsResponse":
        """Raise ProtocolError unless the status is 2xx."""
        if not self.ok:
            raise ProtocolError(action, self.status_code, self.text)
        return self


@dataclass
class ListingResult:
    """A listing response together with the rows extracted from it."""

    response: ObsResponse
    rows: Optional[list[dict[str, str]]] = None


@dataclass
class UploadSession:
    """Server-side state of one multipart upload."""

    bucket: str
    object_key: str
    upload_id: str
    part_size: int
    total_size: int


@dataclass
class PartDescriptor:
    """One byte range of a multipart upload."""

    part_number: int
    offset: int
    length: int
    etag: str = ""


@dataclass
class UnitResult:
    """Outcome of a single unit in a batch operation."""

    name: str
    response: Optional[ObsResponse] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None and self.response.ok


@dataclass
class BatchResult:
    """Aggregated outcomes of a batch operation, in submission order."""

    units: list[UnitResult] = field(default_factory=list)

    @property
    def failed(self) -> list[UnitResult]:
        return [unit for unit in self.units if not unit.ok]

    @property
    def succeeded(self) -> list[UnitResult]:
        return [unit for unit in self.units if unit.ok]

    @property
    def all_ok(self) -> bool:
        return not self.failed
