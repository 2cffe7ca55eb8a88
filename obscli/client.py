"""Signed request dispatch for the OBS client.

Builds the headers for a ``CanonicalRequest`` (Date, Authorization and,
when present, Content-Type and Content-MD5), sends it through a shared
``httpx.AsyncClient`` and returns the raw status, headers and body.
Status codes are not interpreted here.

The timestamp is captured once per request so the Date header and the
signed string always carry the same value.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import httpx
from loguru import logger

from obscli.endpoints import Endpoint
from obscli.errors import ConfigurationError, TransportError
from obscli.models import CanonicalRequest, Credentials, ObsConfig, ObsResponse
from obscli.signing import (
    authorization_header,
    build_canonical_string,
    format_http_date,
    sign,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_http_client(config: ObsConfig) -> httpx.AsyncClient:
    """Build the shared async HTTP client for one invocation.

    Args:
        config: Client configuration; ``timeout`` is applied to every call.

    Returns:
        An httpx AsyncClient. The caller owns it and must close it.
    """
    return httpx.AsyncClient(timeout=config.timeout)


def _checked_header(name: str, value: str) -> str:
    """Reject values that cannot travel in an HTTP header."""
    if not value.isascii() or "\r" in value or "\n" in value:
        raise ConfigurationError(
            f"Cannot build the {name} header: value must be single-line ASCII"
        )
    return value


class ObsClient:
    """Signs and sends requests to the object storage service.

    The HTTP client and credentials are read-only after construction and
    safe to share across concurrent tasks.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        credentials: Credentials,
        config: ObsConfig,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the client.

        Args:
            http_client: Shared httpx AsyncClient.
            credentials: Resolved access/secret key pair.
            config: Configuration for this invocation.
            clock: Returns the current time; replaced in tests.
        """
        self.http_client = http_client
        self.credentials = credentials
        self.config = config
        self.endpoint = Endpoint.from_config(config)
        self._clock = clock or _utc_now

    def signed_headers(self, request: CanonicalRequest, date: str) -> dict[str, str]:
        """Compute the headers for a request at the given Date."""
        canonical_string = build_canonical_string(
            request.method,
            request.content_md5,
            request.content_type,
            date,
            request.canonical_resource,
        )
        logger.debug("Canonical string for signing:\n{}", canonical_string)

        signature = sign(self.credentials.secret_key, canonical_string)

        headers = {"Date": _checked_header("Date", date)}
        if request.content_type is not None:
            headers["Content-Type"] = request.content_type.value
        if request.content_md5:
            headers["Content-MD5"] = _checked_header("Content-MD5", request.content_md5)
        headers["Authorization"] = _checked_header(
            "Authorization", authorization_header(self.credentials, signature)
        )
        return headers

    async def send(self, request: CanonicalRequest) -> ObsResponse:
        """Sign and send one request.

        Raises:
            ConfigurationError: If a header value cannot be built.
            TransportError: If no HTTP response was received.
        """
        date = format_http_date(self._clock())
        headers = self.signed_headers(request, date)
        body = request.body_bytes

        logger.debug("{} {}", request.method, request.url)
        try:
            response = await self.http_client.request(
                request.method,
                request.url,
                headers=headers,
                content=body if body else None,
            )
        except httpx.TransportError as e:
            raise TransportError(request.method, request.url, e) from e

        return ObsResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> "ObsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.aclose()
        return False
