"""Exception hierarchy for the OBS client.

All client exceptions inherit from ``ObsError`` so the CLI can report
any failure with a single ``except ObsError``. The subclasses follow the
failure categories callers need to tell apart:

- ConfigurationError: credentials/region missing or unusable in headers
- TransportError: the request never got an HTTP response
- ProtocolError: the service answered with a non-2xx status
- DataError: a response or local input lacks a required field
"""

from typing import Optional


class ObsError(Exception):
    """Base exception for all OBS client errors."""


class ConfigurationError(ObsError):
    """Raised when configuration cannot be resolved or used. Never retried."""


class TransportError(ObsError):
    """Raised when a request fails below HTTP (connect, timeout, TLS)."""

    def __init__(self, method: str, url: str, cause: Exception):
        super().__init__(f"{method} {url} failed: {cause}")
        self.method = method
        self.url = url
        self.cause = cause


class ProtocolError(ObsError):
    """Raised when a required step receives a non-2xx status."""

    def __init__(self, action: str, status_code: int, body: str = ""):
        message = f"{action} failed with HTTP {status_code}"
        if body.strip():
            message = f"{message}: {body.strip()}"
        super().__init__(message)
        self.action = action
        self.status_code = status_code
        self.body = body


class DataError(ObsError):
    """Raised when an expected field is missing from a response or input."""


class PlanningError(DataError):
    """Raised when a file cannot be split within the part-count ceiling."""

    def __init__(self, total_size: int, part_size: int, part_count: int, max_parts: int):
        super().__init__(
            f"{total_size} bytes at {part_size} bytes per part needs "
            f"{part_count} parts, more than the maximum of {max_parts}"
        )
        self.total_size = total_size
        self.part_size = part_size
        self.part_count = part_count
        self.max_parts = max_parts


class MultipartUploadError(ObsError):
    """Raised after a multipart upload fails.

    Attributes:
        upload_id: The server-side upload id, if Initiate succeeded.
        failures: Mapping of part number to error message.
        aborted: Whether the server-side session was released.
    """

    def __init__(
        self,
        message: str,
        upload_id: Optional[str] = None,
        failures: Optional[dict[int, str]] = None,
        aborted: bool = False,
    ):
        super().__init__(message)
        self.upload_id = upload_id
        self.failures = failures or {}
        self.aborted = aborted
