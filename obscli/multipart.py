"""Multipart upload lifecycle management.

Handles the complete lifecycle of a multipart upload:
- Plan the byte ranges of every part (before any network call)
- Initiate the upload and read back its UploadId
- Upload parts concurrently under a fixed in-flight ceiling
- Complete the upload with a manifest sorted by part number
- Abort the server-side session when the upload fails

The coordinator moves through INITIATING -> UPLOADING_PARTS ->
COMPLETING -> DONE, or to FAILED from any earlier state.
"""

import asyncio
import os
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from obscli.client import ObsClient
from obscli.endpoints import (
    UPLOADS_SUBRESOURCE,
    part_subresource,
    upload_id_subresource,
)
from obscli.errors import DataError, MultipartUploadError, ObsError, PlanningError
from obscli.models import (
    DEFAULT_MAX_PARTS,
    DEFAULT_PART_SIZE,
    CanonicalRequest,
    ContentType,
    ObsResponse,
    PartDescriptor,
    UploadSession,
)
from obscli.operations import object_key_for
from obscli.signing import content_md5
from obscli.xml_tables import completion_manifest, find_text


class UploadState(Enum):
    """Lifecycle state of a multipart upload."""

    INITIATING = "initiating"
    UPLOADING_PARTS = "uploading_parts"
    COMPLETING = "completing"
    DONE = "done"
    FAILED = "failed"


def plan_parts(
    total_size: int,
    part_size: int = DEFAULT_PART_SIZE,
    max_parts: int = DEFAULT_MAX_PARTS,
) -> list[PartDescriptor]:
    """Split ``[0, total_size)`` into contiguous parts of at most ``part_size``.

    Only the last part may be shorter than ``part_size``. A zero-byte
    file yields no parts.

    Raises:
        ValueError: If ``part_size`` is not positive.
        PlanningError: If more than ``max_parts`` parts would be needed.
    """
    if part_size <= 0:
        raise ValueError(f"part_size must be positive, got {part_size}")

    part_count = -(-total_size // part_size)
    if part_count > max_parts:
        raise PlanningError(total_size, part_size, part_count, max_parts)

    parts = []
    offset = 0
    while offset < total_size:
        length = min(part_size, total_size - offset)
        parts.append(PartDescriptor(part_number=len(parts) + 1, offset=offset, length=length))
        offset += length
    return parts


def read_part(file_path: str, part: PartDescriptor) -> bytes:
    """Read one part's bytes through its own file handle."""
    try:
        with open(file_path, "rb") as f:
            f.seek(part.offset)
            data = f.read(part.length)
    except OSError as e:
        raise DataError(f"Failed to read part {part.part_number} of {file_path}: {e}") from e
    if len(data) != part.length:
        raise DataError(
            f"Short read for part {part.part_number} of {file_path}: "
            f"expected {part.length} bytes, got {len(data)}"
        )
    return data


class MultipartUpload:
    """Coordinates one multipart upload of a local file.

    Parts are uploaded concurrently, at most ``max_concurrent_parts`` at
    a time. The coordinator always waits for every admitted part before
    moving on; part numbers follow planning order, not completion order.
    """

    def __init__(
        self,
        client: ObsClient,
        bucket: str,
        file_path: str,
        object_path: Optional[str] = None,
        on_part_complete: Optional[Callable[[PartDescriptor], None]] = None,
    ):
        """Initialize the multipart upload coordinator.

        Args:
            client: Signing client; its config supplies part size and limits.
            bucket: Destination bucket.
            file_path: Local file to upload.
            object_path: Object key; defaults to the file name.
            on_part_complete: Called after each part uploads successfully.
        """
        self.client = client
        self.config = client.config
        self.bucket = bucket
        self.file_path = file_path
        self.object_key = object_key_for(file_path, object_path)
        self.on_part_complete = on_part_complete

        self.state = UploadState.INITIATING
        self.session: Optional[UploadSession] = None
        self.parts: list[PartDescriptor] = []
        self.failures: dict[int, str] = {}

    @property
    def upload_id(self) -> Optional[str]:
        return self.session.upload_id if self.session else None

    def _transition(self, state: UploadState) -> None:
        logger.debug("Multipart upload of '{}': {} -> {}", self.object_key, self.state.value, state.value)
        self.state = state

    def plan(self) -> list[PartDescriptor]:
        """Plan parts from the file's current size."""
        try:
            total_size = os.path.getsize(self.file_path)
        except OSError as e:
            raise DataError(f"Failed to read file at path {self.file_path}: {e}") from e
        self.parts = plan_parts(total_size, self.config.part_size, self.config.max_parts)
        return self.parts

    async def initiate(self, total_size: int) -> UploadSession:
        """Start the upload on the server and record its UploadId.

        Raises:
            ProtocolError: If the service answers with a non-2xx status.
            DataError: If the response carries no UploadId.
        """
        endpoint = self.client.endpoint
        request = CanonicalRequest(
            method="POST",
            url=endpoint.bucket_url(self.bucket, self.object_key, UPLOADS_SUBRESOURCE),
            canonical_resource=endpoint.canonical_resource(
                self.bucket, self.object_key, UPLOADS_SUBRESOURCE
            ),
        )
        response = await self.client.send(request)
        response.raise_for_status("Initiate multipart upload")

        upload_id = find_text(response.body, "UploadId")
        if not upload_id:
            raise DataError("Initiate multipart upload response has no UploadId")

        self.session = UploadSession(
            bucket=self.bucket,
            object_key=self.object_key,
            upload_id=upload_id,
            part_size=self.config.part_size,
            total_size=total_size,
        )
        logger.info("Initiated multipart upload {} for '{}/{}'", upload_id, self.bucket, self.object_key)
        return self.session

    async def upload_part(self, part: PartDescriptor) -> PartDescriptor:
        """Upload one part and store its ETag on the descriptor.

        Raises:
            RuntimeError: If the upload was not initiated.
            ProtocolError: If the service answers with a non-2xx status.
            DataError: If the part cannot be read or no ETag is returned.
        """
        if self.session is None:
            raise RuntimeError("Upload not initiated")

        # Reading and hashing up to a full part stays off the event loop
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, read_part, self.file_path, part)
        md5 = await loop.run_in_executor(None, content_md5, data)

        subresource = part_subresource(part.part_number, self.session.upload_id)
        endpoint = self.client.endpoint
        request = CanonicalRequest(
            method="PUT",
            url=endpoint.bucket_url(self.bucket, self.object_key, subresource),
            canonical_resource=endpoint.canonical_resource(self.bucket, self.object_key, subresource),
            content_type=ContentType.OCTET_STREAM,
            content_md5=md5,
            body=data,
        )
        response = await self.client.send(request)
        response.raise_for_status(f"Upload of part {part.part_number}")

        etag = response.header("ETag")
        if not etag:
            raise DataError(f"Response for part {part.part_number} has no ETag header")
        part.etag = etag
        return part

    async def upload_parts(self, parts: list[PartDescriptor]) -> dict[int, str]:
        """Upload all parts and wait for every one of them to finish.

        Service and input errors are recorded per part. Any other
        exception (from ``on_part_complete``, for one) is re-raised, but
        only after every admitted part has finished.

        Returns:
            Mapping of part number to error message for failed parts.
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrent_parts)
        failures: dict[int, str] = {}

        async def run_part(part: PartDescriptor) -> None:
            async with semaphore:
                logger.debug("Uploading part {} ({} bytes at offset {})", part.part_number, part.length, part.offset)
                try:
                    await self.upload_part(part)
                except ObsError as e:
                    logger.warning("Part {} failed: {}", part.part_number, e)
                    failures[part.part_number] = str(e)
                    return
            logger.debug("Part {} done, ETag {}", part.part_number, part.etag)
            if self.on_part_complete is not None:
                self.on_part_complete(part)

        outcomes = await asyncio.gather(*(run_part(part) for part in parts), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return failures

    async def complete(self) -> ObsResponse:
        """Send the completion manifest, sorted by part number.

        Raises:
            RuntimeError: If the upload was not initiated.
            ProtocolError: If the service answers with a non-2xx status.
        """
        if self.session is None:
            raise RuntimeError("Upload not initiated")

        subresource = upload_id_subresource(self.session.upload_id)
        endpoint = self.client.endpoint
        request = CanonicalRequest(
            method="POST",
            url=endpoint.bucket_url(self.bucket, self.object_key, subresource),
            canonical_resource=endpoint.canonical_resource(self.bucket, self.object_key, subresource),
            content_type=ContentType.XML,
            body=completion_manifest(self.parts),
        )
        response = await self.client.send(request)
        return response.raise_for_status("Complete multipart upload")

    async def abort(self) -> bool:
        """Release the server-side upload session.

        Safe to call when the upload was never initiated. Abort failures
        are logged rather than raised so they never mask the error that
        caused the abort.

        Returns:
            True if the service confirmed the abort.
        """
        if self.session is None:
            return False

        subresource = upload_id_subresource(self.session.upload_id)
        endpoint = self.client.endpoint
        request = CanonicalRequest(
            method="DELETE",
            url=endpoint.bucket_url(self.bucket, self.object_key, subresource),
            canonical_resource=endpoint.canonical_resource(self.bucket, self.object_key, subresource),
        )
        try:
            response = await self.client.send(request)
            response.raise_for_status("Abort multipart upload")
        except ObsError as e:
            logger.warning("Could not abort multipart upload {}: {}", self.session.upload_id, e)
            return False
        logger.info("Aborted multipart upload {}", self.session.upload_id)
        return True

    async def _fail(self, message: str, cause: Optional[Exception] = None) -> MultipartUploadError:
        self._transition(UploadState.FAILED)
        aborted = False
        if self.session is not None:
            if self.config.abort_on_failure:
                aborted = await self.abort()
            else:
                logger.warning(
                    "Leaving multipart upload {} open on the server", self.session.upload_id
                )
        if cause is not None:
            message = f"{message}: {cause}"
        return MultipartUploadError(
            message,
            upload_id=self.upload_id,
            failures=dict(self.failures),
            aborted=aborted,
        )

    async def run(self) -> ObsResponse:
        """Run the whole upload.

        Returns:
            The response of the Complete call.

        Raises:
            PlanningError: If the file needs too many parts (no network call made).
            DataError: If the file cannot be read or is empty.
            MultipartUploadError: If any step after planning fails.
        """
        try:
            parts = self.plan()
        except DataError:
            self._transition(UploadState.FAILED)
            raise
        if not parts:
            self._transition(UploadState.FAILED)
            raise DataError(f"Nothing to upload: {self.file_path} is empty")
        total_size = sum(part.length for part in parts)

        try:
            await self.initiate(total_size)
        except ObsError as e:
            raise await self._fail("Initiate multipart upload failed", e) from e

        self._transition(UploadState.UPLOADING_PARTS)
        logger.info("Uploading {} parts of up to {} bytes", len(parts), self.config.part_size)
        try:
            self.failures = await self.upload_parts(parts)
        except Exception:
            # Release the session, then surface the unexpected error itself
            await self._fail("Uploading parts failed")
            raise
        if self.failures:
            failed = ", ".join(str(n) for n in sorted(self.failures))
            raise await self._fail(f"{len(self.failures)} of {len(parts)} parts failed (parts {failed})")

        self._transition(UploadState.COMPLETING)
        try:
            response = await self.complete()
        except ObsError as e:
            raise await self._fail("Complete multipart upload failed", e) from e

        self._transition(UploadState.DONE)
        logger.info("Completed multipart upload of '{}/{}'", self.bucket, self.object_key)
        return response
