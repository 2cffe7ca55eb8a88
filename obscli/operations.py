"""Bucket and object operations.

Each operation maps its arguments to exactly one ``CanonicalRequest`` and
sends it through ``ObsClient``. Responses are returned as-is; deciding
whether a status counts as success is left to the caller. The batch
variants run one operation per unit through ``run_batch``. Local file
reads and writes run in the loop's default executor so they never block
other requests in flight.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from obscli.batch import run_batch
from obscli.client import ObsClient
from obscli.endpoints import strip_leading_slash
from obscli.errors import DataError
from obscli.models import (
    BatchResult,
    CanonicalRequest,
    ContentType,
    ListingResult,
    ObsResponse,
)
from obscli.signing import content_md5
from obscli.xml_tables import (
    BUCKET_TABLE,
    OBJECT_TABLE,
    create_bucket_configuration,
    extract_rows,
)


@dataclass
class DownloadResult:
    """Response of a download plus where the content was written."""

    response: ObsResponse
    path: Optional[Path] = None


def object_key_for(file_path: str, object_path: Optional[str] = None) -> str:
    """Object key for an upload: the explicit path, or the file's name."""
    if object_path:
        return strip_leading_slash(object_path)
    name = Path(file_path).name
    if not name:
        raise DataError(
            f"Invalid or missing filename in path, and no object path provided: {file_path}"
        )
    return name


def local_filename(object_path: str) -> str:
    """Final path segment of an object key, used as the download file name."""
    name = strip_leading_slash(object_path).rsplit("/", 1)[-1]
    if not name:
        raise DataError(f"Cannot derive a file name from object path: {object_path}")
    return name


def read_file(file_path: str) -> bytes:
    try:
        return Path(file_path).read_bytes()
    except OSError as e:
        raise DataError(f"Failed to read file at path {file_path}: {e}") from e


def write_file(destination: Path, data: bytes) -> None:
    """Write ``data`` to ``destination``, creating parent directories."""
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
    except OSError as e:
        raise DataError(f"Failed to write {destination}: {e}") from e


async def create_bucket(client: ObsClient, bucket: str) -> ObsResponse:
    """Create a bucket in the configured region."""
    endpoint = client.endpoint
    request = CanonicalRequest(
        method="PUT",
        url=endpoint.bucket_url(bucket),
        canonical_resource=endpoint.canonical_resource(bucket),
        content_type=ContentType.XML,
        body=create_bucket_configuration(client.config.region),
    )
    logger.info("Creating bucket '{}'", bucket)
    return await client.send(request)


async def list_buckets(client: ObsClient) -> ListingResult:
    request = CanonicalRequest(
        method="GET",
        url=client.endpoint.service_url(),
        canonical_resource=client.endpoint.canonical_resource(),
    )
    response = await client.send(request)
    return ListingResult(response=response, rows=extract_rows(response.body, BUCKET_TABLE))


async def list_objects(
    client: ObsClient,
    bucket: str,
    prefix: Optional[str] = None,
    marker: Optional[str] = None,
) -> ListingResult:
    """List objects in a bucket.

    ``prefix`` and ``marker`` are ordinary query parameters and are not
    part of the signed resource.
    """
    endpoint = client.endpoint
    request = CanonicalRequest(
        method="GET",
        url=endpoint.bucket_url(bucket, query={"prefix": prefix, "marker": marker}),
        canonical_resource=endpoint.canonical_resource(bucket),
    )
    response = await client.send(request)
    return ListingResult(response=response, rows=extract_rows(response.body, OBJECT_TABLE))


async def delete_bucket(client: ObsClient, bucket: str) -> ObsResponse:
    endpoint = client.endpoint
    request = CanonicalRequest(
        method="DELETE",
        url=endpoint.bucket_url(bucket),
        canonical_resource=endpoint.canonical_resource(bucket),
    )
    logger.info("Deleting bucket '{}'", bucket)
    return await client.send(request)


async def delete_buckets(client: ObsClient, buckets: list[str]) -> BatchResult:
    """Delete several buckets concurrently; failures stay per bucket."""
    return await run_batch(
        buckets,
        lambda bucket: delete_bucket(client, bucket),
        limit=client.config.batch_concurrency,
        label="bucket deletion",
    )


async def delete_object(client: ObsClient, bucket: str, object_path: str) -> ObsResponse:
    key = strip_leading_slash(object_path)
    endpoint = client.endpoint
    request = CanonicalRequest(
        method="DELETE",
        url=endpoint.bucket_url(bucket, key),
        canonical_resource=endpoint.canonical_resource(bucket, key),
    )
    logger.info("Deleting object '{}' from '{}'", key, bucket)
    return await client.send(request)


async def upload_object(
    client: ObsClient,
    bucket: str,
    file_path: str,
    object_path: Optional[str] = None,
) -> ObsResponse:
    """Upload a whole file in a single PUT with its Content-MD5."""
    key = object_key_for(file_path, object_path)
    loop = asyncio.get_running_loop()
    data = await loop.run_in_executor(None, read_file, file_path)
    md5 = await loop.run_in_executor(None, content_md5, data)

    endpoint = client.endpoint
    request = CanonicalRequest(
        method="PUT",
        url=endpoint.bucket_url(bucket, key),
        canonical_resource=endpoint.canonical_resource(bucket, key),
        content_type=ContentType.OCTET_STREAM,
        content_md5=md5,
        body=data,
    )
    logger.info("Uploading '{}' to '{}/{}' ({} bytes)", file_path, bucket, key, len(data))
    return await client.send(request)


async def upload_objects(client: ObsClient, bucket: str, file_paths: list[str]) -> BatchResult:
    """Upload several files concurrently, each keyed by its file name."""
    return await run_batch(
        file_paths,
        lambda file_path: upload_object(client, bucket, file_path),
        limit=client.config.batch_concurrency,
        label="upload",
    )


async def download_object(
    client: ObsClient,
    bucket: str,
    object_path: str,
    output_dir: Optional[str] = None,
) -> DownloadResult:
    """Download an object into ``output_dir`` under its final path segment.

    The directory tree is created if needed and an existing file of the
    same name is overwritten. Nothing is written for a non-2xx response.
    """
    key = strip_leading_slash(object_path)
    filename = local_filename(key)

    endpoint = client.endpoint
    request = CanonicalRequest(
        method="GET",
        url=endpoint.bucket_url(bucket, key),
        canonical_resource=endpoint.canonical_resource(bucket, key),
    )
    response = await client.send(request)
    if not response.ok:
        return DownloadResult(response=response)

    directory = Path(output_dir) if output_dir else Path(".")
    destination = directory / filename
    await asyncio.get_running_loop().run_in_executor(None, write_file, destination, response.body)
    logger.info("Saved '{}/{}' to {} ({} bytes)", bucket, key, destination, len(response.body))
    return DownloadResult(response=response, path=destination)
