"""Command-line interface for the OBS client.

Provides argument parsing and the main entry point. Each subcommand
builds its requests through ``obscli.operations`` or
``obscli.multipart`` and hands the results to the reporters.
"""

import argparse
import asyncio
import os
import sys
from typing import Optional

from loguru import logger

from obscli.client import ObsClient, build_http_client
from obscli.config import (
    DEFAULT_CONFIG_PATH,
    build_config,
    load_from_json,
    resolve_credentials,
    resolve_region,
)
from obscli.errors import ConfigurationError, ObsError
from obscli.log import setup_logging
from obscli.models import BatchResult, Credentials, ObsConfig, PartDescriptor
from obscli.multipart import MultipartUpload
from obscli.operations import (
    create_bucket,
    delete_bucket,
    delete_buckets,
    delete_object,
    download_object,
    list_buckets,
    list_objects,
    upload_object,
    upload_objects,
)
from obscli.reporters import ConsoleReporter, JsonReporter, Reporter


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters.

    Allows using both ConsoleReporter and JsonReporter simultaneously.
    """

    def __init__(self, reporters: list[Reporter]):
        self._reporters = reporters

    def on_response(self, action, response, rows=None) -> None:
        for reporter in self._reporters:
            reporter.on_response(action, response, rows)

    def on_batch_complete(self, action: str, result: BatchResult) -> None:
        for reporter in self._reporters:
            reporter.on_batch_complete(action, result)

    def on_part_complete(self, part: PartDescriptor, total_parts: int) -> None:
        for reporter in self._reporters:
            reporter.on_part_complete(part, total_parts)

    def on_error(self, action: str, message: str) -> None:
        for reporter in self._reporters:
            reporter.on_error(action, message)

    def on_run_complete(self) -> None:
        for reporter in self._reporters:
            reporter.on_run_complete()


async def _create(args, client: ObsClient, reporter: Reporter) -> bool:
    response = await create_bucket(client, args.bucket)
    reporter.on_response("create bucket", response)
    return response.ok


async def _list_buckets(args, client: ObsClient, reporter: Reporter) -> bool:
    result = await list_buckets(client)
    reporter.on_response("list buckets", result.response, result.rows)
    return result.response.ok


async def _list_objects(args, client: ObsClient, reporter: Reporter) -> bool:
    result = await list_objects(client, args.bucket, prefix=args.prefix, marker=args.marker)
    reporter.on_response("list objects", result.response, result.rows)
    return result.response.ok


async def _delete_bucket(args, client: ObsClient, reporter: Reporter) -> bool:
    response = await delete_bucket(client, args.bucket)
    reporter.on_response("delete bucket", response)
    return response.ok


async def _delete_buckets(args, client: ObsClient, reporter: Reporter) -> bool:
    result = await delete_buckets(client, args.buckets)
    reporter.on_batch_complete("delete buckets", result)
    return result.all_ok


async def _delete_object(args, client: ObsClient, reporter: Reporter) -> bool:
    response = await delete_object(client, args.bucket, args.object_path)
    reporter.on_response("delete object", response)
    return response.ok


def use_multipart(file_path: str, config: ObsConfig, forced: bool = False) -> bool:
    """Whether a file should go through the multipart coordinator."""
    if forced:
        return True
    try:
        return os.path.getsize(file_path) > config.effective_multipart_threshold
    except OSError:
        return False


async def _upload_object(args, client: ObsClient, reporter: Reporter) -> bool:
    if not use_multipart(args.file_path, client.config, args.multipart):
        response = await upload_object(client, args.bucket, args.file_path, args.object_path)
        reporter.on_response("upload object", response)
        return response.ok

    upload = MultipartUpload(
        client,
        args.bucket,
        args.file_path,
        args.object_path,
        on_part_complete=lambda part: reporter.on_part_complete(part, len(upload.parts)),
    )
    response = await upload.run()
    reporter.on_response("multipart upload", response)
    return response.ok


async def _upload_objects(args, client: ObsClient, reporter: Reporter) -> bool:
    result = await upload_objects(client, args.bucket, args.files)
    reporter.on_batch_complete("upload objects", result)
    return result.all_ok


async def _download_object(args, client: ObsClient, reporter: Reporter) -> bool:
    result = await download_object(client, args.bucket, args.object_path, args.output_dir)
    # Object bodies are not echoed to the console
    if result.path is not None:
        reporter.on_response("download object", result.response, rows=[{"Saved To": str(result.path)}])
    else:
        reporter.on_response("download object", result.response)
    return result.response.ok


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="obscli",
        description="A command-line tool for file operations and management in Huawei Cloud OBS",
    )

    parser.add_argument(
        "-r", "--region",
        help="OBS region (e.g., la-south-2). Falls back to HUAWEICLOUD_SDK_REGION",
    )
    parser.add_argument(
        "-a", "--ak",
        help="Access key override. Use only if env vars and config file are unavailable",
    )
    parser.add_argument(
        "-s", "--sk",
        help="Secret key override. Use only if env vars and config file are unavailable",
    )
    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log canonical strings and per-part progress",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    parser.add_argument(
        "-j", "--json", "--json-output",
        dest="json_output",
        metavar="PATH",
        help="Write JSON results to file ('-' for stdout)",
    )
    parser.add_argument(
        "--https",
        action="store_true",
        help="Use HTTPS instead of HTTP",
    )
    parser.add_argument(
        "--keep-failed-uploads",
        action="store_true",
        help="Do not abort the server-side session when a multipart upload fails",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    create = subparsers.add_parser("create", aliases=["mkb"], help="Create a bucket")
    create.add_argument("-b", "--bucket", required=True, help="The bucket to create")
    create.set_defaults(handler=_create)

    lsb = subparsers.add_parser("list-buckets", aliases=["lsb"], help="List buckets")
    lsb.set_defaults(handler=_list_buckets)

    lso = subparsers.add_parser("list-objects", aliases=["lso"], help="List objects in a bucket")
    lso.add_argument("-b", "--bucket", required=True, help="The bucket to list")
    lso.add_argument("-p", "--prefix", help="Include only objects with the specified prefix")
    lso.add_argument("-m", "--marker", help="List results after the object with the marker")
    lso.set_defaults(handler=_list_objects)

    rmb = subparsers.add_parser("delete-bucket", aliases=["rmb"], help="Delete a single bucket")
    rmb.add_argument("-b", "--bucket", required=True, help="The bucket to delete")
    rmb.set_defaults(handler=_delete_bucket)

    rmbs = subparsers.add_parser("delete-buckets", aliases=["rmbs"], help="Delete multiple buckets")
    rmbs.add_argument("-b", "--buckets", nargs="+", required=True, help="Bucket names to delete")
    rmbs.set_defaults(handler=_delete_buckets)

    rm = subparsers.add_parser("delete-object", aliases=["rm"], help="Delete an object from a bucket")
    rm.add_argument("-b", "--bucket", required=True, help="The bucket holding the object")
    rm.add_argument("-o", "--object-path", required=True, help="Object path in the bucket")
    rm.set_defaults(handler=_delete_object)

    put = subparsers.add_parser("upload-object", aliases=["put"], help="Upload an object to a bucket")
    put.add_argument("-b", "--bucket", required=True, help="The bucket to upload to")
    put.add_argument("-f", "--file-path", required=True, help="File path")
    put.add_argument("-o", "--object-path", help="Optional object path (defaults to the file name)")
    put.add_argument(
        "--multipart",
        action="store_true",
        help="Force a multipart upload (automatic for files larger than one part)",
    )
    put.set_defaults(handler=_upload_object)

    puts = subparsers.add_parser("upload-objects", aliases=["puts"], help="Upload multiple objects to a bucket")
    puts.add_argument("-b", "--bucket", required=True, help="The bucket to upload to")
    puts.add_argument(
        "-f", "--files",
        nargs="+",
        required=True,
        help="One or more local file paths. The object key will be the filename",
    )
    puts.set_defaults(handler=_upload_objects)

    get = subparsers.add_parser("download-object", aliases=["get"], help="Download an object to disk")
    get.add_argument("-b", "--bucket", required=True, help="The bucket to download from")
    get.add_argument("-o", "--object-path", required=True, help="Object path in the bucket")
    get.add_argument("-d", "--output-dir", help="Output directory, NOT the filename")
    get.set_defaults(handler=_download_object)

    return parser.parse_args(argv)


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments."""
    reporters: list[Reporter] = []

    # JSON on stdout replaces the console tables
    if args.json_output != "-":
        reporters.append(ConsoleReporter(quiet=args.quiet))

    if args.json_output:
        reporters.append(JsonReporter(output_path=args.json_output))

    return reporters


async def execute(
    args: argparse.Namespace,
    config: ObsConfig,
    credentials: Credentials,
    reporter: Reporter,
) -> int:
    """Run the selected command against the service.

    Returns:
        Exit code: 0 for success, 1 for command failure, 2 for configuration errors
    """
    async with ObsClient(build_http_client(config), credentials, config) as client:
        try:
            ok = await args.handler(args, client, reporter)
        except ConfigurationError as e:
            logger.error("Configuration error: {}", e)
            reporter.on_error(args.command, str(e))
            return 2
        except ObsError as e:
            logger.error("{} failed: {}", args.command, e)
            reporter.on_error(args.command, str(e))
            return 1
        finally:
            reporter.on_run_complete()

    return 0 if ok else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for command failure, 2 for configuration errors
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        settings = load_from_json(args.config)
        credentials = resolve_credentials(args.ak, args.sk, settings)
        region = resolve_region(args.region, settings)
        config = build_config(
            region,
            settings,
            https=args.https,
            abort_on_failure=not args.keep_failed_uploads,
        )
    except ConfigurationError as e:
        logger.error("Configuration error: {}", e)
        return 2

    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    return asyncio.run(execute(args, config, credentials, reporter))


if __name__ == "__main__":
    sys.exit(main())
