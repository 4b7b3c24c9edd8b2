"""
Signed URL Round Trip - CLI Entry Point.

Loads configuration, signs a PUT URL, uploads a file through it, signs a
GET URL for the same object and downloads it back.

This file contains:
- Argument parsing (flags override environment / .env values)
- Logging setup
- run(): the only place that turns errors into exit codes

Usage:
    python main.py --bucket my-bucket --credentials key.json \\
        --upload-file upload.jpeg --download-file download.jpeg
"""

import argparse
import logging
import os
import sys
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv

from storage.credentials import load_credentials
from storage.gcs import GCSStorageManager
from transfer.config import TransferConfig
from transfer.executor import HttpTransferExecutor
from transfer.workflow import RoundTripWorkflow
from utils.errors import SignedTransferError
from utils.logger_config import configure_logging, stop_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Upload a file to GCS through a signed PUT URL and download it back through a signed GET URL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Every flag falls back to an environment variable (a .env file is honoured):\n"
            "  GCS_CREDENTIALS_JSON, GCS_BUCKET, GCS_PROJECT_ID, UPLOAD_FILE_PATH,\n"
            "  DOWNLOAD_FILE_PATH, SIGNED_URL_EXPIRATION_SECONDS, GCS_OBJECT_PREFIX,\n"
            "  OBJECT_EXTENSION, HTTP_TIMEOUT_SECONDS, VERIFY_CHECKSUM,\n"
            "  DELETE_PARTIAL_DOWNLOAD, LOG_LEVEL"
        ),
    )
    parser.add_argument("--credentials", help="Path to the service-account JSON key")
    parser.add_argument("--bucket", help="Bucket to upload into")
    parser.add_argument("--project", help="GCP project ID (defaults to the key's project)")
    parser.add_argument("--upload-file", help="Local file to upload")
    parser.add_argument("--download-file", help="Where to write the downloaded copy")
    parser.add_argument("--expiration", type=int, help="Signed URL lifetime in seconds (max 604800)")
    parser.add_argument("--prefix", help="Object name prefix, e.g. uploads/")
    parser.add_argument("--extension", help="Object name extension (defaults to the upload file's)")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds (default: none)")
    parser.add_argument(
        "--verify",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Compare SHA-256 of the uploaded and downloaded files (default: VERIFY_CHECKSUM or on)",
    )
    parser.add_argument(
        "--delete-partial",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Delete the downloaded file when it fails the size or checksum check "
             "(default: DELETE_PARTIAL_DOWNLOAD or off)",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (default: LOG_LEVEL or INFO)")
    return parser


def config_from_args(args: argparse.Namespace, env=None) -> TransferConfig:
    """Layer parsed flags over the environment."""
    return TransferConfig.from_env(
        env,
        credentials_path=args.credentials,
        bucket_name=args.bucket,
        project_id=args.project,
        upload_file_path=args.upload_file,
        download_file_path=args.download_file,
        expiration_seconds=args.expiration,
        object_prefix=args.prefix,
        object_extension=args.extension,
        http_timeout_seconds=args.timeout,
        verify_checksum=args.verify,
        delete_partial_download=args.delete_partial,
    )


def run(
    config: TransferConfig,
    *,
    storage_factory: Callable[..., GCSStorageManager] = GCSStorageManager,
    executor_factory: Callable[..., HttpTransferExecutor] = HttpTransferExecutor,
) -> int:
    """
    Run one upload/download round trip.

    Returns:
        0 on success, otherwise the exit code of the first error raised
    """
    try:
        credentials = load_credentials(config.credentials_path)
        logger.info("Read credentials complete: %s", credentials.client_email)

        with storage_factory(
            config.bucket_name,
            config.credentials_path,
            project_id=config.project_id or credentials.project_id,
        ) as gcs:
            logger.info("Created storage client for bucket %s", config.bucket_name)
            with executor_factory(timeout=config.http_timeout_seconds) as executor:
                workflow = RoundTripWorkflow(config, gcs, executor, credentials.client_email)
                result = workflow.run()
    except SignedTransferError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return exc.exit_code

    logger.info("Round trip complete: %s", result.gs_url)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Load .env from the working directory before reading any settings
    load_dotenv(os.path.join(os.getcwd(), ".env"))

    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        try:
            config = config_from_args(args)
        except SignedTransferError as exc:
            logger.error("%s: %s", type(exc).__name__, exc)
            return exc.exit_code
        logger.debug("Configuration: %s", config.summary())
        return run(config)
    finally:
        stop_logging()


if __name__ == "__main__":
    sys.exit(main())
