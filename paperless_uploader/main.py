#!/usr/bin/env python3
"""
Paperless Uploader - command line entry point.

Loads configuration, resolves tag names to Paperless tag ids once, then
either uploads a single file or runs the consume folder watcher until
interrupted.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from loguru import logger
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from paperless_uploader import __version__
from paperless_uploader.service import UploaderService
from paperless_uploader.utils.config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    Settings,
    check_log_level,
    load_settings,
    write_example_config,
)
from paperless_uploader.utils.helpers import mask_api_key
from paperless_uploader.utils.paperless_client import PaperlessClient, PaperlessError
from paperless_uploader.utils.tags import build_tag_catalog, resolve_tag_ids
from paperless_uploader.watchers.filesystem import DocumentUploader, FolderWatcher

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO"):
    """Send all log output to stdout in a single format."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())


def log_level_arg(value: str) -> str:
    """argparse type for --log-level."""
    try:
        return check_log_level(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        prog="paperless-uploader",
        description="Upload documents to Paperless-ngx, once or by watching a folder.",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="The path to a single document to upload.",
    )
    parser.add_argument(
        "--watch",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Watch a directory for new files and upload them (default: on).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_FILE,
        help="Path to the YAML configuration file (default: ./config.yaml).",
    )
    parser.add_argument(
        "--create-config",
        action="store_true",
        help="Create an example config file and exit.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force overwrite of an existing config file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=log_level_arg,
        help="Override the configured log level.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def log_configuration(settings: Settings):
    """Log the effective configuration without leaking the API key."""
    logger.info(
        f"Loaded configuration: URL=[{settings.paperless_url}], "
        f"APIKey=[{mask_api_key(settings.api_key)}], "
        f"WatchFolder=[{settings.watch_folder}], "
        f"PostUploadAction=[{settings.post_upload_action.value}], "
        f"ProcessedFolder=[{settings.processed_folder}], "
        f"Tags={settings.tags}"
    )


def resolve_tags(client: PaperlessClient, names: Sequence[str]) -> List[int]:
    """Fetch the tag catalog and map configured names to ids."""
    catalog = build_tag_catalog(client.fetch_tags())
    return resolve_tag_ids(catalog, names)


def upload_single_file(client: PaperlessClient, path: Path, tag_ids: Sequence[int]) -> int:
    """Upload one file; the source file is left in place."""
    print(f"Uploading {path} to Paperless...")
    try:
        client.upload_document(path, tag_ids)
    except PaperlessError as e:
        logger.error(f"Error: failed to upload document: {e}")
        return 1

    print("Document uploaded successfully!")
    return 0


def run_watch(
    settings: Settings,
    client: PaperlessClient,
    tag_ids: Sequence[int],
    observer_factory: Callable[[], BaseObserver] = Observer,
) -> int:
    """Run the folder watcher until SIGINT/SIGTERM or a fatal watch error."""
    uploader = DocumentUploader(client, tag_ids, settings.disposition_policy())
    watcher = FolderWatcher(
        settings.watch_folder,
        uploader,
        settle_delay=settings.settle_delay,
        observer_factory=observer_factory,
    )
    service = UploaderService(watcher)

    if threading.current_thread() is threading.main_thread():
        def _signal_handler(signum, frame):  # noqa: D401
            logger.info(f"Received signal {signum}, shutting down.")
            watcher.stop()

        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)

    service.start()
    error = service.wait()
    service.stop()

    if error is not None:
        logger.error(f"Error: {error}")
        return 1

    logger.info("Paperless uploader stopped.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI."""

    args = parse_args(argv)
    configure_logging(args.log_level or "INFO")

    if args.create_config:
        try:
            overwritten = write_example_config(args.config, force=args.force)
        except ConfigError as e:
            logger.error(f"Error: {e}")
            return 1

        if overwritten:
            logger.info(f"Overwrote existing {args.config} with example configuration.")
        else:
            logger.info(f"Created example {args.config}. Please edit it with your details.")
        return 0

    if args.file is None and not args.watch:
        logger.error("Error: either the --file flag or the --watch flag is required")
        return 1

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.error(f"Error: failed to load configuration: {e}")
        return 1

    if args.log_level is None:
        configure_logging(settings.log_level)

    with PaperlessClient(
        settings.paperless_url,
        settings.api_key,
        timeout=settings.upload_timeout,
    ) as client:
        try:
            tag_ids = resolve_tags(client, settings.tags)
        except PaperlessError as e:
            logger.error(f"Error: failed to get tags from Paperless: {e}")
            return 1

        log_configuration(settings)

        if args.file is not None:
            return upload_single_file(client, args.file, tag_ids)

        return run_watch(settings, client, tag_ids)


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
