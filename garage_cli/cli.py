"""Command-line interface for garage-cli.

Provides argument parsing and the main entry point for running
transfer commands from the command line.
"""

import argparse
import logging
import sys
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.logging import RichHandler

from garage_cli import __version__
from garage_cli.config import ConfigError, load_settings
from garage_cli.enumerator import EnumerationError
from garage_cli.models import CommandResult, RunConfig
from garage_cli.orchestrator import ConfirmationRequired, TransferOrchestrator
from garage_cli.reporters import (
    BufferedReporter,
    ConsoleReporter,
    JsonReporter,
    Reporter,
    ReporterError,
)
from garage_cli.s3_client import S3Gateway

logger = logging.getLogger(__name__)

DEFAULT_PARALLELISM = 5
DEFAULT_GET_EXPIRY = 3600
DEFAULT_PUT_EXPIRY = 600

# Commands that run work items through the worker pool
TRANSFER_COMMANDS = ("upload", "download", "delete")


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters.

    Allows using both ConsoleReporter and JsonReporter simultaneously.
    """

    def __init__(self, reporters: list[Reporter]):
        """Initialize with list of reporters.

        Args:
            reporters: List of reporters to delegate to
        """
        self._reporters = reporters

    def on_command_start(self, command, item_count) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_command_start(command, item_count)

    def on_item_start(self, item) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_item_start(item)

    def on_item_progress(self, item, advance, total) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_item_progress(item, advance, total)

    def on_item_complete(self, outcome) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_item_complete(outcome)

    def on_dry_run(self, objects) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_dry_run(objects)

    def on_listing(self, listing) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_listing(listing)

    def on_presigned(self, url) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_presigned(url)

    def on_command_complete(self, result) -> None:
        """Delegate to all reporters."""
        for reporter in self._reporters:
            reporter.on_command_complete(result)


def _add_parallel_option(parser: argparse.ArgumentParser, noun: str) -> None:
    parser.add_argument(
        "-p", "--parallel",
        type=int,
        default=DEFAULT_PARALLELISM,
        metavar="N",
        help=f"Parallel {noun} (default: {DEFAULT_PARALLELISM})",
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="garage-cli",
        description="S3 CLI for Garage / MinIO compatible storage",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress bars and per-item output, show only summary",
    )

    parser.add_argument(
        "-j", "--json-output",
        metavar="PATH",
        help="Write JSON results to file",
    )

    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="Load environment variables from this file (default: ./.env)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    upload = subparsers.add_parser("upload", help="Upload file or folder (parallel)")
    upload.add_argument("bucket")
    upload.add_argument("src")
    upload.add_argument("dest", nargs="?")
    _add_parallel_option(upload, "uploads")

    download = subparsers.add_parser("download", help="Download object or prefix")
    download.add_argument("bucket")
    download.add_argument("key")
    download.add_argument("dest")
    download.add_argument("-r", "--recursive", action="store_true", help="Recursive")
    _add_parallel_option(download, "downloads")

    delete = subparsers.add_parser("delete", help="Delete object or prefix")
    delete.add_argument("bucket")
    delete.add_argument("key")
    delete.add_argument("-r", "--recursive", action="store_true", help="Recursive delete")
    delete.add_argument("--dry-run", action="store_true", help="Show what would be deleted")
    delete.add_argument("--yes", action="store_true", help="Confirm destructive operation")
    _add_parallel_option(delete, "deletes")

    listing = subparsers.add_parser("list", help="List objects (recursive)")
    listing.add_argument("bucket")
    listing.add_argument("prefix", nargs="?", default="")

    presign = subparsers.add_parser("presign", help="Presigned GET URL")
    presign.add_argument("bucket")
    presign.add_argument("key")
    presign.add_argument(
        "-e", "--expires",
        type=int,
        default=DEFAULT_GET_EXPIRY,
        metavar="SECONDS",
        help=f"Expiry (default: {DEFAULT_GET_EXPIRY})",
    )

    presign_put = subparsers.add_parser("presign-put", help="Presigned PUT URL")
    presign_put.add_argument("bucket")
    presign_put.add_argument("key")
    presign_put.add_argument(
        "-e", "--expires",
        type=int,
        default=DEFAULT_PUT_EXPIRY,
        metavar="SECONDS",
        help=f"Expiry (default: {DEFAULT_PUT_EXPIRY})",
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    """Send package logs to stderr through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    package_logger = logging.getLogger("garage_cli")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True, legacy_windows=True),
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        List of configured reporters
    """
    reporters: list[Reporter] = []

    # Always add console reporter
    reporters.append(ConsoleReporter(quiet=args.quiet))

    # Add JSON reporter if requested
    if args.json_output:
        reporters.append(JsonReporter(output_path=args.json_output))

    return reporters


def build_run_config(args: argparse.Namespace) -> RunConfig:
    """Build the run configuration for a transfer command.

    Raises:
        ValueError: If the bucket is empty or parallelism is below 1.
    """
    return RunConfig(
        bucket=args.bucket,
        parallelism=getattr(args, "parallel", DEFAULT_PARALLELISM),
        recursive=getattr(args, "recursive", False),
        dry_run=getattr(args, "dry_run", False),
        confirmed=getattr(args, "yes", False),
    )


def run_command(
    args: argparse.Namespace,
    orchestrator: TransferOrchestrator,
    config: Optional[RunConfig] = None,
) -> int:
    """Dispatch the parsed command to the orchestrator.

    Args:
        args: Parsed command-line arguments
        orchestrator: Orchestrator to run the command on
        config: Validated run configuration for transfer commands

    Returns:
        Exit code: 0 for success, 1 if any item failed
    """
    result: Optional[CommandResult] = None

    if args.command == "upload":
        result = orchestrator.upload(config, args.src, args.dest)
    elif args.command == "download":
        result = orchestrator.download(config, args.key, args.dest)
    elif args.command == "delete":
        result = orchestrator.delete(config, args.key)
    elif args.command == "list":
        orchestrator.list_objects(args.bucket, args.prefix)
    elif args.command == "presign":
        orchestrator.presign(args.bucket, args.key, args.expires, method="get")
    elif args.command == "presign-put":
        orchestrator.presign(args.bucket, args.key, args.expires, method="put")

    if result is not None and not result.all_succeeded:
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for item failures or a refused
        delete, 2 for errors
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    config = None
    if args.command in TRANSFER_COMMANDS:
        try:
            config = build_run_config(args)
        except ValueError as e:
            print(f"Invalid arguments: {e}", file=sys.stderr)
            return 2

    # Load configuration
    try:
        settings = load_settings(args.env_file)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    gateway = S3Gateway.from_settings(settings)

    # Create reporters
    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    try:
        with BufferedReporter(reporter) as buffered:
            orchestrator = TransferOrchestrator(gateway, reporter=buffered)
            exit_code = _run_with_errors(args, orchestrator, config)
    except ReporterError as e:
        print(f"Output error: {e}", file=sys.stderr)
        return 2

    return exit_code


def _run_with_errors(
    args: argparse.Namespace,
    orchestrator: TransferOrchestrator,
    config: Optional[RunConfig],
) -> int:
    """Run the command, mapping command-level errors to exit codes."""
    try:
        return run_command(args, orchestrator, config)
    except ConfirmationRequired as e:
        if args.recursive:
            print(f"Refusing to delete {e.count} objects without --yes", file=sys.stderr)
        else:
            print("Use --yes to confirm delete", file=sys.stderr)
        return 1
    except EnumerationError as e:
        print(f"Enumeration error: {e}", file=sys.stderr)
        return 2
    except (ClientError, BotoCoreError) as e:
        print(f"Storage error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
