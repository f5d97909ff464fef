import logging
import signal
import threading
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from types import FrameType
from typing import Annotated

import typer

from .config import CONFIG_FILENAME, ScanConfig
from .filters import parse_size
from .fs import LocalFilesystem
from .models import ScanIssue, ScanStats
from .report import ProgressPrinter, print_summary
from .scanner import Scanner
from .tree import TreeError

logger: logging.Logger = logging.getLogger(__name__)


def _installed_version() -> str:
    try:
        return version(distribution_name="prewalk")
    except PackageNotFoundError:
        return "unknown (package not installed)"


app: typer.Typer = typer.Typer(
    help=f"prewalk: count what a backup would read\n\nVersion: {_installed_version()}",
)


def print_version(is_version: bool) -> None:
    """
    Callback for the global --version / -V option.

    Typer passes False when the flag is absent, in which case normal
    command execution continues. Otherwise the installed version is
    printed and the program exits early.
    """
    if not is_version:
        return

    typer.echo(_installed_version())
    raise typer.Exit()


def parse_size_option(value: str | None) -> int | None:
    if value is None:
        return None

    try:
        return parse_size(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def run_scan(cfg: ScanConfig, progress: bool) -> tuple[ScanStats, list[ScanIssue], bool]:
    """
    Scan the configured targets on the local filesystem.

    Ctrl-C stops the scan gracefully; the partial statistics are returned
    and the last element of the result tuple tells whether that happened.
    """
    issues: list[ScanIssue] = []
    scanner: Scanner = Scanner(LocalFilesystem())
    cfg.apply(scanner, issues)

    if progress:
        scanner.on_result = ProgressPrinter()

    cancel: threading.Event = threading.Event()

    def request_cancel(signum: int, frame: FrameType | None) -> None:
        logger.info("interrupted, stopping scan")
        cancel.set()

    previous_handler = signal.signal(signal.SIGINT, request_cancel)
    try:
        stats: ScanStats = scanner.scan(cfg.targets, cancel)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    return stats, issues, cancel.is_set()


@app.command()
def init(
    targets: list[str],
    exclude: Annotated[list[str] | None, typer.Option(help="Name pattern to exclude, may be repeated.")] = None,
    exclude_larger_than: Annotated[
        str | None, typer.Option(help="Size in bytes, or with suffix K/M/G/T (e.g. 32K, 4M, 1G)")
    ] = None,
    ignore_errors: Annotated[bool, typer.Option()] = False,
    config: Annotated[Path, typer.Option()] = CONFIG_FILENAME,
    force: Annotated[bool, typer.Option()] = False,
) -> None:
    """
    Write a scan configuration.

    The configuration stores the targets and the selection rules so that
    later runs of `prewalk scan` need no arguments.
    """
    if config.exists() and not force:
        typer.echo("Config file already exists. Use --force to overwrite.")
        raise typer.Exit(code=1)

    cfg: ScanConfig = ScanConfig(
        targets=targets,
        excludes=exclude or [],
        exclude_larger_than=parse_size_option(exclude_larger_than),
        ignore_errors=ignore_errors,
    )

    cfg.save(config)
    typer.echo(f"Config written to {config}")


@app.command()
def scan(
    targets: Annotated[list[str] | None, typer.Argument()] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Name pattern to exclude, may be repeated.")] = None,
    exclude_larger_than: Annotated[
        str | None, typer.Option(help="Size in bytes, or with suffix K/M/G/T (e.g. 32K, 4M, 1G)")
    ] = None,
    ignore_errors: Annotated[bool, typer.Option(help="Skip entries that cannot be read.")] = False,
    progress: Annotated[bool, typer.Option(help="Print running totals while scanning.")] = False,
    config: Annotated[Path, typer.Option()] = CONFIG_FILENAME,
) -> None:
    """Scan the given targets, or the configured ones, and print statistics."""
    try:
        if targets:
            cfg: ScanConfig = ScanConfig(targets=targets)
        else:
            cfg = ScanConfig.load(config)
    except (FileNotFoundError, ValueError, TypeError) as e:
        typer.echo(e, err=True)
        raise typer.Exit(code=1)

    if exclude:
        cfg.excludes = cfg.excludes + exclude
    if exclude_larger_than is not None:
        cfg.exclude_larger_than = parse_size_option(exclude_larger_than)
    if ignore_errors:
        cfg.ignore_errors = True

    try:
        stats, issues, interrupted = run_scan(cfg, progress)
    except TreeError as e:
        typer.echo(f"Invalid targets: {e}", err=True)
        raise typer.Exit(code=1)
    except OSError as e:
        typer.echo(f"Scan failed: {e}", err=True)
        raise typer.Exit(code=1)

    print_summary(stats, issues)
    if interrupted:
        typer.echo("\nScan was interrupted, the result is incomplete.")
        raise typer.Exit(code=130)


@app.command(name="version")
def version_cmd() -> None:
    """Print the installed version of prewalk."""
    print_version(True)


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=print_version,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log informational messages.")] = False,
    debug: Annotated[bool, typer.Option(help="Log debug messages.")] = False,
) -> None:
    """
    Global options for prewalk. All subcommands run after this callback
    unless --version is used.
    """
    level: int = logging.WARNING
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO

    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


if __name__ == "__main__":
    app()
