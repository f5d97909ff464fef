import time
from collections.abc import Callable

import typer

from .models import ScanIssue, ScanStats

SIZE_UNITS: list[str] = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]


def format_bytes(num: int) -> str:
    if num < 1024:
        return f"{num} B"

    value: float = float(num)
    for unit in SIZE_UNITS:
        if value < 1024.0 or unit == SIZE_UNITS[-1]:
            return f"{value:.2f} {unit}"
        value /= 1024.0

    return f"{value:.2f} {SIZE_UNITS[-1]}"


class ProgressPrinter:
    """
    `on_result` callback printing the running totals.

    Output is throttled to at most one line per `interval` seconds; the
    final call with an empty path is always printed.
    """

    def __init__(self, interval: float = 0.5, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval: float = interval
        self.clock: Callable[[], float] = clock
        self.last_emit: float | None = None

    def __call__(self, path: str, stats: ScanStats) -> None:
        now: float = self.clock()

        if path and self.last_emit is not None and now - self.last_emit < self.interval:
            return

        self.last_emit = now
        typer.echo(
            f"[{stats.files} files, {stats.dirs} dirs, {stats.others} others, "
            f"{format_bytes(stats.bytes)}] {path or 'done'}",
            err=True,
        )


def print_summary(stats: ScanStats, issues: list[ScanIssue]) -> None:
    typer.echo("Scan result")
    typer.echo("-----------")
    typer.echo(f"Files:               {stats.files}")
    typer.echo(f"Directories:         {stats.dirs}")
    typer.echo(f"Other entries:       {stats.others}")
    typer.echo(f"Total size:          {stats.bytes:,} bytes ({format_bytes(stats.bytes)})")

    if issues:
        typer.echo("\nSkipped entries")
        typer.echo("---------------")
        for issue in issues:
            typer.echo(f"{issue.path}: {issue.message}")
