import fnmatch
import logging
from collections.abc import Iterable

from .fs import FileMetadata
from .models import FileKind, ScanIssue
from .scanner import ErrorFunc, SelectByNameFunc, SelectFunc

logger: logging.Logger = logging.getLogger(__name__)

SIZE_SUFFIXES: dict[str, int] = {
    "K": 1024,
    "M": 1024 * 1024,
    "G": 1024 * 1024 * 1024,
    "T": 1024 * 1024 * 1024 * 1024,
}


def parse_size(value: str) -> int:
    """Parse a size in bytes, optionally with a K, M, G or T suffix."""
    # Normalize
    text: str = value.strip().upper()
    if not text:
        raise ValueError("Size must not be empty.")

    last_char: str = text[-1]
    if last_char in SIZE_SUFFIXES:
        number: str = text[:-1]
        factor: int = SIZE_SUFFIXES[last_char]
    else:
        number = text
        factor = 1

    try:
        base: int = int(number)
    except ValueError:
        raise ValueError(f"Invalid size {value!r}. Only K, M, G and T are allowed suffixes.")

    if base < 0:
        raise ValueError(f"Invalid size {value!r}. Size must not be negative.")

    return base * factor


def exclude_by_name(patterns: Iterable[str]) -> SelectByNameFunc:
    """
    Return a name filter rejecting every name that matches one of `patterns`.

    Patterns use shell wildcards and are matched against the bare name.
    """
    compiled: list[str] = list(patterns)

    def select_by_name(name: str) -> bool:
        for pattern in compiled:
            if fnmatch.fnmatchcase(name, pattern):
                logger.debug("excluding %s, matches %r", name, pattern)
                return False
        return True

    return select_by_name


def exclude_larger_than(limit: int) -> SelectFunc:
    """Return a filter rejecting regular files larger than `limit` bytes."""

    def select(metadata: FileMetadata) -> bool:
        if metadata.kind is FileKind.REGULAR and metadata.size > limit:
            logger.debug("excluding %s, size %d exceeds %d", metadata.path, metadata.size, limit)
            return False
        return True

    return select


def skip_errors(issues: list[ScanIssue] | None = None) -> ErrorFunc:
    """
    Return an error handler that skips the failing entry.

    Each error is logged as a warning and, when `issues` is given,
    recorded there.
    """

    def on_error(path: str, error: BaseException) -> BaseException | None:
        logger.warning("skipping %s: %s", path, error)
        if issues is not None:
            issues.append(ScanIssue(path=path, message=str(error)))
        return None

    return on_error
