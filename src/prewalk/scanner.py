import logging
from collections.abc import Callable, Sequence
from typing import Protocol, cast

from .fs import FileMetadata, Filesystem
from .models import FileKind, ScanStats
from .tree import Tree, TreeError, new_tree, resolve_relative_targets

logger: logging.Logger = logging.getLogger(__name__)

SelectByNameFunc = Callable[[str], bool]
SelectFunc = Callable[[FileMetadata], bool]
ErrorFunc = Callable[[str, BaseException], BaseException | None]
ResultFunc = Callable[[str, ScanStats], None]


class CancelToken(Protocol):
    """Anything with an `is_set()` method, usually a `threading.Event`."""

    def is_set(self) -> bool: ...


def select_all_names(name: str) -> bool:
    return True


def select_all(metadata: FileMetadata) -> bool:
    return True


def propagate_error(path: str, error: BaseException) -> BaseException | None:
    return error


def ignore_result(path: str, stats: ScanStats) -> None:
    return None


def _cancelled(cancel: CancelToken | None) -> bool:
    return cancel is not None and cancel.is_set()


class Scanner:
    """
    Walk the targets and report cumulative statistics.

    The behaviour is controlled by four policies which can be replaced
    after construction:

    select_by_name
        Called with the bare name before the entry is stat'ed. Returning
        False skips the entry and, for directories, everything below it.
    select
        Called with the initialized metadata. Returning False skips it.
    on_error
        Called when stat'ing or listing an entry fails. The returned
        exception is raised out of `scan`; returning None skips the entry.
    on_result
        Called after each entry with its path and the statistics so far,
        and once at the end with an empty path and the final statistics.
    """

    def __init__(self, fs: Filesystem) -> None:
        self.fs: Filesystem = fs
        self.select_by_name: SelectByNameFunc = select_all_names
        self.select: SelectFunc = select_all
        self.on_error: ErrorFunc = propagate_error
        self.on_result: ResultFunc = ignore_result

    def scan(self, targets: Sequence[str], cancel: CancelToken | None = None) -> ScanStats:
        """
        Scan all targets and return the final statistics.

        A set `cancel` token stops the scan early; the statistics gathered
        until then are returned and no exception is raised.
        """
        logger.debug("start scan for %s", list(targets))
        if not targets:
            raise TreeError("no targets given")

        clean_targets: list[str] = resolve_relative_targets(self.fs, targets)
        logger.debug("clean targets %s", clean_targets)

        tree: Tree = new_tree(self.fs, clean_targets)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("tree leaves %s", [leaf.path for leaf in tree.leaves()])

        stats: ScanStats = self.scan_tree(ScanStats(), tree, cancel)

        self.on_result("", stats)
        logger.debug("result: %s", stats)
        return stats

    def scan_tree(self, stats: ScanStats, tree: Tree, cancel: CancelToken | None = None) -> ScanStats:
        if _cancelled(cancel):
            return stats

        if tree.is_leaf:
            target: FileMetadata = cast(FileMetadata, tree.metadata)
            return self.scan_entry(stats, target.absolute(), cancel)

        for name in tree.node_names():
            stats = self.scan_tree(stats, tree.nodes[name], cancel)

            if _cancelled(cancel):
                return stats

        return stats

    def scan_entry(self, stats: ScanStats, target: FileMetadata, cancel: CancelToken | None = None) -> ScanStats:
        if _cancelled(cancel):
            return stats

        # Exclude by name first to save the stat call.
        if not self.select_by_name(target.name):
            return stats

        try:
            target.init()
        except OSError as e:
            return self._handle_error(stats, target.path, e)

        if not self.select(target):
            return stats

        kind: FileKind = target.kind
        if kind is FileKind.REGULAR:
            stats = stats.with_file(target.size)
        elif kind is FileKind.DIRECTORY:
            try:
                children: list[FileMetadata] = target.children()
            except OSError as e:
                return self._handle_error(stats, target.path, e)

            for child in sorted(children, key=lambda c: c.name):
                stats = self.scan_entry(stats, child, cancel)

            stats = stats.with_dir()
        else:
            stats = stats.with_other()

        self.on_result(target.path, stats)
        return stats

    def _handle_error(self, stats: ScanStats, path: str, error: OSError) -> ScanStats:
        fatal: BaseException | None = self.on_error(path, error)
        if fatal is not None:
            raise fatal

        logger.debug("skipping %s: %s", path, error)
        return stats
