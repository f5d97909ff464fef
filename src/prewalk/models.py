from dataclasses import dataclass, replace
from enum import Enum


class FileKind(Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ScanStats:
    """
    Cumulative counters of a scan.

    Instances are immutable snapshots. Every update returns a new
    instance, so a snapshot handed to a callback never changes afterwards.
    """

    files: int = 0
    dirs: int = 0
    others: int = 0
    bytes: int = 0

    def with_file(self, size: int) -> "ScanStats":
        return replace(self, files=self.files + 1, bytes=self.bytes + size)

    def with_dir(self) -> "ScanStats":
        return replace(self, dirs=self.dirs + 1)

    def with_other(self) -> "ScanStats":
        return replace(self, others=self.others + 1)

    def __add__(self, other: "ScanStats") -> "ScanStats":
        return ScanStats(
            files=self.files + other.files,
            dirs=self.dirs + other.dirs,
            others=self.others + other.others,
            bytes=self.bytes + other.bytes,
        )

    def delta(self, previous: "ScanStats") -> "ScanStats":
        """Return what was added since `previous`."""
        return ScanStats(
            files=self.files - previous.files,
            dirs=self.dirs - previous.dirs,
            others=self.others - previous.others,
            bytes=self.bytes - previous.bytes,
        )


@dataclass(frozen=True, slots=True)
class ScanIssue:
    path: str
    message: str
