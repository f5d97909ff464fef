from __future__ import annotations

import posixpath
from pathlib import PurePosixPath

import pytest

from prewalk.fs import FileMetadata
from prewalk.models import FileKind, ScanStats


class FakeFileMetadata:
    def __init__(self, fs: FakeFilesystem, path: str) -> None:
        self.fs = fs
        self._path = path
        self._initialized = False

    @property
    def name(self) -> str:
        return posixpath.basename(self._path) or self._path

    @property
    def path(self) -> str:
        return self._path

    def init(self) -> None:
        self.fs.stat_calls.append(self._path)
        if self._path in self.fs.stat_errors:
            raise self.fs.stat_errors[self._path]
        if self._path not in self.fs.entries:
            raise FileNotFoundError(2, "No such file or directory", self._path)
        self._initialized = True

    @property
    def kind(self) -> FileKind:
        assert self._initialized, f"{self._path} read before init()"
        return self.fs.entries[self._path][0]

    @property
    def size(self) -> int:
        assert self._initialized, f"{self._path} read before init()"
        return self.fs.entries[self._path][1]

    def children(self) -> list[FileMetadata]:
        return [self.fs.lazy(self.fs.join(self._path, name)) for name in self.fs.listdir(self._path)]

    def absolute(self) -> FileMetadata:
        return self.fs.lazy(self.fs.abspath(self._path))


class FakeFilesystem:
    """
    In-memory POSIX filesystem.

    Directory listings keep insertion order so that tests can check that the
    scanner sorts them. Stat and listing failures are injected per path.
    """

    def __init__(self, cwd: str = "/work") -> None:
        self.cwd = cwd
        self.entries: dict[str, tuple[FileKind, int]] = {"/": (FileKind.DIRECTORY, 0)}
        self.stat_errors: dict[str, OSError] = {}
        self.list_errors: dict[str, OSError] = {}
        self.stat_calls: list[str] = []
        self.add_dir(cwd)

    def _add(self, path: str, kind: FileKind, size: int) -> None:
        parent = posixpath.dirname(path)
        if parent != path and parent not in self.entries:
            self.add_dir(parent)
        self.entries[path] = (kind, size)

    def add_file(self, path: str, size: int = 0) -> None:
        self._add(path, FileKind.REGULAR, size)

    def add_dir(self, path: str) -> None:
        self._add(path, FileKind.DIRECTORY, 0)

    def add_other(self, path: str) -> None:
        self._add(path, FileKind.OTHER, 0)

    def clean(self, path: str) -> str:
        return posixpath.normpath(path)

    def join(self, *parts: str) -> str:
        return posixpath.join(*parts)

    def abspath(self, path: str) -> str:
        return posixpath.normpath(posixpath.join(self.cwd, path))

    def parts(self, path: str) -> list[str]:
        return list(PurePosixPath(path).parts)

    def listdir(self, path: str) -> list[str]:
        path = self.abspath(path)
        if path in self.list_errors:
            raise self.list_errors[path]
        if self.entries.get(path, (None, 0))[0] is not FileKind.DIRECTORY:
            raise NotADirectoryError(20, "Not a directory", path)
        return [
            posixpath.basename(entry)
            for entry in self.entries
            if entry != path and posixpath.dirname(entry) == path
        ]

    def lazy(self, path: str) -> FileMetadata:
        return FakeFileMetadata(self, path)


class ResultRecorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ScanStats]] = []

    def __call__(self, path: str, stats: ScanStats) -> None:
        self.calls.append((path, stats))

    @property
    def paths(self) -> list[str]:
        return [path for path, _ in self.calls]


@pytest.fixture
def fake_fs() -> FakeFilesystem:
    return FakeFilesystem()


@pytest.fixture
def recorder() -> ResultRecorder:
    return ResultRecorder()
