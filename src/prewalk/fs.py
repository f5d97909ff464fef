import os
import stat as statmod
from pathlib import PurePath
from typing import Protocol

from .models import FileKind


class FileMetadata(Protocol):
    """
    One filesystem entry whose metadata is fetched on demand.

    `name` and `path` are always available. `kind`, `size` and
    `children()` are only meaningful after `init()` has been called.
    """

    @property
    def name(self) -> str: ...

    @property
    def path(self) -> str: ...

    def init(self) -> None: ...

    @property
    def kind(self) -> FileKind: ...

    @property
    def size(self) -> int: ...

    def children(self) -> list["FileMetadata"]: ...

    def absolute(self) -> "FileMetadata": ...


class Filesystem(Protocol):
    def clean(self, path: str) -> str: ...

    def join(self, *parts: str) -> str: ...

    def abspath(self, path: str) -> str: ...

    def parts(self, path: str) -> list[str]: ...

    def listdir(self, path: str) -> list[str]: ...

    def lazy(self, path: str) -> FileMetadata: ...


class LocalFileMetadata:
    def __init__(self, fs: "LocalFilesystem", path: str) -> None:
        self._fs: LocalFilesystem = fs
        self._path: str = path
        self._stat: os.stat_result | None = None

    def __repr__(self) -> str:
        return f"LocalFileMetadata({self._path!r})"

    @property
    def name(self) -> str:
        return os.path.basename(self._path.rstrip(os.sep)) or self._path

    @property
    def path(self) -> str:
        return self._path

    def init(self) -> None:
        if self._stat is not None:
            return

        # Symlinks are reported as such, never followed.
        self._stat = os.lstat(self._path)

    def _require_stat(self) -> os.stat_result:
        if self._stat is None:
            raise RuntimeError(f"metadata for {self._path} has not been initialized")
        return self._stat

    @property
    def kind(self) -> FileKind:
        mode: int = self._require_stat().st_mode

        if statmod.S_ISREG(mode):
            return FileKind.REGULAR
        if statmod.S_ISDIR(mode):
            return FileKind.DIRECTORY
        return FileKind.OTHER

    @property
    def size(self) -> int:
        return self._require_stat().st_size

    def children(self) -> list[FileMetadata]:
        return [self._fs.lazy(self._fs.join(self._path, name)) for name in self._fs.listdir(self._path)]

    def absolute(self) -> FileMetadata:
        return self._fs.lazy(self._fs.abspath(self._path))


class LocalFilesystem:
    """Access to the local filesystem through `os`."""

    def clean(self, path: str) -> str:
        return os.path.normpath(path)

    def join(self, *parts: str) -> str:
        return os.path.join(*parts)

    def abspath(self, path: str) -> str:
        return os.path.abspath(path)

    def parts(self, path: str) -> list[str]:
        return list(PurePath(path).parts)

    def listdir(self, path: str) -> list[str]:
        with os.scandir(path) as it:
            return [entry.name for entry in it]

    def lazy(self, path: str) -> FileMetadata:
        return LocalFileMetadata(self, path)
