from __future__ import annotations

import os
from pathlib import Path

import pytest

from prewalk.fs import LocalFilesystem
from prewalk.models import FileKind, ScanStats
from prewalk.scanner import Scanner


@pytest.fixture
def local_fs() -> LocalFilesystem:
    return LocalFilesystem()


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"x" * 10)
    (root / "sub" / "b.bin").write_bytes(b"y" * 25)
    (root / "empty").mkdir()
    return root


class TestLocalFileMetadata:
    def test_name_and_path_without_stat(self, local_fs: LocalFilesystem, tmp_path: Path):
        metadata = local_fs.lazy(str(tmp_path / "nope.txt"))

        assert metadata.name == "nope.txt"
        assert metadata.path == str(tmp_path / "nope.txt")

    def test_init_required_before_kind(self, local_fs: LocalFilesystem, sample_tree: Path):
        metadata = local_fs.lazy(str(sample_tree / "a.txt"))

        with pytest.raises(RuntimeError):
            _ = metadata.kind

    def test_regular_file(self, local_fs: LocalFilesystem, sample_tree: Path):
        metadata = local_fs.lazy(str(sample_tree / "a.txt"))
        metadata.init()

        assert metadata.kind is FileKind.REGULAR
        assert metadata.size == 10

    def test_directory_children(self, local_fs: LocalFilesystem, sample_tree: Path):
        metadata = local_fs.lazy(str(sample_tree))
        metadata.init()

        assert metadata.kind is FileKind.DIRECTORY
        assert sorted(child.name for child in metadata.children()) == ["a.txt", "empty", "sub"]

    def test_missing_entry_raises_oserror(self, local_fs: LocalFilesystem, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            local_fs.lazy(str(tmp_path / "missing")).init()

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlink_not_followed(self, local_fs: LocalFilesystem, sample_tree: Path):
        link = sample_tree / "link"
        link.symlink_to(sample_tree / "sub")
        metadata = local_fs.lazy(str(link))
        metadata.init()

        assert metadata.kind is FileKind.OTHER

    def test_absolute(self, local_fs: LocalFilesystem, sample_tree: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(sample_tree)

        metadata = local_fs.lazy("sub").absolute()

        assert metadata.path == str(Path.cwd() / "sub")


class TestLocalScan:
    def test_scan_real_tree(self, local_fs: LocalFilesystem, sample_tree: Path):
        stats = Scanner(local_fs).scan([str(sample_tree)])

        assert stats == ScanStats(files=2, dirs=3, others=0, bytes=35)

    def test_scan_relative_targets(self, local_fs: LocalFilesystem, sample_tree: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(sample_tree)
        paths: list[str] = []
        scanner = Scanner(local_fs)
        scanner.on_result = lambda path, stats: paths.append(path)

        stats = scanner.scan(["."])
        cwd = Path.cwd()

        assert stats == ScanStats(files=2, dirs=2, others=0, bytes=35)
        assert paths == [
            str(cwd / "a.txt"),
            str(cwd / "empty"),
            str(cwd / "sub" / "b.bin"),
            str(cwd / "sub"),
            "",
        ]
