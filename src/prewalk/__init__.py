from .fs import FileMetadata, Filesystem, LocalFilesystem
from .models import FileKind, ScanIssue, ScanStats
from .scanner import Scanner
from .tree import Tree, TreeError, new_tree

__all__ = [
    "FileKind",
    "FileMetadata",
    "Filesystem",
    "LocalFilesystem",
    "ScanIssue",
    "ScanStats",
    "Scanner",
    "Tree",
    "TreeError",
    "new_tree",
]
