import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from .fs import FileMetadata, Filesystem

logger: logging.Logger = logging.getLogger(__name__)

RELATIVE_COMPONENTS: frozenset[str] = frozenset({".", ".."})

# Built up while merging targets: a str is a leaf (the target path), a dict
# holds the children of an internal node.
_PendingNode = dict[str, "str | _PendingNode"]


class TreeError(ValueError):
    pass


@dataclass(frozen=True)
class Tree:
    """
    Merged representation of a set of targets.

    A leaf carries the metadata of exactly one target; an internal node maps
    path component names to subtrees.
    """

    metadata: FileMetadata | None = None
    nodes: Mapping[str, "Tree"] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_leaf(self) -> bool:
        return self.metadata is not None

    def node_names(self) -> list[str]:
        return sorted(self.nodes)

    def leaves(self) -> list[FileMetadata]:
        """Return the metadata of all leaves in traversal order."""
        if self.metadata is not None:
            return [self.metadata]

        result: list[FileMetadata] = []
        for name in self.node_names():
            result.extend(self.nodes[name].leaves())
        return result


def path_components(fs: Filesystem, path: str, include_relative: bool) -> list[str]:
    """
    Split `path` into its components.

    With `include_relative` false, leading "." and ".." components are
    dropped, so a purely relative path such as "../.." yields no components.
    """
    components: list[str] = fs.parts(path)

    if include_relative:
        return components

    while components and components[0] in RELATIVE_COMPONENTS:
        components = components[1:]

    return components


def resolve_relative_targets(fs: Filesystem, targets: Sequence[str]) -> list[str]:
    """
    Clean all targets and replace purely relative ones by their contents.

    A target like "." or "../.." would otherwise end up as an unnamed entry,
    so it is replaced with its directory entries in sorted order.
    """
    result: list[str] = []

    for target in targets:
        if not target:
            raise TreeError("empty target path")

        cleaned: str = fs.clean(target)
        if path_components(fs, cleaned, include_relative=False):
            result.append(cleaned)
            continue

        logger.debug("replacing %r with the entries of %r", target, cleaned)
        try:
            entries: list[str] = fs.listdir(cleaned)
        except OSError as e:
            raise TreeError(f"cannot read target directory {cleaned}: {e}") from e

        for name in sorted(entries):
            result.append(fs.join(cleaned, name))

    return result


def _insert(node: _PendingNode, target: str, components: list[str]) -> None:
    name: str = components[0]
    existing: str | _PendingNode | None = node.get(name)

    if isinstance(existing, str):
        logger.debug("target %r is already covered by %r", target, existing)
        return

    if len(components) == 1:
        # A target replaces any targets below it.
        node[name] = target
        return

    if existing is None:
        existing = {}
        node[name] = existing

    _insert(existing, target, components[1:])


def _freeze(fs: Filesystem, node: str | _PendingNode) -> Tree:
    if isinstance(node, str):
        return Tree(metadata=fs.lazy(node))

    return Tree(nodes=MappingProxyType({name: _freeze(fs, child) for name, child in node.items()}))


def new_tree(fs: Filesystem, targets: Sequence[str]) -> Tree:
    """
    Build the merged tree for `targets`.

    Targets sharing a path prefix share internal nodes. Duplicate targets
    collapse into one leaf, and a target below another target is dropped.
    An empty `targets` yields an empty tree.
    """
    root: _PendingNode = {}

    for target in targets:
        components: list[str] = path_components(fs, target, include_relative=True)
        if not components:
            raise TreeError(f"invalid target path {target!r}")

        _insert(root, target, components)

    return _freeze(fs, root)
