"""Lazy directory tree used to explore a candidate one level at a time."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from devsweep.models.candidate import Candidate
from devsweep.models.tree_node import TreeNode
from devsweep.utils import dir_info

log = logging.getLogger(__name__)


class TreeError(Exception):
    """Base class for tree expansion failures."""

    def __init__(self, node: TreeNode, message: str) -> None:
        super().__init__(message)
        self.node = node


class MaxDepthReached(TreeError):
    """Raised when a node sits at or beyond the depth budget."""

    def __init__(self, node: TreeNode, max_depth: int) -> None:
        super().__init__(node, f"max depth {max_depth} reached at {node.path}")
        self.max_depth = max_depth


class ReadFailure(TreeError):
    """Raised when a directory's direct children cannot be listed."""


def node_from_candidate(candidate: Candidate) -> TreeNode:
    """Convert a scan candidate into an unexpanded depth-0 node."""
    return TreeNode(
        path=candidate.path,
        name=candidate.path.name or str(candidate.path),
        size_bytes=candidate.size_bytes,
        is_dir=True,
        ecosystem=candidate.ecosystem,
        depth=0,
        file_count=candidate.file_count,
    )


def candidate_from_node(node: TreeNode) -> Candidate:
    """Convert a tree node back into a candidate for deletion."""
    return Candidate(
        path=node.path,
        label=node.name,
        size_bytes=node.size_bytes,
        file_count=node.file_count,
        ecosystem=node.ecosystem,
    )


def check_depth(node: TreeNode, max_depth: int) -> None:
    """Raise ``MaxDepthReached`` if *node* may not be expanded."""
    if node.depth >= max_depth:
        raise MaxDepthReached(node, max_depth)


def scan_children(node: TreeNode, max_depth: int) -> list[TreeNode]:
    """List the immediate children of *node* without attaching them.

    Directories are sized with ``dir_info``; symlinks are left out.
    Children are ordered largest first, then by name.  Safe to call from
    a worker thread: *node* itself is only read.

    Raises:
        MaxDepthReached: *node* is at the depth budget.
        ReadFailure: *node* is not a directory or cannot be listed.
    """
    check_depth(node, max_depth)
    if not node.is_dir:
        raise ReadFailure(node, f"not a directory: {node.path}")

    try:
        with os.scandir(node.path) as it:
            entries = list(it)
    except OSError as exc:
        raise ReadFailure(node, f"failed to read directory {node.path}: {exc.strerror or exc}") from exc

    children: list[TreeNode] = []
    for entry in entries:
        try:
            if entry.is_symlink():
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
            if is_dir:
                size, count = dir_info(entry.path)
            else:
                size, count = entry.stat(follow_symlinks=False).st_size, 1
        except OSError:
            log.debug("Cannot access: %s", entry.path)
            continue
        children.append(
            TreeNode(
                path=Path(entry.path),
                name=entry.name,
                size_bytes=size,
                is_dir=is_dir,
                ecosystem=node.ecosystem,
                depth=node.depth + 1,
                file_count=count,
            )
        )
    children.sort(key=lambda c: (-c.size_bytes, c.name))
    return children


def attach_children(node: TreeNode, children: list[TreeNode]) -> TreeNode:
    """Install freshly scanned *children* on *node* and mark it scanned."""
    node.children = children
    node.scanned = True
    return node


def expand(node: TreeNode, max_depth: int) -> TreeNode:
    """Populate *node* with one level of children.

    Already scanned nodes are returned untouched; use ``refresh`` to
    rebuild them.
    """
    if node.scanned:
        return node
    return attach_children(node, scan_children(node, max_depth))


def clear(node: TreeNode) -> TreeNode:
    """Drop *node*'s children so it will be listed again."""
    node.children = None
    node.scanned = False
    return node


def remeasure(node: TreeNode) -> TreeNode:
    """Recompute *node*'s own size and file count."""
    if node.is_dir:
        node.size_bytes, node.file_count = dir_info(node.path)
    return node


def refresh(node: TreeNode, max_depth: int) -> TreeNode:
    """Discard *node*'s subtree, re-measure it and expand it again."""
    clear(node)
    remeasure(node)
    return expand(node, max_depth)


def find_node(root: TreeNode | None, path: Path | str) -> TreeNode | None:
    """Depth-first search of the expanded tree for *path*."""
    if root is None:
        return None
    target = Path(path)
    if root.path == target:
        return root
    for child in root.children or ():
        found = find_node(child, target)
        if found is not None:
            return found
    return None
