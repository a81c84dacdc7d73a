"""Lazily expanded directory tree node."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, eq=False)
class TreeNode:
    """One file or directory in the exploration tree.

    ``children`` stays ``None`` until the node is expanded; expansion is
    the only operation that fills it and sets ``scanned``.
    """

    path: Path
    name: str
    size_bytes: int
    is_dir: bool
    ecosystem: str = ""
    children: list[TreeNode] | None = None
    scanned: bool = False
    depth: int = 0
    file_count: int = 0

    def needs_scanning(self) -> bool:
        return self.is_dir and not self.scanned

    def has_children(self) -> bool:
        return bool(self.children)
