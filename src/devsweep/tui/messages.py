"""Typed messages exchanged between the event loop and background work.

Requests flow from the navigator to the event loop, which runs them off
the UI thread.  Messages flow back into the loop through its queue; the
navigator is the only thing that applies them.
"""

from __future__ import annotations

from dataclasses import dataclass

from devsweep.models.candidate import Candidate
from devsweep.models.clean_result import CleanResult
from devsweep.models.tree_node import TreeNode


# ── requests ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ExpandRequest:
    """List one level under ``node``; ``refresh`` also re-measures it."""

    node: TreeNode
    refresh: bool = False


@dataclass(frozen=True)
class RescanRequest:
    """Run every enabled scan source again."""


@dataclass(frozen=True)
class DeleteRequest:
    items: tuple[Candidate, ...]
    dry_run: bool


Request = ExpandRequest | RescanRequest | DeleteRequest


# ── messages ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Tick:
    """Periodic wake-up used to animate busy indicators."""


@dataclass(frozen=True)
class ScanFinished:
    candidates: tuple[Candidate, ...]
    error: str | None = None


@dataclass(frozen=True)
class NodeExpanded:
    """Result of an ``ExpandRequest``.

    On success ``children`` holds the new listing and, for a refresh,
    ``measured`` the node's new ``(size_bytes, file_count)``.
    """

    node: TreeNode
    children: tuple[TreeNode, ...] = ()
    error: Exception | None = None
    measured: tuple[int, int] | None = None


@dataclass(frozen=True)
class ItemCleaned:
    index: int
    result: CleanResult


@dataclass(frozen=True)
class DeletionFinished:
    results: tuple[CleanResult, ...]


Message = KeyPressed | Tick | ScanFinished | NodeExpanded | ItemCleaned | DeletionFinished
