"""Interactive navigation state machine.

The navigator owns every piece of UI state and never touches the
filesystem.  Key presses and completion messages go in; an optional
request for background work comes out.  Keys that make no sense in the
current state are ignored.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Iterable

from devsweep.core.engine import sort_by_size
from devsweep.core.tree import (
    MaxDepthReached,
    attach_children,
    candidate_from_node,
    check_depth,
    clear,
    find_node,
    node_from_candidate,
)
from devsweep.models.candidate import DEFAULT_MAX_DEPTH, Candidate
from devsweep.models.clean_result import CleanResult
from devsweep.models.tree_node import TreeNode
from devsweep.tui import keys
from devsweep.tui.messages import (
    DeleteRequest,
    DeletionFinished,
    ExpandRequest,
    ItemCleaned,
    KeyPressed,
    Message,
    NodeExpanded,
    RescanRequest,
    Request,
    ScanFinished,
    Tick,
)

log = logging.getLogger(__name__)


class State(enum.Enum):
    SCANNING = "scanning"
    SELECTING = "selecting"
    TREE = "tree"
    CONFIRMING = "confirming"
    DELETING = "deleting"
    DONE = "done"


class Navigator:
    """UI state for the interactive cleaner.

    Args:
        candidates: Result of the initial scan.
        dry_run: Whether confirmed deletions only simulate.
        max_depth: Depth budget for tree exploration.
    """

    def __init__(
        self,
        candidates: Iterable[Candidate] = (),
        *,
        dry_run: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.dry_run = dry_run
        self.max_depth = max_depth

        self.state = State.SELECTING
        self.candidates: list[Candidate] = sort_by_size(candidates)
        self.cursor = 0
        self.selected: set[int] = set()

        self.root: TreeNode | None = None
        self.current: TreeNode | None = None
        self.breadcrumb: list[TreeNode] = []
        self.cursor_stack: list[int] = []
        self.tree_selected: set[Path] = set()
        self._flat_cursor = 0

        self.pending: list[Candidate] = []
        self.progress: dict[int, CleanResult] = {}
        self.results: list[CleanResult] = []
        self._return_state = State.SELECTING

        self.busy = False
        self.notice: str | None = None
        self.error: str | None = None
        self.show_help = False
        self.quitting = False
        self.ticks = 0

    # ── queries ───────────────────────────────────────────────────────────

    @property
    def rows(self) -> list[Candidate] | list[TreeNode]:
        """Entries listed in the current view."""
        if self.current is not None:
            return list(self.current.children or ())
        return self.candidates

    def highlighted(self) -> Candidate | TreeNode | None:
        rows = self.rows
        if 0 <= self.cursor < len(rows):
            return rows[self.cursor]
        return None

    def is_selected(self, index: int) -> bool:
        if self.state is State.TREE:
            rows = self.rows
            return 0 <= index < len(rows) and rows[index].path in self.tree_selected
        return index in self.selected

    def selection(self) -> list[Candidate]:
        """Candidates that would be cleaned by pressing enter."""
        if self.state is State.TREE:
            return self._tree_selection()
        return [self.candidates[i] for i in sorted(self.selected) if i < len(self.candidates)]

    def selected_bytes(self) -> int:
        return sum(c.size_bytes for c in self.selection())

    def breadcrumb_names(self) -> list[str]:
        trail = [node.name for node in self.breadcrumb]
        if self.current is not None:
            trail.append(self.current.name)
        return trail

    # ── input ────────────────────────────────────────────────────────────

    def handle_message(self, msg: Message) -> Request | None:
        """Apply one message and return the work it calls for, if any."""
        match msg:
            case KeyPressed(key=key):
                return self.handle_key(key)
            case Tick():
                self.ticks += 1
            case ScanFinished():
                self._on_scan_finished(msg)
            case NodeExpanded():
                self._on_node_expanded(msg)
            case ItemCleaned(index=index, result=result):
                if self.state is State.DELETING:
                    self.progress[index] = result
            case DeletionFinished(results=results):
                self._on_deletion_finished(results)
            case _:
                log.debug("Ignoring unknown message: %r", msg)
        return None

    def handle_key(self, key: str) -> Request | None:
        if key == "ctrl+c":
            self.quitting = True
            return None
        if self.show_help:
            self.show_help = False
            return None

        self.notice = None
        match self.state:
            case State.SCANNING:
                if key == "q":
                    self.quitting = True
            case State.SELECTING:
                return self._key_selecting(key)
            case State.TREE:
                return self._key_tree(key)
            case State.CONFIRMING:
                return self._key_confirming(key)
            case State.DELETING:
                pass
            case State.DONE:
                if key == "q":
                    self.quitting = True
                    return None
                return self._rescan()
        return None

    def _key_selecting(self, key: str) -> Request | None:
        if key in keys.QUIT:
            self.quitting = True
        elif key == "?":
            self.show_help = True
        elif key in keys.UP or key in keys.DOWN:
            self._move(key)
        elif key == "space":
            if self.candidates:
                self.selected ^= {self.cursor}
        elif key == "a":
            self.selected = set(range(len(self.candidates)))
        elif key == "n":
            self.selected.clear()
        elif key == "enter":
            self._confirm(self.selection())
        elif key == "c":
            item = self.highlighted()
            if item is not None:
                self.selected = {self.cursor}
                self._confirm([item])
        elif key in keys.DRILL_DOWN:
            return self._enter_tree()
        return None

    def _key_tree(self, key: str) -> Request | None:
        if key in keys.QUIT:
            self.quitting = True
        elif key == "?":
            self.show_help = True
        elif key in keys.UP or key in keys.DOWN:
            self._move(key)
        elif self.busy:
            # Listing in flight; ignore anything else
            return None
        elif key == "space":
            child = self.highlighted()
            if isinstance(child, TreeNode) and child.is_dir:
                self.tree_selected ^= {child.path}
        elif key == "enter":
            self._confirm(self._tree_selection())
        elif key == "c":
            child = self.highlighted()
            if isinstance(child, TreeNode) and child.is_dir:
                self._confirm([candidate_from_node(child)])
        elif key in keys.DRILL_DOWN:
            return self._drill_down()
        elif key in keys.GO_BACK:
            self._go_back()
        elif key == "r":
            if self.current is not None:
                return self._request_expand(self.current, refresh=True)
        elif key == "esc":
            self._exit_tree()
        return None

    def _key_confirming(self, key: str) -> Request | None:
        if key in ("y", "enter"):
            self.state = State.DELETING
            self.busy = True
            self.progress = {}
            self.results = []
            return DeleteRequest(items=tuple(self.pending), dry_run=self.dry_run)
        if key in ("n", "esc", "q"):
            self.pending = []
            self.state = self._return_state
        return None

    # ── transitions ──────────────────────────────────────────────────────

    def _move(self, key: str) -> None:
        count = len(self.rows)
        if not count:
            return
        if key in keys.UP:
            self.cursor = max(0, self.cursor - 1)
        else:
            self.cursor = min(count - 1, self.cursor + 1)

    def _confirm(self, items: list[Candidate]) -> None:
        if not items:
            return
        self.pending = items
        self._return_state = self.state
        self.state = State.CONFIRMING

    def _enter_tree(self) -> Request | None:
        item = self.highlighted()
        if not isinstance(item, Candidate):
            return None
        root = node_from_candidate(item)
        self._flat_cursor = self.cursor
        self.state = State.TREE
        self.root = self.current = root
        self.breadcrumb.clear()
        self.cursor_stack.clear()
        self.tree_selected.clear()
        self.cursor = 0
        return self._request_expand(root)

    def _drill_down(self) -> Request | None:
        child = self.highlighted()
        if not isinstance(child, TreeNode) or not child.is_dir or self.current is None:
            return None
        try:
            check_depth(child, self.max_depth)
        except MaxDepthReached:
            self.notice = f"Maximum depth ({self.max_depth}) reached"
            return None
        self._push()
        self.current = child
        self.cursor = 0
        if child.needs_scanning():
            return self._request_expand(child)
        return None

    def _go_back(self) -> None:
        if self.breadcrumb:
            self._pop()
        else:
            self._exit_tree()

    def _exit_tree(self) -> None:
        self.state = State.SELECTING
        self.root = self.current = None
        self.breadcrumb.clear()
        self.cursor_stack.clear()
        self.tree_selected.clear()
        self.busy = False
        self.cursor = min(self._flat_cursor, max(len(self.candidates) - 1, 0))

    def _push(self) -> None:
        assert self.current is not None
        self.breadcrumb.append(self.current)
        self.cursor_stack.append(self.cursor)

    def _pop(self) -> None:
        self.current = self.breadcrumb.pop()
        self.cursor = self.cursor_stack.pop()

    def _request_expand(self, node: TreeNode, refresh: bool = False) -> ExpandRequest:
        self.busy = True
        self.error = None
        return ExpandRequest(node=node, refresh=refresh)

    def _rescan(self) -> RescanRequest:
        self.state = State.SCANNING
        self.busy = True
        self.error = None
        self.results = []
        self.progress = {}
        return RescanRequest()

    def _tree_selection(self) -> list[Candidate]:
        nodes = [find_node(self.root, path) for path in self.tree_selected]
        chosen = sorted((n for n in nodes if n is not None), key=lambda n: str(n.path))
        # Selecting a folder covers everything beneath it
        kept: list[TreeNode] = []
        for node in chosen:
            if not any(k.path in node.path.parents for k in kept):
                kept.append(node)
        return [candidate_from_node(n) for n in kept]

    # ── background completions ───────────────────────────────────────────

    def _on_scan_finished(self, msg: ScanFinished) -> None:
        if self.state is not State.SCANNING:
            return
        self.busy = False
        self.candidates = sort_by_size(msg.candidates)
        self.selected.clear()
        self.cursor = 0
        self.error = msg.error
        self.state = State.SELECTING

    def _on_node_expanded(self, msg: NodeExpanded) -> None:
        if self.state is not State.TREE or find_node(self.root, msg.node.path) is not msg.node:
            return
        self.busy = False
        node = msg.node

        if msg.error is not None:
            self.error = str(msg.error)
            clear(node)
            if node is self.current:
                self._go_back()
            return

        if msg.measured is not None:
            node.size_bytes, node.file_count = msg.measured
        attach_children(node, list(msg.children))
        # Drop selections that vanished with the old listing
        self.tree_selected = {p for p in self.tree_selected if find_node(self.root, p) is not None}
        if node is self.current:
            self.cursor = min(self.cursor, max(len(node.children or ()) - 1, 0))

    def _on_deletion_finished(self, results: tuple[CleanResult, ...]) -> None:
        if self.state is not State.DELETING:
            return
        self.busy = False
        self.results = list(results)
        self.pending = []
        self.selected.clear()
        if self.current is not None:
            self._exit_tree()
        self.state = State.DONE
