"""Event loop for the interactive cleaner.

One thread (the caller's) consumes a queue of messages and is the only
one that touches the navigator.  Keys are read on a daemon thread and
filesystem work runs on a single background worker; both only post
messages.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import click

from devsweep.core.engine import ScanEngine
from devsweep.core.executor import DeletionExecutor
from devsweep.core.tracker import Tracker
from devsweep.core.tree import TreeError, scan_children
from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.tree_node import TreeNode
from devsweep.tui.keys import read_key
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
from devsweep.tui.navigator import Navigator
from devsweep.tui.render import render
from devsweep.utils import dir_info

log = logging.getLogger(__name__)

TICK_SECONDS = 0.1


class TuiApp:
    """Runs a ``Navigator`` against the terminal until the user quits."""

    def __init__(
        self,
        navigator: Navigator,
        engine: ScanEngine,
        executor: DeletionExecutor,
        options: ScanOptions,
        *,
        source_ids: list[str] | None = None,
        ecosystems: list[str] | None = None,
        tracker: Tracker | None = None,
        key_reader: Callable[[], str] = read_key,
        draw: Callable[[str], None] | None = None,
    ) -> None:
        self.navigator = navigator
        self.engine = engine
        self.executor = executor
        self.options = options
        self.source_ids = source_ids
        self.ecosystems = ecosystems
        self.tracker = tracker
        self._key_reader = key_reader
        self._draw = draw or _draw_terminal
        self._events: queue.Queue[Message] = queue.Queue()
        self._cancel = threading.Event()
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="devsweep-worker")

    def post(self, msg: Message) -> None:
        """Queue a message for the event loop; safe from any thread."""
        self._events.put(msg)

    def run(self) -> None:
        reader = threading.Thread(target=self._read_keys, name="devsweep-keys", daemon=True)
        reader.start()
        nav = self.navigator
        try:
            self._draw(render(nav))
            while not nav.quitting:
                try:
                    msg = self._events.get(timeout=TICK_SECONDS)
                except queue.Empty:
                    if not nav.busy:
                        continue
                    msg = Tick()
                request = nav.handle_message(msg)
                if request is not None:
                    self._submit(request)
                if not nav.quitting:
                    self._draw(render(nav))
        finally:
            self._cancel.set()
            self._worker.shutdown(wait=True)

    def _read_keys(self) -> None:
        while not self._cancel.is_set():
            key = self._key_reader()
            self.post(KeyPressed(key))
            if key == "ctrl+c":
                return

    def _submit(self, request: Request) -> None:
        match request:
            case ExpandRequest(node=node, refresh=refresh):
                self._worker.submit(self._expand, node, refresh)
            case RescanRequest():
                self._worker.submit(self._rescan)
            case DeleteRequest(items=items, dry_run=dry_run):
                self._worker.submit(self._delete, items, dry_run)

    # ── background jobs; they only read their inputs and post results ────

    def _expand(self, node: TreeNode, refresh: bool) -> None:
        try:
            measured = dir_info(node.path) if refresh else None
            children = scan_children(node, self.options.max_depth)
        except TreeError as e:
            self.post(NodeExpanded(node=node, error=e))
        except Exception as e:
            log.exception("Expanding %s failed", node.path)
            self.post(NodeExpanded(node=node, error=e))
        else:
            self.post(NodeExpanded(node=node, children=tuple(children), measured=measured))

    def _rescan(self) -> None:
        try:
            candidates = self.engine.scan_all(
                source_ids=self.source_ids,
                options=self.options,
                ecosystems=self.ecosystems,
            )
        except Exception as e:
            log.exception("Rescan failed")
            self.post(ScanFinished(candidates=(), error=str(e)))
        else:
            self.post(ScanFinished(candidates=tuple(candidates)))

    def _delete(self, items: tuple[Candidate, ...], dry_run: bool) -> None:
        try:
            results = self.executor.execute(
                items,
                dry_run=dry_run,
                on_result=lambda i, r: self.post(ItemCleaned(index=i, result=r)),
                cancel=self._cancel,
            )
        except Exception:
            log.exception("Deletion batch failed")
            results = []
        if self.tracker is not None:
            self.tracker.record(results)
        self.post(DeletionFinished(results=tuple(results)))


def _draw_terminal(screen: str) -> None:
    click.clear()
    click.echo(screen)
