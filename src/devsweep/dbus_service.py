"""D-Bus service for GUI communication.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "as" and "(ss)" are D-Bus protocol types, not Python syntax.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from devsweep.core.audit import AuditLog
from devsweep.core.engine import ScanEngine, sort_by_size
from devsweep.core.executor import DeletionExecutor
from devsweep.core.policy import PathPolicy
from devsweep.core.registry import SourceRegistry
from devsweep.core.source_loader import load_sources
from devsweep.core.tracker import Tracker
from devsweep.core.tree import TreeError, scan_children
from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.tree_node import TreeNode
from devsweep.settings import Settings
from devsweep.utils import dir_info

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.devsweep"
_OBJECT_PATH = "/io/github/devsweep"
_INTERFACE = "io.github.devsweep.Manager"


# noinspection PyPep8Naming
class DevsweepDBusService(ServiceInterface):
    """D-Bus service interface for devsweep."""

    def __init__(self, audit: AuditLog, settings: Settings | None = None) -> None:
        super().__init__(_INTERFACE)
        self._settings = settings or Settings()
        self._registry = SourceRegistry()
        load_sources(self._registry)
        self._engine = ScanEngine(self._registry)
        self._tracker = Tracker()
        self._policy = PathPolicy(extra_allow=self._settings.string_list("policy.extra_allow") or ())
        self._executor = DeletionExecutor(self._policy, audit)

    def _options(self) -> ScanOptions:
        project_dirs = self._settings.string_list("scan.project_dirs")
        return ScanOptions.for_home(
            max_depth=self._settings.max_depth(),
            project_dirs=tuple(project_dirs) if project_dirs is not None else None,
        )

    @method()
    def ListSources(self) -> "s":  # type: ignore[override]
        """List all available scan sources as JSON."""
        data = [
            {
                "id": s.id,
                "name": s.name,
                "ecosystem": s.ecosystem,
                "description": s.description,
            }
            for s in self._registry.get_available(self._options())
        ]
        return json.dumps(data)

    @method()
    def Scan(self, source_ids: "as") -> "s":  # type: ignore[override]
        """Scan the given sources (all when empty), returning candidates as JSON."""
        ids = list(source_ids) if source_ids else None

        def progress(source_id: str, status: str) -> None:
            self.ScanProgress(source_id, status)

        candidates = sort_by_size(
            self._engine.scan_all(source_ids=ids, options=self._options(), on_progress=progress)
        )
        data = [
            {
                "path": str(c.path),
                "label": c.label,
                "ecosystem": c.ecosystem,
                "size_bytes": c.size_bytes,
                "file_count": c.file_count,
            }
            for c in candidates
        ]
        return json.dumps(data)

    @method()
    def ScanDirectory(self, path: "s", depth: "i") -> "s":  # type: ignore[override]
        """List one level under *path*, which sits *depth* levels below a candidate."""
        target = Path(path)
        node = TreeNode(path=target, name=target.name, size_bytes=0, is_dir=target.is_dir(), depth=depth)
        try:
            children = scan_children(node, self._settings.max_depth())
        except TreeError as e:
            return json.dumps({"error": str(e)})
        data = [
            {
                "path": str(c.path),
                "name": c.name,
                "size_bytes": c.size_bytes,
                "file_count": c.file_count,
                "is_dir": c.is_dir,
                "depth": c.depth,
            }
            for c in children
        ]
        return json.dumps(data)

    @method()
    def Clean(self, paths: "as", dry_run: "b") -> "s":  # type: ignore[override]
        """Validate and delete (or simulate deleting) the given directories."""
        items = [self._candidate_for(p) for p in paths]

        def progress(_index: int, result) -> None:
            self.CleanProgress(str(result.path), result.success, result.size_bytes)

        results = self._executor.execute(items, dry_run=dry_run, on_result=progress)
        self._tracker.record(results)
        self._tracker.save_session()
        data = [
            {
                "path": str(r.path),
                "size_bytes": r.size_bytes,
                "success": r.success,
                "dry_run": r.dry_run,
                "error": r.error,
            }
            for r in results
        ]
        return json.dumps(data)

    @method()
    def GetStats(self, period: "s") -> "s":  # type: ignore[override]
        """Get statistics for a time period."""
        return json.dumps(self._tracker.get_stats(period))

    @signal()
    def ScanProgress(self, source_id: str, status: str) -> "(ss)":  # type: ignore[override]
        return [source_id, status]

    @signal()
    def CleanProgress(self, path: str, success: bool, size_bytes: int) -> "(sbt)":  # type: ignore[override]
        return [path, success, size_bytes]

    def _candidate_for(self, path: str) -> Candidate:
        """Use the last scan's numbers for *path*, or measure it now."""
        known = self._engine.get_last_scan(path)
        if known is not None:
            return known
        target = Path(path)
        size, count = dir_info(target) if target.is_dir() else (0, 0)
        return Candidate(path=target, label=target.name, size_bytes=size, file_count=count, ecosystem="")


async def run_service() -> None:
    """Start the D-Bus service."""
    with AuditLog() as audit:
        bus = await MessageBus(bus_type=BusType.SESSION).connect()
        service = DevsweepDBusService(audit)
        bus.export(_OBJECT_PATH, service)
        await bus.request_name(_BUS_NAME)
        log.info("D-Bus service started on %s", _BUS_NAME)
        await bus.wait_for_disconnect()


def start_service() -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service())
