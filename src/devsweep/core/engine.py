"""Scan orchestration engine."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.source import ScanSource
from devsweep.core.registry import SourceRegistry

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (source_id, status_message)


def sort_by_size(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Return candidates largest first (ties broken by path)."""
    return sorted(candidates, key=lambda c: (-c.size_bytes, str(c.path)))


class ScanEngine:
    """Runs every enabled scan source concurrently and collects candidates."""

    def __init__(self, registry: SourceRegistry) -> None:
        self.registry = registry
        self._last_scan: dict[Path, Candidate] = {}

    def scan_all(
        self,
        source_ids: list[str] | None = None,
        options: ScanOptions | None = None,
        ecosystems: list[str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[Candidate]:
        """Scan the enabled sources and return all their candidates.

        Each source runs in its own thread and appends its whole result to
        one shared list under a single lock.  The call returns once every
        task has finished; a source that raises is logged and contributes
        nothing, without affecting the others.  A directory reported by
        several sources is kept once, from the first source in the resolved
        order.

        Args:
            source_ids: Specific source IDs to scan. If None, scan all available.
            options: Scan options; defaults to the current user's home.
            ecosystems: Restrict to sources tagging these ecosystems.
            on_progress: Optional callback for progress updates.

        Returns:
            Unordered candidates; use ``sort_by_size`` before display.
        """
        options = options or ScanOptions.for_home()
        sources = self._resolve_sources(source_ids, ecosystems, options)
        if not sources:
            self._last_scan = {}
            return []

        batches: list[tuple[int, list[Candidate]]] = []
        lock = threading.Lock()

        def _scan_source(position: int, source: ScanSource) -> None:
            if on_progress:
                on_progress(source.id, "scanning")
            try:
                found = source.scan(options)
            except Exception:
                log.exception("Source '%s' failed during scan", source.id)
                if on_progress:
                    on_progress(source.id, "error")
                return
            with lock:
                batches.append((position, found))
            log.debug("Source '%s' found %d candidates", source.id, len(found))
            if on_progress:
                on_progress(source.id, "done")

        with ThreadPoolExecutor(max_workers=len(sources), thread_name_prefix="devsweep-scan") as executor:
            futures = [executor.submit(_scan_source, i, source) for i, source in enumerate(sources)]
            for future in futures:
                future.result()

        results = _unique_paths(found for _, found in sorted(batches, key=lambda b: b[0]))
        self._last_scan = {c.path: c for c in results}
        return results

    def get_last_scan(self, path: Path | str) -> Candidate | None:
        """Get the candidate reported for *path* by the most recent scan."""
        return self._last_scan.get(Path(path))

    def _resolve_sources(
        self,
        source_ids: list[str] | None,
        ecosystems: list[str] | None,
        options: ScanOptions,
    ) -> list[ScanSource]:
        """Resolve which sources to run."""
        if source_ids:
            result: list[ScanSource] = []
            for sid in source_ids:
                source = self.registry.get(sid)
                if source is None:
                    log.warning("Source '%s' not found, skipping", sid)
                elif not source.is_available(options):
                    log.info("Source '%s' has nothing to scan on this system, skipping", sid)
                else:
                    result.append(source)
        else:
            result = self.registry.get_available(options)

        if ecosystems:
            wanted = set(ecosystems)
            result = [s for s in result if s.ecosystem in wanted]
        return result


def _unique_paths(batches: Iterable[list[Candidate]]) -> list[Candidate]:
    seen: set[Path] = set()
    unique: list[Candidate] = []
    for batch in batches:
        for candidate in batch:
            if candidate.path in seen:
                log.debug("Dropping duplicate candidate %s", candidate.path)
                continue
            seen.add(candidate.path)
            unique.append(candidate)
    return unique
