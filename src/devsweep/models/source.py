"""Base scan source interface."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from devsweep.models.candidate import Candidate, ScanOptions

log = logging.getLogger(__name__)

# Directories never descended into while searching for project artifacts
SKIP_DIRS = frozenset({".git", "node_modules", ".Trash", "Library"})


@dataclass(frozen=True)
class ArtifactRule:
    """A per-project artifact directory name.

    When ``markers`` is non-empty the directory only counts if its parent
    (the project directory) contains at least one of those files.
    """

    name: str
    markers: tuple[str, ...] = ()
    label_suffix: str = ""

    def matches(self, sibling_names: set[str]) -> bool:
        return not self.markers or any(m in sibling_names for m in self.markers)


class ScanSource(ABC):
    """Base class for all scan sources.

    A source reports reclaimable directories for one ecosystem.  ``scan``
    runs concurrently with other sources, so implementations must not
    touch shared state and must return an empty list (never raise) when
    their targets are simply absent.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'node'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name, e.g. 'Node.js'."""

    @property
    @abstractmethod
    def ecosystem(self) -> str:
        """Ecosystem tag attached to every candidate, e.g. 'node'."""

    @property
    def description(self) -> str:
        """What this source reports."""
        return ""

    @property
    def sort_order(self) -> int:
        """Display order (lower = first). Default 50."""
        return 50

    @abstractmethod
    def scan(self, options: ScanOptions) -> list[Candidate]:
        """Find reclaimable directories. MUST NOT delete anything."""

    def unavailable_reason(self, options: ScanOptions | None = None) -> str | None:
        """Why this source has nothing to look at under *options*, or None if usable."""
        return None

    def is_available(self, options: ScanOptions | None = None) -> bool:
        """Check if this source has anything to scan under *options*."""
        return self.unavailable_reason(options) is None


class DevToolSource(ScanSource, ABC):
    """Data-driven source for global caches and per-project artifacts.

    Subclasses declare ``_cache_paths`` (home-relative locations with a
    label) and/or ``_artifacts`` (directory names searched for under the
    project directories, bounded by ``ScanOptions.max_depth``).
    """

    _cache_paths: tuple[tuple[str, str], ...] = ()
    _artifacts: tuple[ArtifactRule, ...] = ()
    _extra_project_dirs: tuple[str, ...] = ()

    def _cache_targets(self, options: ScanOptions) -> list[tuple[Path, str]]:
        """Resolve the known cache locations for *options*."""
        return [(options.home / rel, label) for rel, label in self._cache_paths]

    def _project_roots(self, options: ScanOptions) -> list[Path]:
        roots = list(options.project_dirs)
        roots.extend(options.home / d for d in self._extra_project_dirs)
        return roots

    def unavailable_reason(self, options: ScanOptions | None = None) -> str | None:
        options = options or ScanOptions.for_home()
        if any(path.is_dir() for path, _ in self._cache_targets(options)):
            return None
        if self._artifacts and any(root.is_dir() for root in self._project_roots(options)):
            return None
        return f"No {self.name} caches or project directories found"

    def scan(self, options: ScanOptions) -> list[Candidate]:
        candidates = self._scan_caches(options)
        if self._artifacts:
            for root in self._project_roots(options):
                if root.is_dir():
                    candidates.extend(self._find_artifacts(root, options.max_depth))
        return candidates

    def _scan_caches(self, options: ScanOptions) -> list[Candidate]:
        from devsweep.utils import dir_info

        found: list[Candidate] = []
        for path, label in self._cache_targets(options):
            if not path.is_dir() or path.is_symlink():
                continue
            size, count = dir_info(path)
            if size > 0:
                found.append(self._candidate(path, label, size, count))
        return found

    def _find_artifacts(self, root: Path, depth: int) -> list[Candidate]:
        """Search *root* for artifact directories, at most *depth* levels down."""
        from devsweep.utils import dir_info

        if depth <= 0:
            return []
        try:
            with os.scandir(root) as it:
                entries = list(it)
        except OSError:
            log.debug("Cannot read project directory: %s", root)
            return []

        names = {e.name for e in entries}
        found: list[Candidate] = []
        for entry in sorted(entries, key=lambda e: e.name):
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            rule = self._rule_for(entry.name)
            if rule is not None and rule.matches(names):
                size, count = dir_info(entry.path)
                if size > 0:
                    label = f"{root.name}/{entry.name}{rule.label_suffix}"
                    found.append(self._candidate(Path(entry.path), label, size, count))
                continue
            if entry.name.startswith(".") or entry.name in SKIP_DIRS:
                continue
            found.extend(self._find_artifacts(Path(entry.path), depth - 1))
        return found

    def _rule_for(self, name: str) -> ArtifactRule | None:
        for rule in self._artifacts:
            if rule.name == name:
                return rule
        return None

    def _candidate(self, path: Path, label: str, size: int, count: int) -> Candidate:
        return Candidate(
            path=path,
            label=label,
            size_bytes=size,
            file_count=count,
            ecosystem=self.ecosystem,
        )
