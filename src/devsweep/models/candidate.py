"""Scan candidate and scan options dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_DEPTH = 3

# Home-relative directories searched for per-project build artifacts
DEFAULT_PROJECT_DIRS: tuple[str, ...] = (
    "Documents",
    "Projects",
    "Development",
    "Developer",
    "Code",
    "repos",
    "workspace",
)


@dataclass(frozen=True, slots=True)
class Candidate:
    """A directory that a scan source reports as reclaimable.

    Candidates are immutable; a new scan produces a new list instead of
    updating an existing one.
    """

    path: Path
    label: str
    size_bytes: int
    file_count: int
    ecosystem: str


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Inputs shared by every scan source during one scan."""

    home: Path
    max_depth: int = DEFAULT_MAX_DEPTH
    project_dirs: tuple[Path, ...] = field(default_factory=tuple)

    @classmethod
    def for_home(
        cls,
        home: Path | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        project_dirs: tuple[str, ...] | None = None,
    ) -> ScanOptions:
        """Build options rooted at *home*, resolving relative project dirs."""
        home = home if home is not None else Path.home()
        names = project_dirs if project_dirs is not None else DEFAULT_PROJECT_DIRS
        dirs = tuple(Path(d) if Path(d).is_absolute() else home / d for d in names)
        return cls(home=home, max_depth=max_depth, project_dirs=dirs)
