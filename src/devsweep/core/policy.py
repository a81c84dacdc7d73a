"""Path safety policy applied before any destructive operation.

A path may only be deleted when it is an existing directory strictly
inside the user's home, does not cover a system or protected location,
and sits at or below a known tool-cache location (default deny).
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path, PurePosixPath
from typing import Iterable

log = logging.getLogger(__name__)

# Absolute locations that must never be deleted or contained by a deletion
DENYLIST: tuple[str, ...] = (
    "/",
    "/System",
    "/Library",
    "/Library/System",
    "/usr",
    "/bin",
    "/sbin",
    "/etc",
    "/var",
    "/private",
    "/Applications",
    "/opt",
    "/Users",
    "/home",
)

# Home-relative locations that are off limits together with their contents
PROTECTED: tuple[str, ...] = (
    ".ssh",
    ".gnupg",
    ".aws",
    ".kube",
    "Library/Keychains",
)

# Home-relative component runs that mark tool caches and build output
ALLOWLIST: tuple[str, ...] = (
    # per-project artifacts
    "node_modules",
    "target",
    "build",
    ".gradle",
    ".dart_tool",
    "__pycache__",
    ".venv",
    "venv",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    "Pods",
    "DerivedData",
    # global caches
    ".cache",
    "Library/Caches",
    "Library/Developer/Xcode/DerivedData",
    "Library/Developer/Xcode/Archives",
    "Library/Developer/CoreSimulator/Caches",
    "Library/Android/sdk/system-images",
    ".android/cache",
    ".android/build-cache",
    ".gradle/caches",
    ".gradle/wrapper",
    ".gradle/daemon",
    ".npm",
    ".pnpm-store",
    ".yarn/cache",
    ".bun/install/cache",
    ".local/share/virtualenvs",
    ".cargo/registry",
    ".cargo/git",
    "go-build",
    "pkg/mod",
    ".m2/repository",
    ".pub-cache",
)

# Generic artifact names: allowed only as the last path component, never
# their contents
TERMINAL_ONLY: frozenset[str] = frozenset({
    "target",
    "build",
    ".gradle",
    ".venv",
    "venv",
    ".tox",
    "Pods",
    "DerivedData",
})


class PathRejected(Exception):
    """Raised when a path fails the safety policy."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


def _parts(entry: str) -> tuple[str, ...]:
    return PurePosixPath(entry).parts


def valid_allow_entry(entry: str) -> bool:
    """Return True if *entry* is usable as an allowlist suffix."""
    parts = _parts(entry.strip())
    return bool(parts) and not PurePosixPath(entry).is_absolute() and ".." not in parts and "." not in parts


class PathPolicy:
    """Validates paths against the deny/protect/allow lists.

    Args:
        home: Home directory; resolved lazily from ``Path.home()`` when None.
        extra_allow: Additional home-relative allowlist entries.  Invalid
            entries (absolute, empty or containing ``..``) are ignored.
    """

    def __init__(self, home: Path | None = None, extra_allow: Iterable[str] = ()) -> None:
        self._home = home
        allow = [_parts(e) for e in ALLOWLIST]
        for entry in extra_allow:
            if valid_allow_entry(entry):
                allow.append(_parts(entry.strip()))
            else:
                log.warning("Ignoring invalid allowlist entry: %r", entry)
        self._allow = tuple(allow)
        self._extra = frozenset(allow[len(ALLOWLIST):])

    @property
    def home(self) -> Path:
        home = self._home if self._home is not None else Path.home()
        return Path(os.path.realpath(home))

    def validate(self, path: Path | str) -> Path:
        """Return the normalized *path* or raise ``PathRejected``."""
        raw = os.path.expanduser(str(path))
        if not os.path.isabs(raw):
            raise PathRejected(path, "path must be absolute")

        normalized = Path(os.path.realpath(raw))
        home = self.home

        if normalized != home and home not in normalized.parents:
            raise PathRejected(path, "path outside home directory")

        if normalized == home:
            raise PathRejected(path, "refusing to delete the home directory")

        for entry in DENYLIST:
            denied = Path(entry)
            if normalized == denied or normalized in denied.parents:
                raise PathRejected(path, "refusing to delete system path")

        for entry in PROTECTED:
            protected = home / entry
            if (
                normalized == protected
                or normalized in protected.parents
                or protected in normalized.parents
            ):
                raise PathRejected(path, f"refusing to delete protected path '{entry}'")

        try:
            st = os.stat(normalized)
        except FileNotFoundError:
            raise PathRejected(path, "path does not exist") from None
        except OSError as exc:
            raise PathRejected(path, f"cannot stat path ({exc.strerror})") from None
        if not stat.S_ISDIR(st.st_mode):
            raise PathRejected(path, "not a directory")

        relative = normalized.relative_to(home).parts
        if not any(self._matches(relative, run) for run in self._allow):
            raise PathRejected(path, "not a known cache or build location")

        return normalized

    def _matches(self, relative: tuple[str, ...], run: tuple[str, ...]) -> bool:
        if run not in self._extra and len(run) == 1 and run[0] in TERMINAL_ONLY:
            return relative[-1] == run[0]
        return _contains_run(relative, run)

    def is_safe_to_delete(self, path: Path | str) -> bool:
        """Convenience wrapper around ``validate``."""
        try:
            self.validate(path)
        except PathRejected:
            return False
        return True


def _contains_run(parts: tuple[str, ...], run: tuple[str, ...]) -> bool:
    """Return True if *run* occurs as a contiguous slice of *parts*."""
    n = len(run)
    return any(parts[i:i + n] == run for i in range(len(parts) - n + 1))


def validate_path(path: Path | str) -> Path:
    """Validate *path* against the default policy."""
    return PathPolicy().validate(path)


def is_safe_to_delete(path: Path | str) -> bool:
    """Check *path* against the default policy."""
    return PathPolicy().is_safe_to_delete(path)
