"""Source for React Native project build output."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.source import SKIP_DIRS, DevToolSource

log = logging.getLogger(__name__)

_BUILD_DIRS = (
    ("ios/build", "iOS Build"),
    ("ios/Pods", "CocoaPods"),
    ("android/build", "Android Build"),
    ("android/app/build", "Android App Build"),
    ("android/.gradle", "Project Gradle Cache"),
)


def is_react_native_project(directory: Path) -> bool:
    """Return True if *directory* has a package.json depending on react-native."""
    manifest = directory / "package.json"
    if not manifest.is_file():
        return False
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.debug("Unreadable package.json: %s", manifest)
        return False
    if not isinstance(data, dict):
        return False
    for key in ("dependencies", "devDependencies", "peerDependencies"):
        deps = data.get(key)
        if isinstance(deps, dict) and "react-native" in deps:
            return True
    return False


class ReactNativeSource(DevToolSource):
    """Reports native iOS/Android build directories inside React Native projects."""

    id = "react_native"
    name = "React Native"
    ecosystem = "react-native"
    description = "iOS and Android build output inside React Native projects"
    sort_order = 35

    def unavailable_reason(self, options: ScanOptions | None = None) -> str | None:
        options = options or ScanOptions.for_home()
        if any(root.is_dir() for root in self._project_roots(options)):
            return None
        return "No project directories found"

    def scan(self, options: ScanOptions) -> list[Candidate]:
        candidates: list[Candidate] = []
        for root in self._project_roots(options):
            if root.is_dir():
                for project in self._find_projects(root, options.max_depth):
                    candidates.extend(self._scan_project(project))
        return candidates

    def _find_projects(self, root: Path, depth: int) -> list[Path]:
        if depth <= 0:
            return []
        if is_react_native_project(root):
            return [root]
        try:
            with os.scandir(root) as it:
                subdirs = sorted(
                    Path(e.path) for e in it
                    if e.is_dir(follow_symlinks=False)
                    and not e.name.startswith(".")
                    and e.name not in SKIP_DIRS
                )
        except OSError:
            return []
        projects: list[Path] = []
        for sub in subdirs:
            projects.extend(self._find_projects(sub, depth - 1))
        return projects

    def _scan_project(self, project: Path) -> list[Candidate]:
        from devsweep.utils import dir_info

        found: list[Candidate] = []
        for rel, label in _BUILD_DIRS:
            path = project / rel
            if not path.is_dir() or path.is_symlink():
                continue
            size, count = dir_info(path)
            if size > 0:
                found.append(self._candidate(path, f"{project.name} - {label}", size, count))
        return found
