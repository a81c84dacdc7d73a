"""Source for Xcode and iOS toolchain caches."""

from __future__ import annotations

import os
from pathlib import Path

from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.source import DevToolSource

_DERIVED_DATA = "Library/Developer/Xcode/DerivedData"


class XcodeSource(DevToolSource):
    """Reports Xcode derived data, archives and simulator caches."""

    id = "xcode"
    name = "Xcode"
    ecosystem = "xcode"
    description = "Xcode DerivedData, archives, simulator and CocoaPods caches"
    sort_order = 10
    _cache_paths = (
        ("Library/Developer/Xcode/Archives", "Xcode Archives"),
        ("Library/Caches/com.apple.dt.Xcode", "Xcode Caches"),
        ("Library/Developer/CoreSimulator/Caches", "Simulator Caches"),
        ("Library/Caches/CocoaPods", "CocoaPods Cache"),
    )

    def scan(self, options: ScanOptions) -> list[Candidate]:
        candidates = super().scan(options)
        candidates.extend(self._scan_derived_data(options.home / _DERIVED_DATA))
        return candidates

    def _scan_derived_data(self, derived: Path) -> list[Candidate]:
        """Report each project's DerivedData folder separately."""
        from devsweep.utils import dir_info

        if not derived.is_dir():
            return []
        found: list[Candidate] = []
        try:
            with os.scandir(derived) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            return []
        for entry in entries:
            if entry.name == "ModuleCache.noindex" or not entry.is_dir(follow_symlinks=False):
                continue
            size, count = dir_info(entry.path)
            if size > 0:
                found.append(self._candidate(Path(entry.path), f"DerivedData/{entry.name}", size, count))
        return found
