"""Source for Go build and module caches."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from devsweep.core.policy import PathPolicy
from devsweep.models.candidate import ScanOptions
from devsweep.models.source import DevToolSource

log = logging.getLogger(__name__)


class GoSource(DevToolSource):
    """Reports GOCACHE, GOMODCACHE and an explicit GOTESTCACHE.

    The environment can point these anywhere, so locations the deletion
    policy would refuse are left out rather than listed and then rejected.
    """

    id = "go"
    name = "Go"
    ecosystem = "go"
    description = "Go build, module and test caches"

    def _cache_targets(self, options: ScanOptions) -> list[tuple[Path, str]]:
        policy = PathPolicy(options.home)
        targets = []
        for path, label in self._go_locations(options.home):
            if path.is_dir() and not policy.is_safe_to_delete(path):
                log.info("Skipping %s at %s, not a cleanable location", label, path)
                continue
            targets.append((path, label))
        return targets

    def _go_locations(self, home: Path) -> list[tuple[Path, str]]:
        gocache = os.environ.get("GOCACHE")
        if gocache:
            build = Path(gocache)
        elif (home / "Library" / "Caches" / "go-build").is_dir():
            build = home / "Library" / "Caches" / "go-build"
        else:
            build = home / ".cache" / "go-build"

        modcache = os.environ.get("GOMODCACHE")
        if modcache:
            modules = Path(modcache)
        else:
            gopath = os.environ.get("GOPATH")
            modules = (Path(gopath) if gopath else home / "go") / "pkg" / "mod"

        targets = [(build, "Go Build Cache"), (modules, "Go Module Cache")]
        testcache = os.environ.get("GOTESTCACHE")
        if testcache and Path(testcache) != build:
            targets.append((Path(testcache), "Go Test Cache"))
        return targets
