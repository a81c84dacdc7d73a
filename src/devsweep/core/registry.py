"""Central scan source registry."""

from __future__ import annotations

import logging
from typing import Iterator

from devsweep.models.candidate import ScanOptions
from devsweep.models.source import ScanSource

log = logging.getLogger(__name__)


class SourceRegistry:
    """Stores and retrieves registered scan sources."""

    def __init__(self) -> None:
        self._sources: dict[str, ScanSource] = {}

    def register(self, source: ScanSource) -> None:
        """Register a source instance."""
        if source.id in self._sources:
            log.warning("Source '%s' already registered, skipping duplicate", source.id)
            return
        self._sources[source.id] = source
        log.debug("Registered source: %s (%s)", source.id, source.name)

    def get(self, source_id: str) -> ScanSource | None:
        """Get a source by its ID."""
        return self._sources.get(source_id)

    def get_all(self) -> list[ScanSource]:
        """Get all registered sources in display order."""
        return sorted(self._sources.values(), key=lambda s: (s.sort_order, s.id))

    def get_by_ecosystem(self, ecosystem: str) -> list[ScanSource]:
        """Get all sources tagging candidates with *ecosystem*."""
        return [s for s in self.get_all() if s.ecosystem == ecosystem]

    def get_available(self, options: ScanOptions | None = None) -> list[ScanSource]:
        """Get all sources that have something to look at under *options*."""
        available = []
        for source in self.get_all():
            try:
                if source.is_available(options):
                    available.append(source)
            except Exception:
                log.exception("Error checking availability for source '%s'", source.id)
        return available

    def ecosystems(self) -> list[str]:
        """Distinct ecosystem tags, in display order."""
        seen: dict[str, None] = {}
        for source in self.get_all():
            seen.setdefault(source.ecosystem, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[ScanSource]:
        return iter(self.get_all())

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._sources
