"""Source for the Homebrew download cache."""

from __future__ import annotations

from devsweep.models.source import DevToolSource


class HomebrewSource(DevToolSource):
    """Reports downloaded Homebrew bottles and sources."""

    id = "homebrew"
    name = "Homebrew"
    ecosystem = "homebrew"
    description = "Homebrew download cache"
    sort_order = 60
    _cache_paths = (
        ("Library/Caches/Homebrew", "Homebrew Cache"),
        (".cache/Homebrew", "Homebrew Cache"),
    )
