"""Source for Node.js package manager caches and node_modules."""

from __future__ import annotations

from devsweep.models.source import ArtifactRule, DevToolSource


class NodeSource(DevToolSource):
    """Reports global package stores and per-project node_modules."""

    id = "node"
    name = "Node.js"
    ecosystem = "node"
    description = "npm, pnpm, Yarn and Bun caches plus project node_modules"
    sort_order = 30
    _cache_paths = (
        (".npm", "npm Cache"),
        (".pnpm-store", "pnpm Store"),
        (".yarn/cache", "Yarn Cache"),
        (".bun/install/cache", "Bun Cache"),
    )
    _artifacts = (ArtifactRule("node_modules"),)
