"""Source for Rust toolchain caches and cargo target directories."""

from __future__ import annotations

from devsweep.models.source import ArtifactRule, DevToolSource


class RustSource(DevToolSource):
    """Reports the cargo registry and git caches plus project target dirs."""

    id = "rust"
    name = "Rust"
    ecosystem = "rust"
    description = "Cargo registry and git checkouts plus project target directories"
    _cache_paths = (
        (".cargo/registry", "Cargo Registry"),
        (".cargo/git", "Cargo Git Cache"),
    )
    _artifacts = (ArtifactRule("target", markers=("Cargo.toml",)),)
