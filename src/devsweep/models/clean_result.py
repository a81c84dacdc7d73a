"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class CleanResult:
    """Outcome of one requested deletion."""

    path: Path
    size_bytes: int
    success: bool
    dry_run: bool = False
    error: str | None = None
