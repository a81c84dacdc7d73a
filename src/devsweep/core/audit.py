"""Append-only audit log of deletion attempts."""

from __future__ import annotations

import enum
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

from devsweep.utils import bytes_to_human, xdg_data_home

log = logging.getLogger(__name__)


class AuditAction(str, enum.Enum):
    REJECTED = "REJECTED"
    DRY_RUN = "DRY-RUN"
    DELETE_START = "DELETE START"
    DELETE_SUCCESS = "DELETE SUCCESS"
    DELETE_FAILED = "DELETE FAILED"


def default_audit_path() -> Path:
    """Per-user audit log location."""
    return xdg_data_home() / "devsweep" / "audit.log"


class AuditLog:
    """Line-oriented, human-readable record of every deletion attempt.

    The log is opened explicitly (or via ``with``) and handed to whoever
    deletes things.  Failing to open or write the file only disables
    auditing; callers are never interrupted by it.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_audit_path()
        self._file: TextIO | None = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._file is not None

    def open(self) -> AuditLog:
        if self._file is not None:
            return self
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            log.warning("Audit log disabled, cannot open %s: %s", self.path, e)
            self._file = None
        return self

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                try:
                    self._file.close()
                except OSError as e:
                    log.warning("Could not close audit log %s: %s", self.path, e)
                self._file = None

    def __enter__(self) -> AuditLog:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def record(self, action: AuditAction, path: Path | str, size_bytes: int, detail: str = "") -> None:
        """Append one line and flush it to disk."""
        line = format_line(action, path, size_bytes, detail)
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.write(line + "\n")
                self._file.flush()
            except OSError as e:
                log.warning("Audit log disabled, write to %s failed: %s", self.path, e)
                broken, self._file = self._file, None
                try:
                    broken.close()
                except OSError:
                    log.debug("Could not close broken audit log %s", self.path)


def format_line(
    action: AuditAction,
    path: Path | str,
    size_bytes: int,
    detail: str = "",
    when: datetime | None = None,
) -> str:
    """Render one audit line."""
    stamp = (when or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    line = f"{stamp} {action.value} {_printable(str(path))} ({bytes_to_human(size_bytes)}, {size_bytes} bytes)"
    if detail:
        line += f": {_printable(detail)}"
    return line


def _printable(text: str) -> str:
    """Quote *text* when it holds newlines or other control characters."""
    return text if text.isprintable() else repr(text)
