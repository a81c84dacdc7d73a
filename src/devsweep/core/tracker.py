"""Tracks freed space across sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from devsweep.models.clean_result import CleanResult
from devsweep.storage import load_history, save_history

log = logging.getLogger(__name__)


class Tracker:
    """Tracks and persists cleaning statistics.

    Only real, successful deletions count; dry runs and failures are
    ignored.
    """

    def __init__(self) -> None:
        self._session_results: list[CleanResult] = []

    @property
    def session_bytes_freed(self) -> int:
        """Total bytes freed in the current session."""
        return sum(r.size_bytes for r in self._session_results)

    @property
    def session_items_removed(self) -> int:
        """Number of directories removed in the current session."""
        return len(self._session_results)

    def record(self, results: list[CleanResult]) -> None:
        """Record cleaning results for the current session."""
        self._session_results.extend(r for r in results if r.success and not r.dry_run)

    def get_last_clean_time(self) -> str | None:
        """Return ISO timestamp of the most recent cleaning session, or None."""
        sessions = load_history().get("sessions", [])
        return sessions[-1]["timestamp"] if sessions else None

    def save_session(self) -> None:
        """Persist the current session to history."""
        if not self._session_results:
            return

        history = load_history()
        session_entry = self._build_session_entry()
        history["sessions"].append(session_entry)
        save_history(history)

        log.info(
            "Saved session: %d bytes freed from %d directories",
            _session_bytes(session_entry),
            len(session_entry["details"]),
        )
        self._session_results.clear()

    def get_stats(self, period: str = "all") -> dict[str, Any]:
        """Get aggregated statistics for a time period.

        Args:
            period: One of 'today', 'week', 'month', 'all'.
        """
        all_sessions = load_history().get("sessions", [])

        match period:
            case "today":
                cutoff = _start_of_today()
            case "week":
                cutoff = _start_of_today() - timedelta(days=7)
            case "month":
                cutoff = _start_of_today() - timedelta(days=30)
            case _:
                cutoff = None

        if cutoff is not None:
            sessions = [
                s for s in all_sessions
                if datetime.fromisoformat(s["timestamp"]) >= cutoff
            ]
        else:
            sessions = all_sessions

        return {
            "period": period,
            "bytes_freed": sum(_session_bytes(s) for s in sessions),
            "items_removed": sum(len(s.get("details", [])) for s in sessions),
            "session_count": len(sessions),
            "lifetime_bytes_freed": sum(_session_bytes(s) for s in all_sessions),
            "largest": self._largest_paths(sessions),
        }

    def _build_session_entry(self) -> dict[str, Any]:
        """Build a session record from current results."""
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": [
                {"path": str(r.path), "bytes_freed": r.size_bytes}
                for r in self._session_results
            ],
        }

    @staticmethod
    def _largest_paths(sessions: list[dict[str, Any]], limit: int = 5) -> list[dict[str, Any]]:
        """Return the biggest deletions across *sessions*."""
        details = [d for s in sessions for d in s.get("details", [])]
        details.sort(key=lambda d: d.get("bytes_freed", 0), reverse=True)
        return details[:limit]


def _session_bytes(session: dict[str, Any]) -> int:
    """Derive total bytes freed from a session's details."""
    return sum(d.get("bytes_freed", 0) for d in session.get("details", []))


def _start_of_today() -> datetime:
    """Return the start of the current UTC day."""
    now = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
