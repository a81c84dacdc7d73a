"""Tests for the tracker module."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from devsweep.models.clean_result import CleanResult
from devsweep.core.tracker import Tracker

pytestmark = pytest.mark.usefixtures("isolate_storage")


def _removed(path: str, size: int) -> CleanResult:
    return CleanResult(path=path, size_bytes=size, success=True)


class TestTracker:
    def test_session_tracking(self):
        tracker = Tracker()
        tracker.record([_removed("/h/.npm", 1024), _removed("/h/.cargo/registry", 2048)])

        assert tracker.session_bytes_freed == 1024 + 2048
        assert tracker.session_items_removed == 2

    def test_dry_runs_and_failures_ignored(self):
        tracker = Tracker()
        tracker.record([
            CleanResult(path="/h/.npm", size_bytes=10, success=True, dry_run=True),
            CleanResult(path="/h/Documents", size_bytes=20, success=False, error="not a known cache or build location"),
        ])
        assert tracker.session_bytes_freed == 0
        assert tracker.session_items_removed == 0

    def test_save_session(self, isolate_storage):
        tracker = Tracker()
        tracker.record([_removed("/h/.npm", 5000)])
        tracker.save_session()

        history = json.loads(isolate_storage.read_text())
        assert len(history["sessions"]) == 1
        session = history["sessions"][0]
        assert session["details"] == [{"path": "/h/.npm", "bytes_freed": 5000}]
        assert tracker.get_last_clean_time() == session["timestamp"]

    def test_session_results_cleared_after_save(self, isolate_storage):
        tracker = Tracker()
        tracker.record([_removed("/h/a", 24_000)])
        tracker.save_session()
        tracker.record([_removed("/h/b", 1_000)])
        tracker.save_session()

        history = json.loads(isolate_storage.read_text())
        assert len(history["sessions"]) == 2
        assert [d["path"] for d in history["sessions"][1]["details"]] == ["/h/b"]
        assert tracker.get_stats("all")["lifetime_bytes_freed"] == 25_000

    def test_empty_session_not_saved(self, isolate_storage):
        tracker = Tracker()
        tracker.save_session()
        assert not isolate_storage.exists()

    def test_malformed_history_ignored(self, isolate_storage):
        isolate_storage.write_text('{"sessions": "nope"}')
        assert Tracker().get_stats("all")["session_count"] == 0


class TestTrackerStats:
    def test_get_stats_all(self):
        tracker = Tracker()
        tracker.record([_removed("/h/small", 100), _removed("/h/big", 900)])
        tracker.save_session()

        stats = tracker.get_stats("all")
        assert stats["bytes_freed"] == 1000
        assert stats["items_removed"] == 2
        assert stats["session_count"] == 1
        assert [d["path"] for d in stats["largest"]] == ["/h/big", "/h/small"]

    def test_period_filter(self, isolate_storage):
        old = (datetime.now(timezone.utc) - timedelta(days=60)).isoformat()
        isolate_storage.write_text(json.dumps({
            "sessions": [{"timestamp": old, "details": [{"path": "/h/old", "bytes_freed": 700}]}]
        }))
        tracker = Tracker()
        tracker.record([_removed("/h/new", 300)])
        tracker.save_session()

        assert tracker.get_stats("today")["bytes_freed"] == 300
        assert tracker.get_stats("month")["bytes_freed"] == 300
        assert tracker.get_stats("all")["bytes_freed"] == 1000
        assert tracker.get_stats("week")["lifetime_bytes_freed"] == 1000
