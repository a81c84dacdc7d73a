"""Tests for the deletion executor and audit log."""

from __future__ import annotations

import os
import shutil
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

import devsweep.core.executor as executor_module
from devsweep.core.audit import AuditAction, AuditLog, format_line
from devsweep.core.executor import DeletionExecutor, summarize
from devsweep.core.policy import PathPolicy
from devsweep.models.candidate import Candidate
from devsweep.models.clean_result import CleanResult
from devsweep.utils import dir_info
from tests.conftest import write_file


def _candidate(path, size=100) -> Candidate:
    return Candidate(path=path, label=path.name, size_bytes=size, file_count=1, ecosystem="test")


@pytest.fixture
def items(fake_home):
    allowed = [
        fake_home / "Library" / "Caches" / "FakeA",
        fake_home / ".npm",
        fake_home / "Projects" / "web" / "node_modules",
    ]
    for path in allowed:
        write_file(path / "blob", 100)
    rejected = fake_home / "Documents" / "thesis"
    write_file(rejected / "draft.txt", 100)
    return [_candidate(allowed[0]), _candidate(allowed[1]), _candidate(rejected), _candidate(allowed[2])]


@pytest.fixture
def audit(tmp_path):
    with AuditLog(tmp_path / "audit" / "audit.log") as log:
        yield log


def _audit_actions(audit: AuditLog) -> list[str]:
    actions = []
    for line in audit.path.read_text().splitlines():
        rest = line.split(" ", 1)[1]
        for action in AuditAction:
            if rest.startswith(action.value + " "):
                actions.append(action.value)
                break
    return actions


class TestDryRun:
    def test_reports_without_deleting(self, fake_home, items, audit):
        before = [dir_info(c.path) for c in items]
        executor = DeletionExecutor(PathPolicy(fake_home), audit)
        results = executor.execute(items, dry_run=True)

        assert [r.path for r in results] == [c.path for c in items]
        assert [r.success for r in results] == [True, True, False, True]
        assert all(r.dry_run for r in results)
        assert results[2].error == "not a known cache or build location"
        assert [dir_info(c.path) for c in items] == before
        assert _audit_actions(audit) == ["DRY-RUN", "DRY-RUN", "REJECTED", "DRY-RUN"]

    def test_progress_callback_in_order(self, fake_home, items, audit):
        seen = []
        DeletionExecutor(PathPolicy(fake_home), audit).execute(
            items, dry_run=True, on_result=lambda i, r: seen.append((i, r.path))
        )
        assert seen == [(i, c.path) for i, c in enumerate(items)]


class TestDelete:
    def test_deletes_allowed_and_keeps_rejected(self, fake_home, items, audit):
        results = DeletionExecutor(PathPolicy(fake_home), audit).execute(items, dry_run=False)

        assert [r.success for r in results] == [True, True, False, True]
        assert not any(r.dry_run for r in results)
        assert not items[0].path.exists()
        assert not items[1].path.exists()
        assert items[2].path.exists()
        assert not items[3].path.exists()
        assert _audit_actions(audit) == [
            "DELETE START", "DELETE SUCCESS",
            "DELETE START", "DELETE SUCCESS",
            "REJECTED",
            "DELETE START", "DELETE SUCCESS",
        ]

    def test_failure_does_not_stop_batch(self, fake_home, items, audit, monkeypatch):
        real_rmtree = shutil.rmtree
        first = items[0].path

        def flaky_rmtree(path, *args, **kwargs):
            if path == first:
                raise PermissionError(13, "Permission denied", str(path))
            real_rmtree(path, *args, **kwargs)

        monkeypatch.setattr(executor_module.shutil, "rmtree", flaky_rmtree)
        results = DeletionExecutor(PathPolicy(fake_home), audit).execute(items, dry_run=False)

        assert not results[0].success
        assert "Permission denied" in results[0].error
        assert results[1].success and results[3].success
        assert _audit_actions(audit)[:3] == ["DELETE START", "DELETE FAILED", "DELETE START"]

    def test_cancel_stops_before_next_item(self, fake_home, items, audit):
        cancel = threading.Event()
        executor = DeletionExecutor(PathPolicy(fake_home), audit)
        results = executor.execute(
            items, dry_run=False, on_result=lambda i, r: cancel.set(), cancel=cancel
        )
        assert len(results) == 1
        assert items[1].path.exists()


def test_summarize():
    results = [
        CleanResult(path="/a", size_bytes=100, success=True),
        CleanResult(path="/b", size_bytes=50, success=False, error="nope"),
        CleanResult(path="/c", size_bytes=25, success=True),
    ]
    assert summarize(results) == (2, 1, 125)


class TestAuditLog:
    def test_format_line(self):
        when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        line = format_line(AuditAction.DELETE_FAILED, "/h/.npm", 1536, "Permission denied", when=when)
        assert line == "2024-05-01T12:30:00+00:00 DELETE FAILED /h/.npm (1.5 KB, 1536 bytes): Permission denied"

    def test_lines_flushed_immediately(self, tmp_path):
        audit = AuditLog(tmp_path / "audit.log").open()
        audit.record(AuditAction.DRY_RUN, "/h/.npm", 10)
        assert "DRY-RUN /h/.npm" in (tmp_path / "audit.log").read_text()
        audit.close()
        assert not audit.enabled

    def test_appends_across_sessions(self, tmp_path):
        for _ in range(2):
            with AuditLog(tmp_path / "audit.log") as audit:
                audit.record(AuditAction.REJECTED, "/x", 0, "path outside home directory")
        assert len((tmp_path / "audit.log").read_text().splitlines()) == 2

    def test_open_failure_disables_logging(self, tmp_path):
        blocker = write_file(tmp_path / "not_a_dir", 1)
        audit = AuditLog(blocker / "audit.log").open()
        assert not audit.enabled
        audit.record(AuditAction.DRY_RUN, "/x", 1)

    def test_default_location(self, fake_home):
        assert AuditLog().path == Path(os.environ["XDG_DATA_HOME"]) / "devsweep" / "audit.log"

    def test_control_characters_stay_on_one_line(self):
        when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        line = format_line(AuditAction.REJECTED, "/h/odd\nname", 0, "bad\rdetail", when=when)
        assert "\n" not in line and "\r" not in line
        assert "'/h/odd\\nname'" in line
        assert line.endswith(": 'bad\\rdetail'")

    def test_unicode_path_unchanged(self):
        line = format_line(AuditAction.DRY_RUN, "/h/café/.npm", 0)
        assert " /h/café/.npm (" in line


class _FullDiskFile:
    """File wrapper whose writes start failing after *ok_writes* calls."""

    def __init__(self, real, ok_writes: int):
        self._real = real
        self._ok_writes = ok_writes
        self.closed = False

    def write(self, text: str) -> int:
        if self._ok_writes <= 0:
            raise OSError(28, "No space left on device")
        self._ok_writes -= 1
        return self._real.write(text)

    def flush(self) -> None:
        self._real.flush()

    def close(self) -> None:
        self.closed = True
        self._real.close()


def test_audit_write_failure_mid_batch(fake_home, items, audit):
    broken = _FullDiskFile(audit._file, ok_writes=2)
    audit._file = broken

    results = DeletionExecutor(PathPolicy(fake_home), audit).execute(items, dry_run=False)

    assert [r.success for r in results] == [True, True, False, True]
    assert not items[1].path.exists()
    assert not items[3].path.exists()
    assert not audit.enabled
    assert broken.closed
    assert _audit_actions(audit) == ["DELETE START", "DELETE SUCCESS"]
