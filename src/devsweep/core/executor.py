"""Validated, sequential deletion of confirmed candidates."""

from __future__ import annotations

import logging
import shutil
import threading
from typing import Callable, Iterable

from devsweep.core.audit import AuditAction, AuditLog
from devsweep.core.policy import PathPolicy, PathRejected
from devsweep.models.candidate import Candidate
from devsweep.models.clean_result import CleanResult

log = logging.getLogger(__name__)

ItemCallback = Callable[[int, CleanResult], None]  # (index, result)


class DeletionExecutor:
    """Deletes candidates one by one after checking each against the policy.

    Every item gets its own ``CleanResult`` and at least one audit line
    written before the next item starts.  A rejected or failed item never
    stops the batch.
    """

    def __init__(self, policy: PathPolicy, audit: AuditLog) -> None:
        self.policy = policy
        self.audit = audit

    def execute(
        self,
        items: Iterable[Candidate],
        dry_run: bool = True,
        on_result: ItemCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> list[CleanResult]:
        """Process *items* in order and return one result per processed item.

        If *cancel* is set, processing stops before the next item; items
        not reached get no result.
        """
        results: list[CleanResult] = []
        for index, item in enumerate(items):
            if cancel is not None and cancel.is_set():
                log.info("Deletion cancelled after %d items", index)
                break
            result = self._process(item, dry_run)
            results.append(result)
            if on_result:
                on_result(index, result)
        return results

    def _process(self, item: Candidate, dry_run: bool) -> CleanResult:
        try:
            target = self.policy.validate(item.path)
        except PathRejected as exc:
            self.audit.record(AuditAction.REJECTED, item.path, item.size_bytes, exc.reason)
            log.warning("Rejected %s: %s", item.path, exc.reason)
            return CleanResult(
                path=item.path,
                size_bytes=item.size_bytes,
                success=False,
                dry_run=dry_run,
                error=exc.reason,
            )

        if dry_run:
            self.audit.record(AuditAction.DRY_RUN, item.path, item.size_bytes)
            return CleanResult(path=item.path, size_bytes=item.size_bytes, success=True, dry_run=True)

        self.audit.record(AuditAction.DELETE_START, item.path, item.size_bytes)
        try:
            shutil.rmtree(target)
        except OSError as exc:
            self.audit.record(AuditAction.DELETE_FAILED, item.path, item.size_bytes, str(exc))
            log.warning("Failed to delete %s: %s", item.path, exc)
            return CleanResult(
                path=item.path,
                size_bytes=item.size_bytes,
                success=False,
                error=str(exc),
            )

        self.audit.record(AuditAction.DELETE_SUCCESS, item.path, item.size_bytes)
        log.info("Deleted %s", item.path)
        return CleanResult(path=item.path, size_bytes=item.size_bytes, success=True)


def summarize(results: Iterable[CleanResult]) -> tuple[int, int, int]:
    """Return (succeeded, failed, freed_bytes) for a batch."""
    succeeded = failed = freed = 0
    for result in results:
        if result.success:
            succeeded += 1
            freed += result.size_bytes
        else:
            failed += 1
    return succeeded, failed, freed
