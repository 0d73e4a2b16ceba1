"""
Import Run History & Health

Keeps a bounded in-memory record of recent import runs so that a failed
last run can be told apart from a successful one.
"""

import itertools
import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


@dataclass
class ImportRun:
    """Outcome of a single import run."""
    run_id: int
    started_at: datetime
    status: str = STATUS_RUNNING
    finished_at: Optional[datetime] = None
    total_rows: int = 0
    degraded_rows: int = 0
    submitted_entries: int = 0
    duplicates_removed: int = 0
    error_message: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        """Run duration, 0 while the run is in progress."""
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def degraded_rate(self) -> float:
        """Degraded rows as percentage of fetched rows."""
        if self.total_rows == 0:
            return 0.0
        return (self.degraded_rows / self.total_rows) * 100


class RunHistory:
    """Thread-safe, bounded history of import runs."""

    def __init__(self, max_runs: int = 100):
        self._runs: Deque[ImportRun] = deque(maxlen=max_runs)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._total_runs = 0
        self._failed_runs = 0

    def start_run(self) -> ImportRun:
        """Register a new run in progress."""
        run = ImportRun(run_id=next(self._ids), started_at=datetime.now(timezone.utc))
        with self._lock:
            self._runs.append(run)
            self._total_runs += 1
        return run

    def finish_run(
        self,
        run: ImportRun,
        status: str,
        metrics: Optional[Dict[str, int]] = None,
        error_message: Optional[str] = None,
    ) -> ImportRun:
        """
        Close a run with its final status and metrics.

        Args:
            run: Run returned by start_run()
            status: STATUS_SUCCESS or STATUS_FAILED
            metrics: Transform/load metrics collected during the run
            error_message: Failure details
        """
        metrics = metrics or {}
        with self._lock:
            run.status = status
            run.finished_at = datetime.now(timezone.utc)
            run.total_rows = metrics.get("total_rows", run.total_rows)
            run.degraded_rows = metrics.get("degraded_rows", run.degraded_rows)
            run.submitted_entries = metrics.get("unique_entries", run.submitted_entries)
            run.duplicates_removed = metrics.get("duplicates_removed", run.duplicates_removed)
            run.error_message = error_message
            if status == STATUS_FAILED:
                self._failed_runs += 1
        logger.debug(f"Run {run.run_id} finished with status {status}")
        return run

    def record_skipped(self, reason: str) -> ImportRun:
        """Record a trigger that did not run."""
        now = datetime.now(timezone.utc)
        run = ImportRun(
            run_id=next(self._ids),
            started_at=now,
            finished_at=now,
            status=STATUS_SKIPPED,
            error_message=reason,
        )
        with self._lock:
            self._runs.append(run)
            self._total_runs += 1
        return run

    def runs(self) -> List[ImportRun]:
        """Return recorded runs, oldest first."""
        with self._lock:
            return list(self._runs)

    def latest(self) -> Optional[ImportRun]:
        """Return the most recent completed (success or failed) run."""
        with self._lock:
            for run in reversed(self._runs):
                if run.status in (STATUS_SUCCESS, STATUS_FAILED):
                    return run
        return None

    def health_status(self) -> Dict[str, Any]:
        """
        Summarize import health.

        Returns:
            Dictionary with the last outcome, last success/failure times and
            the current streak of consecutive failures
        """
        with self._lock:
            runs = list(self._runs)
            total_runs = self._total_runs
            failed_runs = self._failed_runs

        completed = [r for r in runs if r.status in (STATUS_SUCCESS, STATUS_FAILED)]
        last = completed[-1] if completed else None
        last_success = next((r for r in reversed(completed) if r.status == STATUS_SUCCESS), None)
        last_failure = next((r for r in reversed(completed) if r.status == STATUS_FAILED), None)

        consecutive_failures = 0
        for run in reversed(completed):
            if run.status != STATUS_FAILED:
                break
            consecutive_failures += 1

        return {
            "healthy": last is not None and last.status == STATUS_SUCCESS,
            "last_status": last.status if last else None,
            "last_run_time": last.finished_at if last else None,
            "last_success_time": last_success.finished_at if last_success else None,
            "last_failure_time": last_failure.finished_at if last_failure else None,
            "last_error": last_failure.error_message if last_failure else None,
            "consecutive_failures": consecutive_failures,
            "total_runs": total_runs,
            "failed_runs": failed_runs,
            "skipped_runs": sum(1 for r in runs if r.status == STATUS_SKIPPED),
        }
