"""
Tests for run history and health reporting.
"""

from whitelist_import.history import (
    RunHistory,
    STATUS_FAILED,
    STATUS_RUNNING,
    STATUS_SKIPPED,
    STATUS_SUCCESS,
)


def _complete(history, status, metrics=None, error=None):
    run = history.start_run()
    return history.finish_run(run, status, metrics, error)


class TestRunHistory:

    def test_start_and_finish(self):
        history = RunHistory()

        run = history.start_run()
        assert run.status == STATUS_RUNNING
        assert run.duration_seconds == 0.0

        history.finish_run(run, STATUS_SUCCESS, {
            "total_rows": 10,
            "degraded_rows": 2,
            "unique_entries": 7,
            "duplicates_removed": 3,
        })

        assert run.status == STATUS_SUCCESS
        assert run.finished_at is not None
        assert run.submitted_entries == 7
        assert run.degraded_rate == 20.0

    def test_run_ids_increase(self):
        history = RunHistory()

        first = history.start_run()
        second = history.record_skipped("busy")

        assert second.run_id == first.run_id + 1

    def test_bounded(self):
        history = RunHistory(max_runs=3)
        for _ in range(5):
            _complete(history, STATUS_SUCCESS)

        assert len(history.runs()) == 3
        assert history.health_status()["total_runs"] == 5

    def test_latest_ignores_skipped(self):
        history = RunHistory()
        run = _complete(history, STATUS_FAILED, error="boom")
        history.record_skipped("busy")

        assert history.latest() is run


class TestHealthStatus:

    def test_no_runs(self):
        health = RunHistory().health_status()

        assert health["healthy"] is False
        assert health["last_status"] is None
        assert health["consecutive_failures"] == 0

    def test_last_run_failed(self):
        history = RunHistory()
        _complete(history, STATUS_SUCCESS)
        _complete(history, STATUS_FAILED, error="sheet unavailable")
        _complete(history, STATUS_FAILED, error="sheet unavailable")

        health = history.health_status()

        assert health["healthy"] is False
        assert health["last_status"] == STATUS_FAILED
        assert health["consecutive_failures"] == 2
        assert health["last_error"] == "sheet unavailable"
        assert health["last_success_time"] is not None
        assert health["failed_runs"] == 2

    def test_recovered(self):
        history = RunHistory()
        _complete(history, STATUS_FAILED, error="boom")
        _complete(history, STATUS_SUCCESS)
        history.record_skipped("busy")

        health = history.health_status()

        assert health["healthy"] is True
        assert health["consecutive_failures"] == 0
        assert health["skipped_runs"] == 1
        assert health["last_status"] == STATUS_SUCCESS
