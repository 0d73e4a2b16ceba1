"""
Import Job Orchestrator

Coordinates the scheduled whitelist import:
- Fetch the registration range from Google Sheets
- Map rows to KYC entries and deduplicate
- Submit the batch to the KYC store
- Record the outcome in the run history
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional, Tuple
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import Settings
from db.connection import DatabaseConnection
from whitelist_import.extract import GoogleSheetsExtractor
from whitelist_import.history import ImportRun, RunHistory, STATUS_FAILED, STATUS_SUCCESS
from whitelist_import.load import KYCService, PostgresKYCService
from whitelist_import.transform import map_rows

logger = logging.getLogger(__name__)


class ImportFailedError(RuntimeError):
    """Raised when an import run is abandoned."""


class JobState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MAPPING = "mapping"
    SUBMITTING = "submitting"


class ImportJob:
    """
    Runs one import cycle per call.

    Workflow:
    1. Fetch the fixed cell range from the spreadsheet
    2. Map every row to a KYC entry and collapse duplicates
    3. Submit the whole set to the KYC store in one call

    A run either submits the full batch or nothing. At most one run
    executes at a time; a trigger arriving while a run is in progress is
    skipped and logged.
    """

    def __init__(
        self,
        settings: Settings,
        extractor: GoogleSheetsExtractor,
        kyc_service: KYCService,
        history: Optional[RunHistory] = None,
    ):
        """
        Initialize import job.

        Args:
            settings: Configuration object with the spreadsheet ID and range
            extractor: Authenticated spreadsheet source, reused across runs
            kyc_service: KYC storage collaborator
            history: Run history to record outcomes in
        """
        self.settings = settings
        self.extractor = extractor
        self.kyc_service = kyc_service
        self.history = history or RunHistory()
        self.state = JobState.IDLE
        self._run_guard = threading.Lock()

    def run(self) -> Optional[ImportRun]:
        """
        Execute one import cycle.

        Returns:
            The completed ImportRun, or None if the trigger was skipped

        Raises:
            ImportFailedError: If fetching, mapping or submitting fails
        """
        if not self._run_guard.acquire(blocking=False):
            logger.warning("Previous import is still running, skipping this trigger")
            self.history.record_skipped("previous run still in progress")
            return None

        run = self.history.start_run()
        metrics = {}

        try:
            self.state = JobState.FETCHING
            rows = self.extractor.fetch_range(self.settings.SPREADSHEET_ID, self.settings.SHEET_RANGE)

            self.state = JobState.MAPPING
            entries, metrics = map_rows(rows)

            self.state = JobState.SUBMITTING
            self.kyc_service.insert(entries)

            self.history.finish_run(run, STATUS_SUCCESS, metrics)
            logger.info(
                f"Imported new data: {metrics['unique_entries']} entries "
                f"from {metrics['total_rows']} rows in {run.duration_seconds:.2f}s"
            )
            return run

        except Exception as e:
            logger.error(f"Import run {run.run_id} failed: {e}", exc_info=True)
            self.history.finish_run(run, STATUS_FAILED, metrics, str(e))
            raise ImportFailedError("unable to load") from e

        finally:
            self.state = JobState.IDLE
            self._run_guard.release()


class ImportScheduler:
    """
    Triggers an import job at a fixed rate.

    Ticks are measured from scheduler start, independent of how long each
    run takes, and handed to a shared worker pool. Overlap is handled by
    the job's run guard.
    """

    def __init__(
        self,
        job: ImportJob,
        interval_seconds: float = 300,
        max_workers: int = 2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.job = job
        self.interval_seconds = interval_seconds
        self.max_workers = max_workers
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    def start(self) -> None:
        """Start ticking; the first run is triggered immediately."""
        if self._thread is not None:
            raise RuntimeError("Scheduler already started")

        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="whitelist-import"
        )
        self._thread = threading.Thread(target=self._loop, name="import-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Import scheduler started, interval {self.interval_seconds}s")

    def stop(self, wait: bool = True) -> None:
        """Stop ticking and shut down the worker pool."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
        logger.info("Import scheduler stopped")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        started = self._clock()
        ticks = 0

        while not self._stop_event.is_set():
            self._executor.submit(self._run_tick)
            ticks, delay = self._next_tick(ticks, started, self._clock())
            if self._stop_event.wait(delay):
                break

    def _next_tick(self, ticks: int, started: float, now: float) -> Tuple[int, float]:
        """
        Pick the next tick after tick number ``ticks`` has been submitted.

        Ticks whose time passed during a stall are dropped rather than
        fired back to back.

        Returns:
            Tuple of (next tick number, seconds until it is due)
        """
        due = int((now - started) // self.interval_seconds) + 1
        missed = due - (ticks + 1)
        if missed > 0:
            logger.warning(f"Import scheduler fell behind, skipping {missed} missed ticks")

        ticks = max(ticks + 1, due)
        return ticks, max(0.0, started + ticks * self.interval_seconds - now)

    def _run_tick(self) -> None:
        try:
            self.job.run()
        except ImportFailedError as e:
            logger.info(f"Scheduled import did not complete ({e}), next run on schedule")
        except Exception:
            logger.exception("Unexpected error in scheduled import")


def setup_logging(log_file: str = "logs/whitelist_import.log", level: str = "INFO") -> None:
    """
    Configure logging for the import job.

    Args:
        log_file: Path to log file
        level: Console log level
    """
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # File handler
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)


def main() -> None:
    """Main entry point for the scheduled import."""
    setup_logging(Settings.LOG_FILE, Settings.LOG_LEVEL)

    extractor = None
    scheduler = None
    try:
        settings = Settings()
        logger.info(f"Starting whitelist import with {settings}")

        extractor = GoogleSheetsExtractor(settings.GOOGLE_SHEETS_CLIENT_SECRET)
        DatabaseConnection.initialize_from_settings(settings)

        job = ImportJob(settings, extractor, PostgresKYCService())
        scheduler = ImportScheduler(job, interval_seconds=settings.IMPORT_INTERVAL_SECONDS)
        scheduler.start()

        while scheduler.is_running():
            time.sleep(1)

    except KeyboardInterrupt:
        logger.info("Shutdown requested")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if scheduler is not None:
            scheduler.stop()
        if extractor is not None:
            extractor.close()
        DatabaseConnection.close_all()


if __name__ == "__main__":
    main()
