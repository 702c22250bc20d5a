"""
Batch Job Tracker - asynchronous order exports that clients poll.

Each job runs one collection on the task runner and publishes exactly one
terminal state into the registry. The registry is held in memory only;
finished jobs are swept after JOB_RETENTION_SECONDS.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core.errors import NotFoundError, UpstreamError
from app.core.ids import new_batch_id
from app.ports.tasks import TaskRunner
from app.schemas.order import Order, OrderFilters
from app.services.notifier import WebhookNotifier
from app.services.order_collector import OrderCollector

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat().replace("+00:00", "Z") if dt else None


@dataclass(frozen=True)
class JobState:
    """Snapshot of one job. A new value replaces the old one on each transition."""

    job_id: str
    status: JobStatus
    start_time: datetime
    processed: int = 0
    total: int = 0
    completed_time: Optional[datetime] = None
    error: Optional[str] = None
    warning: Optional[str] = None
    data: Optional[Tuple[Order, ...]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_status(self, include_data: bool = True) -> Dict[str, Any]:
        """
        Status payload as served by GET /orders/batch/{id}/status.

        Optional keys (completedTime, error, warning, data) are present only
        when set.
        """
        payload: Dict[str, Any] = {
            "batchId": self.job_id,
            "status": self.status.value,
            "processed": self.processed,
            "total": self.total,
            "startTime": _iso(self.start_time),
        }
        if self.completed_time is not None:
            payload["completedTime"] = _iso(self.completed_time)
        if self.error is not None:
            payload["error"] = self.error
        if self.warning is not None:
            payload["warning"] = self.warning
        if include_data and self.data is not None:
            payload["data"] = [order.model_dump() for order in self.data]
        return payload


class JobRegistry:
    """
    Mapping of job id to JobState, guarded by a lock.

    States are frozen and swapped whole, so readers never observe a
    partially written entry.
    """

    def __init__(self):
        self._jobs: Dict[str, JobState] = {}
        self._lock = threading.Lock()

    def register(self, state: JobState) -> None:
        with self._lock:
            if state.job_id in self._jobs:
                raise ValueError(f"Job {state.job_id} already registered")
            self._jobs[state.job_id] = state

    def get(self, job_id: str) -> Optional[JobState]:
        with self._lock:
            return self._jobs.get(job_id)

    def finish(self, state: JobState) -> bool:
        """
        Apply the terminal transition for a processing job.

        Returns:
            False if the job is unknown or already terminal (state unchanged)

        Raises:
            ValueError: If ``state`` is not terminal
        """
        if not state.is_terminal:
            raise ValueError(f"Cannot finish job {state.job_id} with status {state.status.value}")

        with self._lock:
            current = self._jobs.get(state.job_id)
            if current is None or current.is_terminal:
                logger.warning(
                    f"Ignoring {state.status.value} for job {state.job_id}: "
                    f"{'unknown' if current is None else 'already ' + current.status.value}"
                )
                return False
            self._jobs[state.job_id] = state
            return True

    def values(self) -> List[JobState]:
        with self._lock:
            return list(self._jobs.values())

    def remove_where(self, predicate: Callable[[JobState], bool]) -> List[str]:
        """Remove matching jobs and return their ids."""
        with self._lock:
            doomed = [job_id for job_id, state in self._jobs.items() if predicate(state)]
            for job_id in doomed:
                del self._jobs[job_id]
            return doomed

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


class BatchJobTracker:
    """
    Creates batch jobs, runs them in the background, serves their state.

    Usage:
        tracker = BatchJobTracker(OrderCollector(connector), InlineTaskRunner())
        job_id = tracker.create_job(filters, page_size=100, max_pages=50)
        tracker.get_job(job_id).status  # "processing" until the run finishes
    """

    def __init__(
        self,
        collector: OrderCollector,
        task_runner: TaskRunner,
        sample_cap: int = 1000,
        retention_seconds: int = 3600,
        notifier: Optional[WebhookNotifier] = None,
        registry: Optional[JobRegistry] = None,
        id_factory: Callable[[], str] = new_batch_id,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.collector = collector
        self.task_runner = task_runner
        self.sample_cap = sample_cap
        self.retention_seconds = retention_seconds
        self.notifier = notifier
        self.registry = registry or JobRegistry()
        self._new_id = id_factory
        self._now = clock or (lambda: datetime.now(timezone.utc))

    def create_job(
        self,
        filters: OrderFilters,
        page_size: int,
        max_pages: int,
        callback_url: Optional[str] = None,
    ) -> str:
        """
        Register a processing job and launch its collection.

        Returns immediately with the job id; the collection runs on the
        task runner.
        """
        self.sweep_expired()

        job_id = self._new_id()
        self.registry.register(
            JobState(job_id=job_id, status=JobStatus.PROCESSING, start_time=self._now())
        )
        logger.info(
            f"Batch {job_id} started: page_size={page_size} max_pages={max_pages}"
        )

        self.task_runner.submit(
            self._run,
            job_id,
            filters,
            page_size,
            max_pages,
            callback_url,
            task_id=job_id,
        )
        return job_id

    def get_job(self, job_id: str) -> JobState:
        """
        Current state of a job.

        Raises:
            NotFoundError: If the id was never issued or has been swept
        """
        state = self.registry.get(job_id)
        if state is None:
            raise NotFoundError("Batch not found")
        return state

    def list_jobs(self) -> List[JobState]:
        self.sweep_expired()
        return sorted(self.registry.values(), key=lambda s: s.start_time)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> JobState:
        """Block until the job's background run returns, then read its state."""
        state = self.get_job(job_id)
        if state.is_terminal:
            return state
        self.task_runner.result(job_id, timeout=timeout)
        return self.get_job(job_id)

    def clear_terminal(self) -> int:
        """Drop every completed or failed job."""
        removed = self.registry.remove_where(lambda s: s.is_terminal)
        for job_id in removed:
            self.task_runner.forget(job_id)
        return len(removed)

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """
        Drop terminal jobs that finished more than ``retention_seconds`` ago.

        Processing jobs are never evicted. A retention of 0 disables expiry.
        """
        if not self.retention_seconds or self.retention_seconds <= 0:
            return 0

        cutoff = (now or self._now()) - timedelta(seconds=self.retention_seconds)
        removed = self.registry.remove_where(
            lambda s: s.is_terminal
            and s.completed_time is not None
            and s.completed_time < cutoff
        )
        for job_id in removed:
            self.task_runner.forget(job_id)
        if removed:
            logger.info(f"Swept {len(removed)} expired batch job(s)")
        return len(removed)

    def _run(
        self,
        job_id: str,
        filters: OrderFilters,
        page_size: int,
        max_pages: int,
        callback_url: Optional[str],
    ) -> None:
        """Background body: collect, then write one terminal state."""
        started = self.get_job(job_id).start_time

        try:
            result = self.collector.collect(filters, page_size=page_size, max_pages=max_pages)
            if result.failed_on_first_page:
                raise UpstreamError(result.error)

            warning = None
            if result.truncated:
                warning = (
                    f"Collection stopped after {result.pages_fetched} page(s): {result.error}"
                )
                logger.warning(f"Batch {job_id} returned partial data. {warning}")

            orders = result.orders
            state = JobState(
                job_id=job_id,
                status=JobStatus.COMPLETED,
                start_time=started,
                processed=len(orders),
                total=len(orders),
                completed_time=self._now(),
                warning=warning,
                data=tuple(orders[: self.sample_cap]),
            )
            logger.info(f"Batch {job_id} completed with {len(orders)} orders")
        except Exception as e:
            logger.error(f"Batch {job_id} failed: {e}")
            state = JobState(
                job_id=job_id,
                status=JobStatus.FAILED,
                start_time=started,
                completed_time=self._now(),
                error=str(e),
            )

        self.registry.finish(state)

        if callback_url and self.notifier:
            self.notifier.notify(callback_url, state.to_status(include_data=False))
