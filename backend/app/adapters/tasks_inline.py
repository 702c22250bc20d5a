"""
Task runner adapter for batch collections.

"inline" runs the collection inside create_job (tests, scripts); "thread"
hands it to a small worker pool so POST /orders/batch returns at once.
"""
import logging
import threading
import uuid
from typing import Any, Callable, Optional, Dict
from concurrent.futures import ThreadPoolExecutor, Future, TimeoutError as FutureTimeout
from app.ports.tasks import TaskRunner, TaskStatus

logger = logging.getLogger(__name__)


class InlineTaskRunner(TaskRunner):
    """
    Runs submitted callables inline or on a ThreadPoolExecutor.

    Task bookkeeping is guarded by a lock: worker threads update it while
    request threads read it.
    """

    def __init__(self, mode: str = "thread", max_workers: int = 4):
        """
        Initialize task runner.

        Args:
            mode: Execution mode ("inline" or "thread")
            max_workers: Max thread pool workers (only for thread mode)
        """
        if mode not in ("inline", "thread"):
            raise ValueError(f"Unknown task runner mode: {mode}")

        self.mode = mode
        self.executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="batch")
            if mode == "thread"
            else None
        )
        self._tasks: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def submit(
        self,
        func: Callable,
        *args,
        task_id: Optional[str] = None,
        **kwargs,
    ) -> str:
        """Submit a task for execution."""
        task_id = task_id or str(uuid.uuid4())

        if self.mode == "inline":
            # Execute immediately
            try:
                result = func(*args, **kwargs)
                self._set(task_id, status=TaskStatus.COMPLETED, result=result, error=None)
            except Exception as e:
                logger.exception(f"Inline task {task_id} failed")
                self._set(task_id, status=TaskStatus.FAILED, result=None, error=str(e))
            return task_id

        # Execute in thread pool
        def _wrapper():
            self._update(task_id, status=TaskStatus.RUNNING)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"Background task {task_id} failed")
                self._update(task_id, status=TaskStatus.FAILED, error=str(e))
                raise
            self._update(task_id, status=TaskStatus.COMPLETED, result=result)
            return result

        # Entry and future are published together; the worker waits on the lock.
        with self._lock:
            future = self.executor.submit(_wrapper)
            self._tasks[task_id] = {
                "status": TaskStatus.PENDING,
                "result": None,
                "error": None,
                "future": future,
            }
        return task_id

    def status(self, task_id: str) -> TaskStatus:
        """Get task status."""
        return self._get(task_id)["status"]

    def result(self, task_id: str, timeout: Optional[float] = None) -> Any:
        """Get task result (blocking)."""
        task = self._get(task_id)

        future: Optional[Future] = task.get("future")
        if future is not None:
            try:
                return future.result(timeout=timeout)
            except FutureTimeout as e:
                raise TimeoutError(f"Task {task_id} still running after {timeout}s") from e
            except Exception as e:
                raise RuntimeError(f"Task failed: {e}") from e

        if task["status"] == TaskStatus.FAILED:
            raise RuntimeError(f"Task failed: {task['error']}")

        return task["result"]

    def forget(self, task_id: str) -> None:
        with self._lock:
            self._tasks.pop(task_id, None)

    def shutdown(self, wait: bool = True):
        """Shutdown executor (cleanup)."""
        if self.executor:
            self.executor.shutdown(wait=wait)

    def _get(self, task_id: str) -> Dict[str, Any]:
        with self._lock:
            if task_id not in self._tasks:
                raise KeyError(f"Task {task_id} not found")
            return dict(self._tasks[task_id])

    def _set(self, task_id: str, **values):
        with self._lock:
            self._tasks[task_id] = values

    def _update(self, task_id: str, **values):
        with self._lock:
            task = self._tasks.get(task_id)
            if task is not None:
                task.update(values)
