"""
Task runner port used by the batch job tracker.

The tracker hands each batch collection to a TaskRunner and returns the job
id to the caller straight away. Adapters decide where the collection runs:
in the calling thread (tests, scripts) or on a worker pool (the server).
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional


class TaskStatus(str, Enum):
    """Runner-side state of a submitted collection."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskRunner(ABC):
    """
    Executes batch collections off the request path.

    Job state visible to API clients lives in the tracker's registry, not
    here; runner status only says whether the callable has returned.
    """

    @abstractmethod
    def submit(
        self,
        func: Callable,
        *args,
        task_id: Optional[str] = None,
        **kwargs,
    ) -> str:
        """
        Schedule ``func(*args, **kwargs)``.

        Args:
            func: Collection body to run
            task_id: Id to file the task under; the tracker passes the batch id

        Returns:
            The task id
        """

    @abstractmethod
    def status(self, task_id: str) -> TaskStatus:
        """Raises KeyError for ids never submitted or already forgotten."""

    @abstractmethod
    def result(self, task_id: str, timeout: Optional[float] = None) -> Any:
        """
        Block until the task returns.

        Raises:
            TimeoutError: Still running after ``timeout`` seconds
            RuntimeError: The callable raised
        """

    @abstractmethod
    def forget(self, task_id: str) -> None:
        """Drop bookkeeping for a task whose batch was swept or cleared."""

    @abstractmethod
    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; in-flight tasks finish when ``wait`` is True."""
