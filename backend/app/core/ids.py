"""
Batch job identifiers - timestamp-derived, unique per process.

Key principles:
- Ids are millisecond epoch timestamps rendered as strings ("1718031234567")
- Strictly increasing: two jobs created in the same millisecond still differ
- Safe to call from request handlers running on several threads
"""
import threading
import time
from typing import Callable, Optional


class BatchIdGenerator:
    """
    Issues strictly increasing millisecond-timestamp ids.

    Examples:
        clock at 1718031234567 -> "1718031234567"
        same millisecond again -> "1718031234568"
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


new_batch_id = BatchIdGenerator()
