"""
Status poller - waits for a batch job to reach a terminal state.

Polling is read-only: cancelling stops the loop on this side and leaves the
server-side collection running.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.core.errors import AppError

logger = logging.getLogger(__name__)

StatusSource = Callable[[str], Awaitable[Dict[str, Any]]]


@dataclass
class PollOutcome:
    """How polling ended for one job."""

    job_id: str
    status: Optional[str] = None
    orders: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None
    cancelled: bool = False
    last_payload: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "completed" and not self.cancelled and self.error is None


class StatusPoller:
    """
    Polls ``fetch_status(job_id)`` every ``interval`` seconds.

    Usage:
        poller = StatusPoller(client.check_batch_status, interval=2.0)
        outcome = await poller.poll(batch_id)
        if outcome.succeeded:
            show(outcome.orders)
    """

    def __init__(
        self,
        fetch_status: StatusSource,
        interval: float = 2.0,
        on_update: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        self.fetch_status = fetch_status
        self.interval = interval
        self.on_update = on_update
        self._cancelled = asyncio.Event()

    def cancel(self) -> None:
        """Stop polling at the next check. No server-side effect."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def poll(self, job_id: str) -> PollOutcome:
        """
        Poll until the job completes, fails, disappears, or polling is cancelled.

        The first status check happens immediately; later checks wait
        ``interval`` seconds. Errors from ``fetch_status`` (including unknown
        ids) and from ``on_update`` end polling and are returned in
        ``PollOutcome.error``.
        """
        last_payload: Optional[Dict[str, Any]] = None

        while not self.cancelled:
            try:
                payload = await self.fetch_status(job_id)
            except AppError as e:
                logger.warning(f"Stopped polling batch {job_id}: {e.message}")
                return PollOutcome(job_id=job_id, error=e.message, last_payload=last_payload)
            except Exception as e:
                logger.warning(f"Stopped polling batch {job_id}: {e}")
                return PollOutcome(job_id=job_id, error=str(e), last_payload=last_payload)

            last_payload = payload
            if self.on_update:
                try:
                    self.on_update(payload)
                except Exception as e:
                    logger.warning(f"Status callback for batch {job_id} raised: {e}")
                    return PollOutcome(
                        job_id=job_id,
                        status=payload.get("status"),
                        error=f"Status callback failed: {e}",
                        last_payload=payload,
                    )

            status = payload.get("status")
            if status == "completed":
                return PollOutcome(
                    job_id=job_id,
                    status=status,
                    orders=list(payload.get("data") or []),
                    last_payload=payload,
                )
            if status == "failed":
                return PollOutcome(
                    job_id=job_id,
                    status=status,
                    error=payload.get("error") or "Batch processing failed",
                    last_payload=payload,
                )
            if status != "processing":
                return PollOutcome(
                    job_id=job_id,
                    status=status,
                    error=f"Unexpected batch status: {status}",
                    last_payload=payload,
                )

            try:
                await asyncio.wait_for(self._cancelled.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

        status = last_payload.get("status") if last_payload else None
        return PollOutcome(job_id=job_id, status=status, cancelled=True, last_payload=last_payload)


def tracker_status_source(tracker) -> StatusSource:
    """Adapt an in-process BatchJobTracker to the poller's async status source."""

    async def fetch_status(job_id: str) -> Dict[str, Any]:
        return {"success": True, **tracker.get_job(job_id).to_status()}

    return fetch_status
