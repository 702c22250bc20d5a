"""
Batch API - background order exports tracked by id.

Clients start a batch, then poll its status endpoint until it reports
"completed" or "failed".
"""
import math

from fastapi import APIRouter, Depends

from app.api.dependencies import get_batch_tracker
from app.core.config import settings
from app.schemas.batch import BatchCreate, BatchStartResponse
from app.services.batch_tracker import BatchJobTracker

router = APIRouter()


@router.post("/orders/batch", response_model=BatchStartResponse)
def start_batch(
    batch: BatchCreate,
    tracker: BatchJobTracker = Depends(get_batch_tracker),
):
    """
    Start a batch export and return its id immediately.

    The job fetches up to ``maxBatches`` pages of ``batchSize`` orders. An
    optional ``callback_url`` receives the final status payload.
    """
    batch_id = tracker.create_job(
        batch.to_filters(),
        page_size=batch.batch_size,
        max_pages=batch.max_batches,
        callback_url=batch.callback_url,
    )

    return BatchStartResponse(
        batchId=batch_id,
        message="Batch processing started",
        estimatedTime=f"{math.ceil(batch.max_batches * 2)} seconds",
        status_endpoint=f"{settings.API_PREFIX}/orders/batch/{batch_id}/status",
    )


@router.get("/orders/batch/{batch_id}/status")
def get_batch_status(
    batch_id: str,
    tracker: BatchJobTracker = Depends(get_batch_tracker),
):
    """
    Current state of a batch.

    Returns:
        {
            "success": true,
            "batchId": "1718031234567",
            "status": "processing" | "completed" | "failed",
            "processed": 1200,
            "total": 1200,
            "startTime": "...",
            "completedTime": "...",  // terminal states only
            "error": "...",          // failed only
            "warning": "...",        // completed with partial data
            "data": [...]            // completed only, first JOB_SAMPLE_CAP orders
        }
    """
    state = tracker.get_job(batch_id)
    return {"success": True, **state.to_status()}


@router.get("/orders/batch")
def list_batches(tracker: BatchJobTracker = Depends(get_batch_tracker)):
    """Known batches, oldest first, without their order samples."""
    return {
        "success": True,
        "batches": [state.to_status(include_data=False) for state in tracker.list_jobs()],
    }


@router.delete("/orders/batch")
def clear_finished_batches(tracker: BatchJobTracker = Depends(get_batch_tracker)):
    """Forget every completed or failed batch."""
    return {"success": True, "cleared": tracker.clear_terminal()}
