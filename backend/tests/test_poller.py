"""
Tests for the batch status poller.
"""
import pytest

from app.adapters.tasks_inline import InlineTaskRunner
from app.client.poller import StatusPoller, tracker_status_source
from app.core.errors import NotFoundError
from app.schemas.order import OrderFilters
from app.services.batch_tracker import BatchJobTracker
from app.services.order_collector import OrderCollector


def scripted_source(*payloads):
    """Status source returning the given payloads in order; exceptions are raised."""
    calls = []

    async def fetch_status(job_id):
        calls.append(job_id)
        payload = payloads[min(len(calls), len(payloads)) - 1]
        if isinstance(payload, Exception):
            raise payload
        return payload

    fetch_status.calls = calls
    return fetch_status


PROCESSING = {"success": True, "batchId": "1", "status": "processing", "processed": 0, "total": 0}


class TestStatusPoller:
    @pytest.mark.asyncio
    async def test_polls_until_completed(self):
        completed = {**PROCESSING, "status": "completed", "processed": 2, "total": 2,
                     "data": [{"order_id": "#1"}, {"order_id": "#2"}]}
        source = scripted_source(PROCESSING, PROCESSING, completed)
        updates = []

        outcome = await StatusPoller(source, interval=0.01, on_update=updates.append).poll("1")

        assert outcome.succeeded is True
        assert outcome.status == "completed"
        assert [o["order_id"] for o in outcome.orders] == ["#1", "#2"]
        assert len(source.calls) == 3
        assert [u["status"] for u in updates] == ["processing", "processing", "completed"]

    @pytest.mark.asyncio
    async def test_failed_job(self):
        source = scripted_source({**PROCESSING, "status": "failed", "error": "HTTP error! status: 500"})

        outcome = await StatusPoller(source, interval=0.01).poll("1")

        assert outcome.succeeded is False
        assert outcome.status == "failed"
        assert outcome.error == "HTTP error! status: 500"
        assert outcome.orders == []

    @pytest.mark.asyncio
    async def test_unknown_job_stops_polling(self):
        source = scripted_source(NotFoundError("Batch not found"))

        outcome = await StatusPoller(source, interval=0.01).poll("missing")

        assert outcome.error == "Batch not found"
        assert outcome.status is None
        assert len(source.calls) == 1

    @pytest.mark.asyncio
    async def test_transport_error_stops_polling(self):
        source = scripted_source(PROCESSING, ConnectionError("server went away"))

        outcome = await StatusPoller(source, interval=0.01).poll("1")

        assert outcome.error == "server went away"
        assert outcome.last_payload == PROCESSING

    @pytest.mark.asyncio
    async def test_cancel_stops_at_next_wait(self):
        source = scripted_source(PROCESSING)
        poller = StatusPoller(source, interval=60)
        poller.on_update = lambda payload: poller.cancel()

        outcome = await poller.poll("1")

        assert outcome.cancelled is True
        assert outcome.succeeded is False
        assert outcome.status == "processing"
        assert len(source.calls) == 1

    @pytest.mark.asyncio
    async def test_callback_error_stops_polling(self):
        source = scripted_source(PROCESSING, PROCESSING)

        def broken_callback(payload):
            raise ValueError("render failed")

        outcome = await StatusPoller(source, interval=0.01, on_update=broken_callback).poll("1")

        assert outcome.error == "Status callback failed: render failed"
        assert outcome.status == "processing"
        assert outcome.succeeded is False
        assert len(source.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_status(self):
        source = scripted_source({**PROCESSING, "status": "paused"})

        outcome = await StatusPoller(source, interval=0.01).poll("1")

        assert "Unexpected batch status" in outcome.error


class TestTrackerStatusSource:
    @pytest.mark.asyncio
    async def test_polls_local_tracker(self, fake_connector, make_page):
        fake_connector.pages = [make_page(2, "c1"), make_page(1)]
        tracker = BatchJobTracker(OrderCollector(fake_connector), InlineTaskRunner(mode="inline"))
        job_id = tracker.create_job(OrderFilters(), page_size=2, max_pages=5)

        outcome = await StatusPoller(tracker_status_source(tracker), interval=0.01).poll(job_id)

        assert outcome.status == "completed"
        assert len(outcome.orders) == 3

    @pytest.mark.asyncio
    async def test_unknown_id(self, fake_connector):
        tracker = BatchJobTracker(OrderCollector(fake_connector), InlineTaskRunner(mode="inline"))

        outcome = await StatusPoller(tracker_status_source(tracker), interval=0.01).poll("nope")

        assert outcome.error == "Batch not found"
