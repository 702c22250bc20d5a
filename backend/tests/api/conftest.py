"""
Pytest fixtures for API integration tests.

Provides a FastAPI test client wired to a fake page fetcher and a batch
tracker that runs jobs inline.
"""
import pytest
from fastapi.testclient import TestClient

from app.adapters.tasks_inline import InlineTaskRunner
from app.api.dependencies import get_batch_tracker, get_connector
from app.main import app
from app.services.batch_tracker import BatchJobTracker
from app.services.order_collector import OrderCollector


@pytest.fixture(scope="function")
def batch_tracker(fake_connector):
    """
    Tracker whose jobs run to completion inside create_job.

    Sample cap is kept small so truncation is visible in responses.
    """
    return BatchJobTracker(
        OrderCollector(fake_connector),
        InlineTaskRunner(mode="inline"),
        sample_cap=2,
    )


@pytest.fixture(scope="function")
def client(fake_connector, batch_tracker):
    """
    FastAPI test client with connector and tracker dependency overrides.
    """
    app.dependency_overrides[get_connector] = lambda: fake_connector
    app.dependency_overrides[get_batch_tracker] = lambda: batch_tracker

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
