import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.tasks_inline import InlineTaskRunner
from app.api import batches, health, orders
from app.api.dependencies import build_collector
from app.api.errors import register_exception_handlers
from app.connectors.shopify import ShopifyConnector
from app.core.config import settings
from app.core.logging_config import setup_logging
from app.services.batch_tracker import BatchJobTracker
from app.services.notifier import WebhookNotifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the connector, worker pool and job registry for the app's lifetime."""
    connector = ShopifyConnector()
    runner = InlineTaskRunner(mode=settings.TASK_RUNNER_MODE, max_workers=settings.TASK_WORKERS)
    logger.info(
        f"Starting {settings.PROJECT_NAME} {settings.VERSION} ({settings.ENVIRONMENT}), "
        f"task runner: {runner.mode}"
    )

    app.state.connector = connector
    app.state.task_runner = runner
    app.state.batch_tracker = BatchJobTracker(
        build_collector(connector),
        runner,
        sample_cap=settings.JOB_SAMPLE_CAP,
        retention_seconds=settings.JOB_RETENTION_SECONDS,
        notifier=WebhookNotifier(),
    )
    try:
        yield
    finally:
        # In-flight batches are not cancelled; wait=False lets shutdown proceed.
        runner.shutdown(wait=False)
        connector.close()


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(orders.router, prefix=settings.API_PREFIX, tags=["orders"])
    app.include_router(batches.router, prefix=settings.API_PREFIX, tags=["batches"])

    return app


app = create_app()
