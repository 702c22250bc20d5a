"""
Ports consumed by the order services.

Only task execution is abstracted; the Shopify connector is injected
directly through FastAPI dependencies.
"""
from app.ports.tasks import TaskRunner, TaskStatus

__all__ = ["TaskRunner", "TaskStatus"]
