"""
Adapters implementing the ports.

InlineTaskRunner covers both inline execution and a local thread pool.
"""
from app.adapters.tasks_inline import InlineTaskRunner

__all__ = ["InlineTaskRunner"]
