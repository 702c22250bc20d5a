"""
Completion webhooks for batch jobs.
"""
import logging
from typing import Any, Dict, Optional

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)


class WebhookNotifier:
    """POSTs a finished job's status payload to the caller's callback_url."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout or settings.CALLBACK_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def notify(self, callback_url: str, payload: Dict[str, Any]) -> bool:
        """
        Deliver the payload once.

        The job is already terminal when this runs, so delivery failures are
        logged and reported through the return value only.

        Returns:
            True if the callback answered with a 2xx status
        """
        try:
            response = self.session.post(callback_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Batch {payload.get('batchId')} callback to {callback_url} failed: {e}")
            return False

        logger.info(f"Batch {payload.get('batchId')} completed, notified {callback_url}")
        return True
