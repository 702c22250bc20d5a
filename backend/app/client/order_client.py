"""
Async HTTP client for the orders dashboard API.

Wraps the list, CSV, batch and health endpoints with httpx and keeps a
local record of the batches it has started.
"""
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

import httpx

from app.client.poller import PollOutcome, StatusPoller
from app.core.errors import NotFoundError

logger = logging.getLogger(__name__)

FILTER_KEYS = (
    "createdAtMin",
    "createdAtMax",
    "dateRange",
    "financialStatus",
    "fulfillmentStatus",
    "sortKey",
    "reverse",
)


class ClientError(Exception):
    """Raised when the API answers with an error or an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Drop blank values and render booleans the way the API parses them."""
    cleaned = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
            continue
        text = str(value).strip()
        if text:
            cleaned[key] = text
    return cleaned


def _date_part(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value[:10]


class OrderClient:
    """
    Client for the orders API.

    Usage:
        async with OrderClient("http://localhost:8000") as client:
            result = await client.fetch_orders({"financialStatus": "paid"})
            batch = await client.start_batch({"batchSize": 100})
            outcome = await client.wait_for_batch(batch["batchId"])
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_prefix = api_prefix.rstrip("/")
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self.batches: Dict[str, Dict[str, Any]] = {}

    async def __aenter__(self) -> "OrderClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.api_prefix}{path}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ClientError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise ClientError(self._error_message(response), response.status_code)
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP error! status: {response.status_code}"

        if isinstance(body, dict):
            if body.get("error"):
                return str(body["error"])
            if body.get("detail"):
                return str(body["detail"])
        return f"HTTP error! status: {response.status_code}"

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise ClientError("Response was not valid JSON", response.status_code) from e
        if not isinstance(body, dict):
            raise ClientError("Unexpected response shape", response.status_code)
        if body.get("success") is False:
            raise ClientError(str(body.get("error") or "Request failed"), response.status_code)
        return body

    async def fetch_orders(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET /orders.

        Returns {"orders": [...], "pagination": {...} | None, "total": int}.
        """
        response = await self._request("GET", self._url("/orders"), params=clean_params(filters))
        body = self._json(response)
        return {
            "orders": body.get("data", []),
            "pagination": body.get("pagination"),
            "total": body.get("total", 0),
        }

    async def export_csv(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET /orders/csv with all=true unless the caller says otherwise.

        Returns {"content": bytes, "filename": str}. The filename is built
        locally from the filters.
        """
        params = {"all": True, **(filters or {})}
        response = await self._request("GET", self._url("/orders/csv"), params=clean_params(params))
        return {
            "content": response.content,
            "filename": self.generate_csv_filename(filters or {}),
        }

    async def start_batch(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST /orders/batch. Defaults to 100 orders per page, 50 pages."""
        payload = {"batchSize": 100, "maxBatches": 50}
        payload.update({k: v for k, v in (options or {}).items() if v not in (None, "")})

        response = await self._request("POST", self._url("/orders/batch"), json=payload)
        body = self._json(response)

        batch_id = body["batchId"]
        self.batches[batch_id] = {
            "batchId": batch_id,
            "status": "processing",
            "startTime": datetime.now().isoformat(),
            "options": payload,
        }
        logger.info(f"Started batch {batch_id}")
        return body

    async def check_batch_status(self, batch_id: str) -> Dict[str, Any]:
        """GET /orders/batch/{id}/status. Unknown ids raise NotFoundError."""
        try:
            response = await self._request("GET", self._url(f"/orders/batch/{batch_id}/status"))
        except ClientError as e:
            if e.status_code == 404:
                self.batches.pop(batch_id, None)
                raise NotFoundError(e.message) from e
            raise

        status = self._json(response)
        if batch_id in self.batches:
            self.batches[batch_id].update(status)
        return status

    async def wait_for_batch(
        self,
        batch_id: str,
        interval: float = 2.0,
        on_update: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> PollOutcome:
        """Poll a batch until it completes or fails."""
        poller = StatusPoller(self.check_batch_status, interval=interval, on_update=on_update)
        return await poller.poll(batch_id)

    async def check_health(self) -> Dict[str, Any]:
        response = await self._request("GET", "/health")
        return self._json(response)

    def get_active_batches(self) -> List[Dict[str, Any]]:
        """Batches started by this client that have not reached a final state."""
        return [batch for batch in self.batches.values() if batch.get("status") == "processing"]

    def clear_completed_batches(self) -> int:
        """Forget locally tracked batches that completed or failed."""
        finished = [
            batch_id
            for batch_id, batch in self.batches.items()
            if batch.get("status") in ("completed", "failed")
        ]
        for batch_id in finished:
            del self.batches[batch_id]
        return len(finished)

    @staticmethod
    def generate_csv_filename(filters: Dict[str, Any], today: Optional[date] = None) -> str:
        """shopify-orders-<date>[-<financial>][-<fulfillment>][-<from>_to_<to>].csv"""
        today = today or date.today()
        suffix = ""
        if filters.get("financialStatus"):
            suffix += f"-{filters['financialStatus']}"
        if filters.get("fulfillmentStatus"):
            suffix += f"-{filters['fulfillmentStatus']}"
        if filters.get("createdAtMin") and filters.get("createdAtMax"):
            start = _date_part(filters["createdAtMin"])
            end = _date_part(filters["createdAtMax"])
            suffix += f"-{start}_to_{end}"
        return f"shopify-orders-{today.isoformat()}{suffix}.csv"

    @staticmethod
    def format_filters_description(filters: Dict[str, Any]) -> str:
        """Human readable summary of the active filters."""
        parts = []
        if filters.get("financialStatus"):
            parts.append(f"Financial: {filters['financialStatus']}")
        if filters.get("fulfillmentStatus"):
            parts.append(f"Fulfillment: {filters['fulfillmentStatus']}")
        if filters.get("dateRange"):
            parts.append(f"Range: {filters['dateRange']}")
        if filters.get("createdAtMin"):
            parts.append(f"From: {_date_part(filters['createdAtMin'])}")
        if filters.get("createdAtMax"):
            parts.append(f"To: {_date_part(filters['createdAtMax'])}")
        return ", ".join(parts) if parts else "All orders"
