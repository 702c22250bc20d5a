"""
Order collector - drives the page fetcher across cursor-paginated results.

Loop:
1. Fetch page N with the cursor returned by page N-1
2. Append its orders in arrival order
3. Stop when upstream reports no more pages, the page ceiling is hit,
   or a page fetch fails

Pages are fetched strictly in sequence: each request needs the previous cursor.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol

from app.core.errors import UpstreamError
from app.schemas.order import Order, OrderFilters

logger = logging.getLogger(__name__)


class CollectionPolicy(str, Enum):
    """What to do when a page fetch fails mid-run."""

    BEST_EFFORT = "best_effort"  # keep pages 1..K-1, record the error
    FAIL_FAST = "fail_fast"  # propagate the UpstreamError


class PageFetcher(Protocol):
    def fetch_page(self, filters: OrderFilters, after: Optional[str] = None, first: Optional[int] = None):
        ...


@dataclass
class CollectionResult:
    """Orders accumulated by one collection run."""

    orders: List[Order] = field(default_factory=list)
    pages_fetched: int = 0
    has_more: bool = False
    error: Optional[str] = None

    @property
    def failed_on_first_page(self) -> bool:
        return self.error is not None and self.pages_fetched == 0

    @property
    def truncated(self) -> bool:
        """True when an upstream error cut a best-effort run short after some pages."""
        return self.error is not None and self.pages_fetched > 0

    def raise_for_empty_failure(self) -> "CollectionResult":
        """Raise the recorded error when nothing was collected; otherwise return self."""
        if self.failed_on_first_page:
            raise UpstreamError(self.error)
        return self


class OrderCollector:
    """
    Accumulates orders across pages up to a page ceiling.

    Usage:
        collector = OrderCollector(ShopifyConnector())
        result = collector.collect(filters, page_size=100, max_pages=50)
        if result.truncated:
            ...  # partial data, inspect result.error
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        policy: CollectionPolicy = CollectionPolicy.BEST_EFFORT,
        progress_every: int = 5,
    ):
        self.fetcher = fetcher
        self.policy = CollectionPolicy(policy)
        self.progress_every = progress_every

    def collect(
        self,
        filters: OrderFilters,
        page_size: int,
        max_pages: int,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> CollectionResult:
        """
        Collect orders page by page.

        Args:
            filters: Filter set passed unchanged to every page fetch
            page_size: Orders requested per page
            max_pages: Hard ceiling on the number of page fetches
            on_progress: Called with (orders_so_far, pages_so_far) every
                ``progress_every`` pages

        Returns:
            CollectionResult; in best-effort mode a failed page leaves the
            orders of the preceding pages and the error text

        Raises:
            UpstreamError: Only in fail-fast mode
        """
        result = CollectionResult()
        cursor: Optional[str] = None
        has_next_page = True

        while has_next_page and result.pages_fetched < max_pages:
            try:
                page = self.fetcher.fetch_page(filters, after=cursor, first=page_size)
            except UpstreamError as e:
                logger.error(f"Error on page {result.pages_fetched + 1}: {e}")
                if self.policy == CollectionPolicy.FAIL_FAST:
                    raise
                result.error = str(e)
                break

            result.orders.extend(page.orders)
            result.pages_fetched += 1
            has_next_page = page.has_next_page
            cursor = page.end_cursor

            if self.progress_every and result.pages_fetched % self.progress_every == 0:
                logger.info(
                    f"Fetched {len(result.orders)} orders (page {result.pages_fetched})"
                )
                if on_progress:
                    on_progress(len(result.orders), result.pages_fetched)

        result.has_more = has_next_page and result.error is None
        logger.info(
            f"Total orders fetched: {len(result.orders)} in {result.pages_fetched} page(s)"
        )
        return result
