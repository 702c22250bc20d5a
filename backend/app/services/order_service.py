"""
Order service - synchronous order listing, CSV export and summaries.

These paths run inside the request: an "all" export blocks until the whole
multi-page collection finishes, bounded by the page ceiling.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.connectors.shopify import ShopifyConnector
from app.export.csv_emitter import render_csv
from app.schemas.order import Order, OrderFilters, Pagination
from app.services.order_collector import OrderCollector
from app.services.order_stats import OrderSummary, summarize_orders

logger = logging.getLogger(__name__)


@dataclass
class OrderListing:
    orders: List[Order]
    pagination: Optional[Pagination] = None

    @property
    def total(self) -> int:
        return len(self.orders)


class OrderService:
    """Orchestrates connector and collector calls for the order endpoints."""

    def __init__(self, connector: ShopifyConnector, collector: OrderCollector):
        self.connector = connector
        self.collector = collector

    def collect_all(self, filters: OrderFilters, page_size: int, max_pages: int) -> List[Order]:
        """
        Collect across pages up to ``max_pages``.

        Raises:
            UpstreamError: If the very first page fails (nothing to return),
                or on any failure under the fail-fast policy
        """
        result = self.collector.collect(filters, page_size=page_size, max_pages=max_pages)
        result.raise_for_empty_failure()
        if result.truncated:
            logger.warning(
                f"Returning {len(result.orders)} orders from {result.pages_fetched} page(s); "
                f"collection stopped early: {result.error}"
            )
        return result.orders

    def list_orders(
        self,
        filters: OrderFilters,
        limit: int,
        fetch_all: bool = False,
        after: Optional[str] = None,
        page: int = 1,
        max_pages: int = 100,
    ) -> OrderListing:
        """One page with pagination metadata, or every page when ``fetch_all``."""
        if fetch_all:
            return OrderListing(orders=self.collect_all(filters, page_size=limit, max_pages=max_pages))

        result = self.connector.fetch_page(filters, after=after, first=limit)
        return OrderListing(
            orders=result.orders,
            pagination=Pagination(
                has_next_page=result.has_next_page,
                end_cursor=result.end_cursor,
                current_page=page,
                total_fetched=len(result.orders),
            ),
        )

    def export_csv(
        self,
        filters: OrderFilters,
        fetch_all: bool = True,
        page_size: int = 50,
        max_pages: int = 200,
        after: Optional[str] = None,
    ) -> str:
        listing = self.list_orders(
            filters,
            limit=page_size,
            fetch_all=fetch_all,
            after=after,
            max_pages=max_pages,
        )
        logger.info(f"Rendering CSV for {listing.total} orders")
        return render_csv(listing.orders)

    def summarize(
        self,
        filters: OrderFilters,
        page_size: int,
        fetch_all: bool = True,
        max_pages: int = 100,
    ) -> OrderSummary:
        listing = self.list_orders(filters, limit=page_size, fetch_all=fetch_all, max_pages=max_pages)
        return summarize_orders(listing.orders)
