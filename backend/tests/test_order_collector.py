"""
Tests for the order collector.

Validates:
- Page ceiling is never exceeded
- Cursors are threaded from page to page
- Best-effort keeps pages 1..K-1 when page K fails
- Fail-fast propagates the upstream error
"""
import pytest

from app.core.errors import UpstreamError
from app.schemas.order import OrderFilters
from app.services.order_collector import CollectionPolicy, CollectionResult, OrderCollector


class TestCollect:
    """Pagination loop."""

    def test_stops_when_no_more_pages(self, fake_connector, make_page):
        fake_connector.pages = [make_page(2, "c1"), make_page(2, "c2"), make_page(1)]

        result = OrderCollector(fake_connector).collect(OrderFilters(), page_size=2, max_pages=10)

        assert len(result.orders) == 5
        assert result.pages_fetched == 3
        assert result.has_more is False
        assert result.error is None
        assert len(fake_connector.calls) == 3

    def test_page_ceiling(self, fake_connector, make_page):
        fake_connector.pages = [make_page(3, f"c{i}") for i in range(1, 6)]

        result = OrderCollector(fake_connector).collect(OrderFilters(), page_size=3, max_pages=2)

        assert len(fake_connector.calls) == 2
        assert len(result.orders) == 6
        assert len(result.orders) <= 3 * 2
        assert result.has_more is True

    def test_cursor_threading(self, fake_connector, make_page):
        fake_connector.pages = [make_page(1, "c1"), make_page(1, "c2"), make_page(1)]
        filters = OrderFilters(financialStatus="paid")

        OrderCollector(fake_connector).collect(filters, page_size=1, max_pages=5)

        assert [call["after"] for call in fake_connector.calls] == [None, "c1", "c2"]
        assert all(call["filters"] == filters for call in fake_connector.calls)
        assert all(call["first"] == 1 for call in fake_connector.calls)

    def test_arrival_order_preserved(self, fake_connector, make_page):
        first, second = make_page(2, "c1"), make_page(2)
        fake_connector.pages = [first, second]

        result = OrderCollector(fake_connector).collect(OrderFilters(), page_size=2, max_pages=5)

        assert result.orders == first.orders + second.orders

    def test_empty_store(self, fake_connector):
        result = OrderCollector(fake_connector).collect(OrderFilters(), page_size=50, max_pages=5)

        assert result.orders == []
        assert result.pages_fetched == 1
        assert result.error is None


class TestFailurePolicy:
    """What happens when a page fetch fails."""

    def test_best_effort_keeps_earlier_pages(self, fake_connector, make_page):
        page1, page2 = make_page(2, "c1"), make_page(2, "c2")
        fake_connector.pages = [page1, page2, UpstreamError("HTTP error! status: 502"), make_page(2)]

        result = OrderCollector(fake_connector).collect(OrderFilters(), page_size=2, max_pages=10)

        assert result.orders == page1.orders + page2.orders
        assert result.pages_fetched == 2
        assert result.error == "HTTP error! status: 502"
        assert result.truncated is True
        assert result.has_more is False
        assert len(fake_connector.calls) == 3

    def test_first_page_failure(self, fake_connector):
        fake_connector.pages = [UpstreamError("HTTP error! status: 401")]

        result = OrderCollector(fake_connector).collect(OrderFilters(), page_size=2, max_pages=10)

        assert result.orders == []
        assert result.failed_on_first_page is True
        assert result.truncated is False
        with pytest.raises(UpstreamError, match="401"):
            result.raise_for_empty_failure()

    def test_fail_fast_propagates(self, fake_connector, make_page):
        fake_connector.pages = [make_page(2, "c1"), UpstreamError("GraphQL errors: []")]
        collector = OrderCollector(fake_connector, policy=CollectionPolicy.FAIL_FAST)

        with pytest.raises(UpstreamError, match="GraphQL errors"):
            collector.collect(OrderFilters(), page_size=2, max_pages=10)

    def test_policy_accepts_config_string(self, fake_connector):
        assert OrderCollector(fake_connector, policy="fail_fast").policy == CollectionPolicy.FAIL_FAST

    def test_raise_for_empty_failure_passes_results_through(self):
        result = CollectionResult(pages_fetched=1)
        assert result.raise_for_empty_failure() is result


class TestProgress:
    def test_progress_callback_every_n_pages(self, fake_connector, make_page):
        fake_connector.pages = [make_page(1, f"c{i}") for i in range(1, 5)] + [make_page(1)]
        updates = []

        OrderCollector(fake_connector, progress_every=2).collect(
            OrderFilters(),
            page_size=1,
            max_pages=10,
            on_progress=lambda count, pages: updates.append((count, pages)),
        )

        assert updates == [(2, 2), (4, 4)]
