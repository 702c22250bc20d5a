"""
Tests for order summary statistics.
"""
from app.services.order_stats import summarize_orders


class TestSummarizeOrders:
    def test_empty(self):
        summary = summarize_orders([])

        assert summary.total_orders == 0
        assert summary.total_revenue == 0.0
        assert summary.average_order_value == 0.0
        assert summary.currency == "CAD"

    def test_mixed_statuses(self, make_order):
        orders = [
            make_order("#1", items=2, total="10.00", financial_status="PAID", fulfillment_status="FULFILLED"),
            make_order("#2", items=1, total="20.50", financial_status="pending", fulfillment_status="UNFULFILLED"),
        ]

        summary = summarize_orders(orders)

        assert summary.total_orders == 2
        assert summary.total_revenue == 30.5
        assert summary.average_order_value == 15.25
        assert summary.total_items == 3
        assert summary.paid_orders == 1
        assert summary.fulfilled_orders == 1

    def test_status_match_is_case_insensitive(self, make_order):
        orders = [
            make_order("#1", financial_status="PAID"),
            make_order("#2", financial_status="paid"),
            make_order("#3", financial_status=None),
        ]

        assert summarize_orders(orders).paid_orders == 2

    def test_currency_from_first_order(self, make_order):
        assert summarize_orders([make_order(currency="USD")]).currency == "USD"

    def test_to_dict(self, make_order):
        data = summarize_orders([make_order(total="5.00")]).to_dict()

        assert data["total_revenue"] == 5.0
        assert set(data) == {
            "total_revenue",
            "total_orders",
            "average_order_value",
            "total_items",
            "paid_orders",
            "fulfilled_orders",
            "currency",
        }
