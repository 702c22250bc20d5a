"""
Shared fixtures: canned order nodes, normalized orders and a fake page fetcher.
"""
import pytest

from app.connectors.shopify import OrderPage
from app.schemas.order import LineItem, Order, ShippingLine


class FakeConnector:
    """
    Page fetcher serving canned pages in call order.

    An exception placed in ``pages`` is raised by the matching call. Calls
    past the end of the list return an empty last page.
    """

    def __init__(self, pages=None):
        self.pages = list(pages or [])
        self.calls = []

    def fetch_page(self, filters, after=None, first=None):
        self.calls.append({"filters": filters, "after": after, "first": first})
        index = len(self.calls) - 1
        if index >= len(self.pages):
            return OrderPage()
        page = self.pages[index]
        if isinstance(page, Exception):
            raise page
        return page

    def close(self):
        pass


def build_order(
    order_id="#1001",
    items=1,
    total="10.00",
    currency="CAD",
    financial_status="PAID",
    fulfillment_status="UNFULFILLED",
):
    return Order(
        order_id=order_id,
        created_at="2024-01-15T10:00:00Z",
        financial_status=financial_status,
        fulfillment_status=fulfillment_status,
        total=total,
        currency=currency,
        customer_name="Jane Doe",
        customer_email="jane@example.com",
        customer_address="1 Main St, Toronto, Canada",
        shipping_address="1 Main St, Toronto, Canada",
        billing_address="1 Main St, Toronto, Canada",
        shipping_line=ShippingLine(title="Standard", price="5.00", currency=currency),
        line_items=tuple(
            LineItem(title=f"Product {i + 1}", quantity=i + 1) for i in range(items)
        ),
    )


@pytest.fixture
def make_order():
    """Factory for normalized orders."""
    return build_order


@pytest.fixture
def make_page():
    """
    Factory for OrderPage values.

    make_page(count, cursor="c1") -> page with ``count`` orders and a next page
    make_page(count) -> last page
    """
    counter = {"next": 1000}

    def _make(count, cursor=None):
        orders = []
        for _ in range(count):
            counter["next"] += 1
            orders.append(build_order(order_id=f"#{counter['next']}"))
        return OrderPage(orders=orders, end_cursor=cursor, has_next_page=cursor is not None)

    return _make


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def sample_order_node():
    """Raw GraphQL order node as returned by the Admin API."""
    return {
        "id": "gid://shopify/Order/1",
        "name": "#1001",
        "createdAt": "2024-01-15T10:00:00Z",
        "displayFinancialStatus": "PAID",
        "displayFulfillmentStatus": "UNFULFILLED",
        "currentTotalPriceSet": {"shopMoney": {"amount": "59.90", "currencyCode": "CAD"}},
        "customer": {
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane@example.com",
            "defaultAddress": {
                "address1": "1 Main St",
                "city": "Toronto",
                "country": "Canada",
                "zip": "M5V 1A1",
            },
        },
        "shippingAddress": {
            "address1": "22 Queen St",
            "city": "Ottawa",
            "province": "Ontario",
            "zip": "K1P 1A1",
            "country": "Canada",
        },
        "billingAddress": None,
        "shippingLine": {
            "title": "Standard",
            "originalPriceSet": {"shopMoney": {"amount": "9.90", "currencyCode": "CAD"}},
        },
        "lineItems": {
            "edges": [
                {
                    "node": {
                        "title": "Trail Jacket",
                        "quantity": 2,
                        "product": {
                            "collections": {"edges": [{"node": {"title": "Outerwear"}}]},
                            "metafield": {"value": "Summit"},
                        },
                    }
                },
                {
                    "node": {
                        "title": "Gift Card",
                        "quantity": 1,
                        "product": None,
                    }
                },
            ]
        },
    }
