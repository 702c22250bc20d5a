"""
Normalizers for raw Shopify order nodes.

Maps one GraphQL ``orders.edges[].node`` object into an immutable Order.
Missing optional objects (customer, addresses, shipping line, product)
degrade to empty strings or defaults; missing required ones raise NormalizeError.
"""
from typing import Any, Dict, Iterable, Optional

from app.schemas.order import LineItem, Order, ShippingLine

NO_COLLECTION = "No Collection"
NO_SUB_BRAND = "No Sub-Brand"


class NormalizeError(Exception):
    """Raised when an upstream order node cannot be normalized."""

    pass


def format_address(address: Optional[Dict[str, Any]]) -> str:
    """
    Render an address object as "address1, city, country".

    Empty parts are skipped rather than rendered as blanks.

    Examples:
        {"address1": "1 Main St", "city": "Toronto", "country": "Canada"}
            -> "1 Main St, Toronto, Canada"
        {"address1": None, "city": "Toronto", "country": "Canada"}
            -> "Toronto, Canada"
        None -> ""
    """
    if not address:
        return ""
    parts = (address.get("address1"), address.get("city"), address.get("country"))
    return ", ".join(str(p).strip() for p in parts if p and str(p).strip())


def format_customer_name(customer: Optional[Dict[str, Any]]) -> str:
    if not customer:
        return ""
    first = customer.get("firstName") or ""
    last = customer.get("lastName") or ""
    return f"{first} {last}".strip()


def _shop_money(price_set: Optional[Dict[str, Any]], field: str) -> Dict[str, Any]:
    if not price_set or not price_set.get("shopMoney"):
        raise NormalizeError(f"Order node is missing {field}.shopMoney")
    return price_set["shopMoney"]


def normalize_shipping_line(line: Optional[Dict[str, Any]]) -> Optional[ShippingLine]:
    if not line:
        return None
    money = _shop_money(line.get("originalPriceSet"), "shippingLine.originalPriceSet")
    return ShippingLine(
        title=line.get("title") or "",
        price=str(money.get("amount", "")),
        currency=money.get("currencyCode") or "",
    )


def normalize_line_item(node: Dict[str, Any]) -> LineItem:
    product = node.get("product") or {}

    collection = NO_COLLECTION
    edges = (product.get("collections") or {}).get("edges") or []
    if edges and (edges[0].get("node") or {}).get("title"):
        collection = edges[0]["node"]["title"]

    sub_brand = (product.get("metafield") or {}).get("value") or NO_SUB_BRAND

    return LineItem(
        title=node.get("title") or "",
        quantity=int(node.get("quantity") or 0),
        collection=collection,
        sub_brand=sub_brand,
    )


def _edge_nodes(connection: Optional[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    for edge in (connection or {}).get("edges") or []:
        yield edge["node"]


def normalize_order(node: Dict[str, Any]) -> Order:
    """
    Normalize one order node.

    Args:
        node: Raw ``node`` dict from the orders connection

    Returns:
        Immutable Order

    Raises:
        NormalizeError: If required fields are missing or have the wrong shape
    """
    if not isinstance(node, dict):
        raise NormalizeError(f"Expected order node object, got {type(node).__name__}")

    try:
        money = _shop_money(node.get("currentTotalPriceSet"), "currentTotalPriceSet")
        customer = node.get("customer")

        return Order(
            order_id=node["name"],
            created_at=node["createdAt"],
            financial_status=node.get("displayFinancialStatus"),
            fulfillment_status=node.get("displayFulfillmentStatus"),
            total=str(money["amount"]),
            currency=money["currencyCode"],
            customer_name=format_customer_name(customer),
            customer_email=(customer or {}).get("email") or "",
            customer_address=format_address((customer or {}).get("defaultAddress")),
            shipping_address=format_address(node.get("shippingAddress")),
            billing_address=format_address(node.get("billingAddress")),
            shipping_line=normalize_shipping_line(node.get("shippingLine")),
            line_items=tuple(
                normalize_line_item(item) for item in _edge_nodes(node.get("lineItems"))
            ),
        )
    except NormalizeError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise NormalizeError(
            f"Malformed order node {node.get('name', '<unknown>')}: {e!r}"
        ) from e
