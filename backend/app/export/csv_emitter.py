"""
CSV emitter - flattens orders into one row per line item.

Polars-based implementation:
- Fixed column set and order (CSV_COLUMNS)
- Cast all columns to Utf8, fill nulls with empty string
- write_csv(include_header=True, separator=',', quote_style='necessary', line_terminator='\n')

An order with N line items yields N rows carrying the same order fields;
an order with no line items yields no rows.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import polars as pl

from app.core.errors import SerializationError
from app.schemas.order import Order

ORDER_COLUMNS = [
    "order_id",
    "created_at",
    "financial_status",
    "fulfillment_status",
    "total",
    "currency",
    "customer_name",
    "customer_email",
    "customer_address",
    "shipping_address",
    "billing_address",
    "shipping_line_title",
    "shipping_line_price",
    "shipping_line_currency",
]

LINE_ITEM_COLUMNS = [
    "product_title",
    "product_quantity",
    "product_collection",
    "product_sub_brand",
]

CSV_COLUMNS = ORDER_COLUMNS + LINE_ITEM_COLUMNS


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _order_fields(order: Order) -> Dict[str, str]:
    shipping = order.shipping_line
    return {
        "order_id": _text(order.order_id),
        "created_at": _text(order.created_at),
        "financial_status": _text(order.financial_status),
        "fulfillment_status": _text(order.fulfillment_status),
        "total": _text(order.total),
        "currency": _text(order.currency),
        "customer_name": _text(order.customer_name),
        "customer_email": _text(order.customer_email),
        "customer_address": _text(order.customer_address),
        "shipping_address": _text(order.shipping_address),
        "billing_address": _text(order.billing_address),
        "shipping_line_title": _text(shipping.title) if shipping else "",
        "shipping_line_price": _text(shipping.price) if shipping else "",
        "shipping_line_currency": _text(shipping.currency) if shipping else "",
    }


def flatten_orders(orders: Iterable[Order]) -> List[Dict[str, str]]:
    """
    One-to-many flatten: one row per line item, order fields repeated.

    Args:
        orders: Normalized orders

    Returns:
        Rows keyed by CSV_COLUMNS, all values as strings

    Raises:
        SerializationError: If an order does not have the expected shape
    """
    rows: List[Dict[str, str]] = []
    for order in orders:
        try:
            base = _order_fields(order)
            for item in order.line_items:
                rows.append({
                    **base,
                    "product_title": _text(item.title),
                    "product_quantity": _text(item.quantity),
                    "product_collection": _text(item.collection),
                    "product_sub_brand": _text(item.sub_brand),
                })
        except AttributeError as e:
            raise SerializationError(f"Cannot flatten order for CSV: {e}") from e
    return rows


def render_csv(orders: Iterable[Order]) -> str:
    """
    Render orders as CSV text.

    The header line is always present, even for zero rows.

    Raises:
        SerializationError: If flattening or encoding fails
    """
    rows = flatten_orders(orders)
    try:
        df = pl.DataFrame(rows, schema={col: pl.Utf8 for col in CSV_COLUMNS})
        df = df.fill_null("")
        return df.write_csv(
            include_header=True,
            separator=",",
            quote_style="necessary",
            line_terminator="\n",
        )
    except (pl.exceptions.PolarsError, TypeError, ValueError) as e:
        raise SerializationError(f"CSV encoding failed: {e}") from e


def csv_filename(now: Optional[datetime] = None) -> str:
    """
    Download filename derived from a timestamp.

    Example:
        2024-05-01T12:30:45.123Z -> "orders-2024-05-01T12-30-45-123Z.csv"
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"orders-{stamp.replace(':', '-').replace('.', '-')}.csv"
