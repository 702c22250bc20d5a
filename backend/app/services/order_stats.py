"""
Summary statistics for a set of orders (the dashboard's stat cards).
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

import polars as pl

from app.schemas.order import Order

DEFAULT_CURRENCY = "CAD"


@dataclass
class OrderSummary:
    total_revenue: float
    total_orders: int
    average_order_value: float
    total_items: int
    paid_orders: int
    fulfilled_orders: int
    currency: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_orders(orders: Sequence[Order]) -> OrderSummary:
    """
    Compute revenue, counts and average order value.

    Status comparisons are case-insensitive ("PAID" and "paid" both count).
    total_items counts line items, not quantities.
    """
    if not orders:
        return OrderSummary(
            total_revenue=0.0,
            total_orders=0,
            average_order_value=0.0,
            total_items=0,
            paid_orders=0,
            fulfilled_orders=0,
            currency=DEFAULT_CURRENCY,
        )

    df = pl.DataFrame(
        {
            "total": [o.total for o in orders],
            "items": [len(o.line_items) for o in orders],
            "financial_status": [o.financial_status or "" for o in orders],
            "fulfillment_status": [o.fulfillment_status or "" for o in orders],
        },
        schema={
            "total": pl.Utf8,
            "items": pl.Int64,
            "financial_status": pl.Utf8,
            "fulfillment_status": pl.Utf8,
        },
    )

    stats = df.select(
        pl.col("total").cast(pl.Float64, strict=False).fill_null(0.0).sum().alias("revenue"),
        pl.col("items").sum().alias("items"),
        (pl.col("financial_status").str.to_lowercase() == "paid").sum().alias("paid"),
        (pl.col("fulfillment_status").str.to_lowercase() == "fulfilled").sum().alias("fulfilled"),
    ).row(0, named=True)

    revenue = round(float(stats["revenue"]), 2)
    total_orders = len(orders)

    return OrderSummary(
        total_revenue=revenue,
        total_orders=total_orders,
        average_order_value=round(revenue / total_orders, 2),
        total_items=int(stats["items"]),
        paid_orders=int(stats["paid"]),
        fulfilled_orders=int(stats["fulfilled"]),
        currency=orders[0].currency or DEFAULT_CURRENCY,
    )
