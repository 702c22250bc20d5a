"""
Pydantic schemas for normalized orders and the filter set.
"""
import enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional, Tuple


class SortKey(str, enum.Enum):
    CREATED_AT = "CREATED_AT"
    UPDATED_AT = "UPDATED_AT"
    ORDER_NUMBER = "ORDER_NUMBER"
    TOTAL_PRICE = "TOTAL_PRICE"


class FinancialStatus(str, enum.Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"
    VOIDED = "voided"


class FulfillmentStatus(str, enum.Enum):
    UNFULFILLED = "unfulfilled"
    PARTIAL = "partial"
    FULFILLED = "fulfilled"
    RESTOCKED = "restocked"


def clean_value(value: Any) -> Any:
    """Trim strings and map blank ones to None; other values pass through."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    quantity: int
    collection: str = "No Collection"
    sub_brand: str = "No Sub-Brand"


class ShippingLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    price: str
    currency: str


class Order(BaseModel):
    """Normalized projection of one upstream order. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    created_at: str
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    total: str
    currency: str
    customer_name: str = ""
    customer_email: str = ""
    customer_address: str = ""
    shipping_address: str = ""
    billing_address: str = ""
    shipping_line: Optional[ShippingLine] = None
    line_items: Tuple[LineItem, ...] = ()


class OrderFilters(BaseModel):
    """
    Filter set threaded unchanged through every page fetch of one collection run.

    Accepts both the camelCase wire names (createdAtMin) and the Python names.
    Blank strings become None so they never reach the upstream query.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    created_at_min: Optional[str] = Field(None, alias="createdAtMin")
    created_at_max: Optional[str] = Field(None, alias="createdAtMax")
    financial_status: Optional[FinancialStatus] = Field(None, alias="financialStatus")
    fulfillment_status: Optional[FulfillmentStatus] = Field(None, alias="fulfillmentStatus")
    sort_key: SortKey = Field(SortKey.CREATED_AT, alias="sortKey")
    reverse: bool = True

    @field_validator("created_at_min", "created_at_max", mode="before")
    @classmethod
    def drop_blank(cls, v: Any) -> Any:
        return clean_value(v)

    @field_validator("financial_status", "fulfillment_status", mode="before")
    @classmethod
    def lowercase_status(cls, v: Any) -> Any:
        v = clean_value(v)
        return v.lower() if isinstance(v, str) else v

    @field_validator("sort_key", mode="before")
    @classmethod
    def default_sort_key(cls, v: Any) -> Any:
        v = clean_value(v)
        if v is None:
            return SortKey.CREATED_AT
        return v.upper() if isinstance(v, str) else v


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(alias="hasNextPage")
    end_cursor: Optional[str] = Field(None, alias="endCursor")
    current_page: int = Field(1, alias="currentPage")
    total_fetched: int = Field(alias="totalFetched")


class OrderListResponse(BaseModel):
    success: bool = True
    data: List[Order]
    pagination: Optional[Pagination] = None
    total: int


class OrderSummaryResponse(BaseModel):
    success: bool = True
    summary: dict
    total: int
