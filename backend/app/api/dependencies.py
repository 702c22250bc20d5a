"""
Shared FastAPI dependencies: app-scoped services and the query filter set.
"""
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.connectors.shopify import ShopifyConnector
from app.core.config import settings
from app.schemas.order import OrderFilters, clean_value
from app.services.batch_tracker import BatchJobTracker
from app.services.order_collector import OrderCollector
from app.services.order_service import OrderService
from app.transform.date_ranges import resolve_date_range


def parse_flag(value: Optional[str], default: bool) -> bool:
    """Query-string boolean: blank means default, otherwise only "true"/"1" are true."""
    value = clean_value(value)
    if value is None:
        return default
    return value.lower() in ("true", "1")


def build_collector(fetcher) -> OrderCollector:
    return OrderCollector(
        fetcher,
        policy=settings.COLLECTION_POLICY,
        progress_every=settings.PROGRESS_EVERY_PAGES,
    )


def get_connector(request: Request) -> ShopifyConnector:
    return request.app.state.connector


def get_batch_tracker(request: Request) -> BatchJobTracker:
    return request.app.state.batch_tracker


def get_order_service(connector: ShopifyConnector = Depends(get_connector)) -> OrderService:
    return OrderService(connector, build_collector(connector))


def order_filters(
    created_at_min: Optional[str] = Query(None, alias="createdAtMin"),
    created_at_max: Optional[str] = Query(None, alias="createdAtMax"),
    date_range: Optional[str] = Query(None, alias="dateRange"),
    financial_status: Optional[str] = Query(None, alias="financialStatus"),
    fulfillment_status: Optional[str] = Query(None, alias="fulfillmentStatus"),
    sort_key: Optional[str] = Query(None, alias="sortKey"),
    reverse: Optional[str] = Query(None),
) -> OrderFilters:
    """
    Build the filter set from query parameters.

    Blank values are dropped before validation; an explicit createdAtMin or
    createdAtMax wins over the matching side of a dateRange preset.
    """
    date_range = clean_value(date_range)
    if date_range:
        try:
            range_min, range_max = resolve_date_range(date_range)
        except ValueError as e:
            raise RequestValidationError([{
                "type": "value_error",
                "loc": ("query", "dateRange"),
                "msg": str(e),
                "input": date_range,
            }])
        created_at_min = clean_value(created_at_min) or range_min
        created_at_max = clean_value(created_at_max) or range_max

    try:
        return OrderFilters(
            created_at_min=created_at_min,
            created_at_max=created_at_max,
            financial_status=financial_status,
            fulfillment_status=fulfillment_status,
            sort_key=sort_key,
            reverse=parse_flag(reverse, default=True),
        )
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise RequestValidationError(
            [{**err, "loc": ("query",) + tuple(err["loc"])} for err in errors]
        )
