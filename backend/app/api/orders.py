"""
Order API endpoints - listing, CSV export and summary statistics.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.api.dependencies import get_order_service, order_filters, parse_flag
from app.core.config import settings
from app.export.csv_emitter import csv_filename
from app.schemas.order import OrderFilters, OrderListResponse, OrderSummaryResponse
from app.services.order_service import OrderService

router = APIRouter()


@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    fetch_all: Optional[str] = Query(None, alias="all"),
    after: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    filters: OrderFilters = Depends(order_filters),
    service: OrderService = Depends(get_order_service),
):
    """
    Fetch orders with filtering and pagination.

    - all=true: follow cursors up to LIST_ALL_MAX_PAGES pages, no pagination block
    - otherwise: one page of ``limit`` orders; pass ``after`` = previous
      ``pagination.endCursor`` to continue
    """
    listing = service.list_orders(
        filters,
        limit=limit,
        fetch_all=parse_flag(fetch_all, default=False),
        after=after,
        page=page,
        max_pages=settings.LIST_ALL_MAX_PAGES,
    )
    return OrderListResponse(
        data=listing.orders,
        pagination=listing.pagination,
        total=listing.total,
    )


@router.get("/orders/csv")
def export_orders_csv(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    fetch_all: Optional[str] = Query(None, alias="all"),
    after: Optional[str] = Query(None),
    filters: OrderFilters = Depends(order_filters),
    service: OrderService = Depends(get_order_service),
):
    """
    Export orders as CSV, one row per line item.

    Defaults to all=true with a ceiling of CSV_MAX_PAGES pages. Runs inside
    the request; large stores keep the connection open until collection ends.
    """
    csv_text = service.export_csv(
        filters,
        fetch_all=parse_flag(fetch_all, default=True),
        page_size=limit,
        max_pages=settings.CSV_MAX_PAGES,
        after=after,
    )

    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={csv_filename()}"},
    )


@router.get("/orders/summary", response_model=OrderSummaryResponse)
def summarize_orders(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    fetch_all: Optional[str] = Query(None, alias="all"),
    filters: OrderFilters = Depends(order_filters),
    service: OrderService = Depends(get_order_service),
):
    """Revenue, order and item counts, average order value for the filtered orders."""
    summary = service.summarize(
        filters,
        page_size=limit,
        fetch_all=parse_flag(fetch_all, default=False),
        max_pages=settings.LIST_ALL_MAX_PAGES,
    )
    return OrderSummaryResponse(summary=summary.to_dict(), total=summary.total_orders)
