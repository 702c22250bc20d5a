"""
Shopify connector - GraphQL Admin API client for order pages.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from app.core.config import settings
from app.core.errors import UpstreamError
from app.schemas.order import Order, OrderFilters
from app.transform.normalizers import NormalizeError, normalize_order

logger = logging.getLogger(__name__)


ORDERS_QUERY = """
query Orders(
  $first: Int!,
  $after: String,
  $query: String,
  $sortKey: OrderSortKeys,
  $reverse: Boolean,
  $lineItems: Int!
) {
  orders(first: $first, after: $after, query: $query, sortKey: $sortKey, reverse: $reverse) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        name
        createdAt
        displayFinancialStatus
        displayFulfillmentStatus
        currentTotalPriceSet {
          shopMoney { amount currencyCode }
        }
        customer {
          firstName
          lastName
          email
          defaultAddress { address1 city country zip }
        }
        shippingAddress { address1 city province zip country }
        billingAddress { address1 city province zip country }
        shippingLine {
          title
          originalPriceSet {
            shopMoney { amount currencyCode }
          }
        }
        lineItems(first: $lineItems) {
          edges {
            node {
              title
              quantity
              product {
                collections(first: 1) {
                  edges { node { title } }
                }
                metafield(namespace: "custom", key: "sub_brand") { value }
              }
            }
          }
        }
      }
    }
  }
}
"""


@dataclass
class OrderPage:
    """One page of normalized orders plus its continuation cursor."""

    orders: List[Order] = field(default_factory=list)
    end_cursor: Optional[str] = None
    has_next_page: bool = False


def build_search_query(filters: OrderFilters) -> Optional[str]:
    """
    Build Shopify's search string for the filter set.

    Examples:
        min + max -> "created_at:>='2024-01-01' AND created_at:<='2024-01-31'"
        financial_status=paid -> "financial_status:paid"
        nothing set -> None
    """
    parts: List[str] = []

    if filters.created_at_min:
        parts.append(f"created_at:>='{filters.created_at_min}'")
    if filters.created_at_max:
        parts.append(f"created_at:<='{filters.created_at_max}'")
    if filters.financial_status:
        parts.append(f"financial_status:{filters.financial_status.value}")
    if filters.fulfillment_status:
        parts.append(f"fulfillment_status:{filters.fulfillment_status.value}")

    return " AND ".join(parts) if parts else None


def build_variables(
    filters: OrderFilters,
    first: int,
    after: Optional[str] = None,
    line_items: int = 10,
) -> Dict[str, Any]:
    """GraphQL variables for one page; None-valued keys are left out."""
    variables = {
        "first": first,
        "after": after or None,
        "query": build_search_query(filters),
        "sortKey": filters.sort_key.value,
        "reverse": filters.reverse,
        "lineItems": line_items,
    }
    return {k: v for k, v in variables.items() if v is not None}


class ShopifyConnector:
    """Client for reading orders from the Shopify GraphQL Admin API."""

    def __init__(
        self,
        shop_domain: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        domain = (shop_domain or settings.SHOP_DOMAIN or "").strip()
        self.shop_domain = domain.replace("https://", "").replace("http://", "").rstrip("/")
        self.access_token = access_token or settings.SHOP_TOKEN
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT_SECONDS
        self.line_items = settings.LINE_ITEMS_PER_ORDER
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"

    def fetch_page(
        self,
        filters: OrderFilters,
        after: Optional[str] = None,
        first: Optional[int] = None,
    ) -> OrderPage:
        """
        Fetch and normalize one page of orders. Single attempt, no retry.

        Args:
            filters: Filter set for the search query and sort order
            after: Cursor returned by the previous page
            first: Page size (defaults to DEFAULT_PAGE_SIZE)

        Returns:
            OrderPage; end_cursor is set only when another page exists

        Raises:
            UpstreamError: On transport failure, non-2xx status, GraphQL
                errors, or a malformed response body
        """
        if not self.shop_domain or not self.access_token:
            raise UpstreamError("Shopify is not configured: set SHOP_DOMAIN and SHOP_TOKEN")

        variables = build_variables(
            filters,
            first=first or settings.DEFAULT_PAGE_SIZE,
            after=after,
            line_items=self.line_items,
        )
        data = self._execute(ORDERS_QUERY, variables)

        try:
            connection = data["orders"]
            page_info = connection["pageInfo"]
            has_next_page = bool(page_info["hasNextPage"])
            end_cursor = page_info.get("endCursor") if has_next_page else None
            orders = [normalize_order(edge["node"]) for edge in connection["edges"]]
        except NormalizeError as e:
            raise UpstreamError(str(e)) from e
        except (KeyError, TypeError, AttributeError) as e:
            raise UpstreamError(f"Unexpected orders payload: {e!r}") from e

        return OrderPage(orders=orders, end_cursor=end_cursor, has_next_page=has_next_page)

    def _execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """POST a GraphQL document and return its ``data`` object."""
        try:
            response = self.session.post(
                self.endpoint,
                json={"query": query, "variables": variables},
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self.access_token,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Shopify request failed: {e}")
            raise UpstreamError(f"Shopify request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Shopify returned HTTP {response.status_code}")
            raise UpstreamError(f"HTTP error! status: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError("Shopify returned a non-JSON response") from e

        if not isinstance(body, dict):
            raise UpstreamError("Shopify returned an unexpected response body")

        if body.get("errors"):
            logger.error(f"GraphQL errors: {body['errors']}")
            raise UpstreamError(f"GraphQL errors: {json.dumps(body['errors'])}")

        if not isinstance(body.get("data"), dict):
            raise UpstreamError("Shopify response has no data object")

        return body["data"]

    def close(self):
        """Close the HTTP session."""
        if self.session:
            self.session.close()
