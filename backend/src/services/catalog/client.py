"""
Product catalog lookup client.

The order service asks the product service for the authoritative name and
unit price of every product it puts into an order. This module wraps that
HTTP call: one fresh request per lookup, a bounded timeout, no retries and
no caching.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from src.core.logging import get_logger, log_performance

logger = get_logger(__name__)

PRODUCTS_PATH = "/api/products"


@dataclass(frozen=True)
class ProductSnapshot:
    """Product data as reported by the catalog at lookup time."""

    id: str
    name: str
    price: Decimal


class CatalogLookupError(Exception):
    """Base exception for failed product lookups."""

    def __init__(self, message: str, product_id: str, **context: Any):
        super().__init__(message)
        self.product_id = product_id
        self.context = context


class ProductNotFoundError(CatalogLookupError):
    """Raised when the catalog reports that the product does not exist."""

    pass


class CatalogUnavailableError(CatalogLookupError):
    """Raised when the catalog could not give a usable answer.

    Covers timeouts, connection failures, non-success responses other than
    404 and response bodies that do not describe a product.
    """

    pass


class CatalogClient:
    """
    Client for the product catalog service.

    Built once at application startup with the configured base URL and
    reused for every request.

    Attributes:
        base_url: Catalog service base URL without trailing slash
        timeout: Per-lookup timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize catalog client.

        Args:
            base_url: Catalog service base URL
            timeout: Per-lookup timeout in seconds
            http_client: Optional shared httpx client; one is created and
                owned by this instance when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def lookup(self, product_id: str) -> ProductSnapshot:
        """
        Fetch the current name and price of a product.

        Args:
            product_id: Catalog product identifier

        Returns:
            ProductSnapshot with catalog-provided id, name and price

        Raises:
            ProductNotFoundError: If the catalog answers 404
            CatalogUnavailableError: On any other failure
        """
        url = f"{self.base_url}{PRODUCTS_PATH}/{product_id}"

        try:
            with log_performance(logger, "catalog_lookup", product_id=product_id):
                response = await self._client.get(url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.warning("Catalog lookup timed out", product_id=product_id)
            raise CatalogUnavailableError(
                f"Catalog lookup for product {product_id} timed out",
                product_id=product_id,
                error=str(e),
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Catalog lookup failed",
                product_id=product_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CatalogUnavailableError(
                f"Catalog lookup for product {product_id} failed",
                product_id=product_id,
                error=str(e),
            ) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info("Product not found in catalog", product_id=product_id)
            raise ProductNotFoundError(
                f"Product {product_id} not found",
                product_id=product_id,
            )

        if not response.is_success:
            logger.warning(
                "Catalog returned unexpected status",
                product_id=product_id,
                status_code=response.status_code,
            )
            raise CatalogUnavailableError(
                f"Catalog returned status {response.status_code} for product {product_id}",
                product_id=product_id,
                status_code=response.status_code,
            )

        return self._parse_product(product_id, response)

    @staticmethod
    def _parse_product(product_id: str, response: httpx.Response) -> ProductSnapshot:
        """Build a snapshot from a catalog response body."""
        try:
            data = response.json()
            name = data["name"]
            price = Decimal(str(data["price"]))
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning(
                "Catalog returned malformed product",
                product_id=product_id,
                error=str(e),
            )
            raise CatalogUnavailableError(
                f"Catalog returned a malformed product for {product_id}",
                product_id=product_id,
                error=str(e),
            ) from e

        if not price.is_finite() or not isinstance(name, str):
            raise CatalogUnavailableError(
                f"Catalog returned a malformed product for {product_id}",
                product_id=product_id,
            )

        # Document-store backed catalogs report the identifier as "_id"
        catalog_id = data.get("_id") or data.get("id") or product_id

        return ProductSnapshot(id=str(catalog_id), name=name, price=price)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
