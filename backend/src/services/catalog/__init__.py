"""
Product catalog integration.

Exports the catalog lookup client used by the order creation workflow.
"""

from src.services.catalog.client import (
    CatalogClient,
    CatalogLookupError,
    CatalogUnavailableError,
    ProductNotFoundError,
    ProductSnapshot,
)

__all__ = [
    "CatalogClient",
    "CatalogLookupError",
    "CatalogUnavailableError",
    "ProductNotFoundError",
    "ProductSnapshot",
]
