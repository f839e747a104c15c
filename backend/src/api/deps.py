"""
FastAPI dependencies for database sessions and order services.

Authentication and authorization are handled upstream by the API gateway,
so this module only wires persistence and the catalog client into request
handlers.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.database.connection import get_db
from src.services.catalog.client import CatalogClient
from src.services.orders.service import OrderService


def get_catalog_client(request: Request) -> CatalogClient:
    """
    Return the catalog client created at application startup.

    Args:
        request: Current request

    Returns:
        Shared CatalogClient instance
    """
    return request.app.state.catalog_client


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
Catalog = Annotated[CatalogClient, Depends(get_catalog_client)]


async def get_order_service(db: DatabaseSession, catalog: Catalog) -> OrderService:
    """
    Build an order service bound to the request's database session.

    Args:
        db: Database session
        catalog: Shared catalog client

    Returns:
        OrderService instance
    """
    settings = get_settings()
    return OrderService(
        session=db,
        catalog=catalog,
        enforce_status_transitions=settings.enforce_status_transitions,
    )


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
