"""
Pytest configuration and shared test fixtures.

This module provides test clients for the FastAPI application, an in-memory
order repository and a scripted product catalog so order workflows can be
exercised without PostgreSQL or the product service.
"""

import uuid
from decimal import Decimal
from typing import Any, AsyncGenerator, Generator, Optional, Sequence
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_order_service
from src.database.base import utc_now
from src.database.models.order import Order, OrderItem
from src.main import app
from src.services.catalog.client import ProductNotFoundError, ProductSnapshot
from src.services.orders.enums import OrderStatus
from src.services.orders.repository import parse_order_id
from src.services.orders.service import OrderService


class FakeCatalog:
    """
    Scripted catalog standing in for CatalogClient.

    Products are registered up front; lookups for anything else raise
    ProductNotFoundError unless an explicit error is scripted for the id.
    """

    def __init__(self):
        self.products: dict[str, ProductSnapshot] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []

    def add_product(self, product_id: str, name: str, price: str) -> None:
        self.products[product_id] = ProductSnapshot(
            id=product_id, name=name, price=Decimal(price)
        )

    def fail_with(self, product_id: str, error: Exception) -> None:
        self.errors[product_id] = error

    async def lookup(self, product_id: str) -> ProductSnapshot:
        self.calls.append(product_id)
        if product_id in self.errors:
            raise self.errors[product_id]
        if product_id not in self.products:
            raise ProductNotFoundError(
                f"Product {product_id} not found", product_id=product_id
            )
        return self.products[product_id]

    async def aclose(self) -> None:
        return None


class InMemoryOrderRepository:
    """Order repository keeping ORM instances in a dict instead of a database."""

    def __init__(self):
        self.orders: dict[uuid.UUID, Order] = {}
        self.saved: list[Order] = []

    async def create_order(
        self,
        user_id: str,
        items: Sequence[dict[str, Any]],
        total_amount: Decimal,
        shipping_address: Optional[dict[str, Any]] = None,
    ) -> Order:
        now = utc_now()
        order = Order(
            id=uuid.uuid4(),
            user_id=user_id,
            status=OrderStatus.PENDING,
            total_amount=total_amount,
            shipping_address=shipping_address,
            created_at=now,
            updated_at=now,
            items=[
                OrderItem(
                    id=uuid.uuid4(),
                    position=position,
                    product_id=item["product_id"],
                    product_name=item["product_name"],
                    quantity=item["quantity"],
                    price=item["price"],
                )
                for position, item in enumerate(items)
            ],
        )
        self.orders[order.id] = order
        return order

    async def get_order_by_id(self, order_id: Any) -> Optional[Order]:
        parsed_id = parse_order_id(order_id)
        if parsed_id is None:
            return None
        return self.orders.get(parsed_id)

    async def list_orders(self) -> list[Order]:
        return sorted(self.orders.values(), key=lambda order: order.created_at)

    async def list_user_orders(self, user_id: str) -> list[Order]:
        return [order for order in await self.list_orders() if order.user_id == user_id]

    async def save(self, order: Order) -> Order:
        self.saved.append(order)
        return order


@pytest.fixture
def mock_session() -> AsyncMock:
    """
    Create mock async database session.

    Returns:
        AsyncMock: Mock database session
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    """Catalog with two products, P1 (Widget, 9.99) and P2 (Gadget, 25.00)."""
    catalog = FakeCatalog()
    catalog.add_product("P1", "Widget", "9.99")
    catalog.add_product("P2", "Gadget", "25.00")
    return catalog


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def order_service_factory(mock_session, fake_catalog, order_repository):
    """
    Build order services wired to the shared fake catalog and repository.

    Returns:
        Callable accepting ``enforce_status_transitions``
    """

    def factory(enforce_status_transitions: bool = False) -> OrderService:
        service = OrderService(
            session=mock_session,
            catalog=fake_catalog,
            enforce_status_transitions=enforce_status_transitions,
        )
        service.repository = order_repository
        return service

    return factory


@pytest.fixture
def order_service(order_service_factory) -> OrderService:
    return order_service_factory()


@pytest.fixture(scope="function")
def test_client(order_service_factory) -> Generator[TestClient, None, None]:
    """
    Create a synchronous test client for the FastAPI application.

    The order service dependency is overridden so requests run against the
    fake catalog and in-memory repository.

    Yields:
        TestClient: Synchronous test client for FastAPI app
    """
    app.dependency_overrides[get_order_service] = lambda: order_service_factory()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(order_service_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an asynchronous test client for the FastAPI application.

    Yields:
        AsyncClient: Asynchronous test client for FastAPI app
    """
    app.dependency_overrides[get_order_service] = lambda: order_service_factory()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
