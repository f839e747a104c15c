"""
Test suite for OrderService business logic.

Order creation runs against the scripted catalog and the in-memory
repository from conftest; persistence failures are injected with AsyncMock.
"""

import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.services.catalog.client import CatalogUnavailableError
from src.services.orders.enums import OrderStatus
from src.services.orders.repository import (
    OrderCreationError,
    OrderIntegrityError,
    OrderNotFoundError,
    OrderRepositoryError,
    OrderUpdateError,
)
from src.services.orders.service import (
    InvalidStatusTransitionError,
    OrderProcessingError,
    OrderValidationError,
    ProductUnavailableError,
)


async def create_widget_order(service, user_id: str = "user-1") -> dict:
    return await service.create_order(
        user_id=user_id,
        items=[{"product_id": "P1", "quantity": 2}],
        shipping_address={"street": "1 Main St", "city": "Springfield"},
    )


class TestCreateOrder:
    """Order creation workflow."""

    @pytest.mark.asyncio
    async def test_snapshots_catalog_values_and_totals(self, order_service):
        order = await create_widget_order(order_service)

        assert order["status"] == "pending"
        assert order["items"] == [
            {
                "product_id": "P1",
                "product_name": "Widget",
                "quantity": 2,
                "price": Decimal("9.99"),
            }
        ]
        assert order["total_amount"] == Decimal("19.98")
        assert order["shipping_address"] == {"street": "1 Main St", "city": "Springfield"}
        assert order["created_at"] == order["updated_at"]

    @pytest.mark.asyncio
    async def test_total_is_sum_of_price_times_quantity(self, order_service):
        order = await order_service.create_order(
            user_id="user-1",
            items=[
                {"product_id": "P1", "quantity": 3},
                {"product_id": "P2", "quantity": 2},
                {"product_id": "P1", "quantity": 1},
            ],
        )

        expected = sum(item["price"] * item["quantity"] for item in order["items"])
        assert order["total_amount"] == expected == Decimal("89.96")

    @pytest.mark.asyncio
    async def test_sub_cent_prices_keep_total_consistent(
        self, order_service, fake_catalog, order_repository
    ):
        fake_catalog.add_product("P3", "Bolt", "9.995")

        created = await order_service.create_order(
            user_id="user-1",
            items=[
                {"product_id": "P3", "quantity": 3},
                {"product_id": "P1", "quantity": 1},
            ],
        )

        stored = order_repository.orders[uuid.UUID(created["id"])]
        assert stored.total_amount == Decimal("39.975")
        assert stored.total_amount == sum(item.price * item.quantity for item in stored.items)
        assert await order_service.get_order(created["id"]) == created

    @pytest.mark.asyncio
    async def test_item_order_follows_request(self, order_service):
        order = await order_service.create_order(
            user_id="user-1",
            items=[
                {"product_id": "P2", "quantity": 1},
                {"product_id": "P1", "quantity": 1},
            ],
        )

        assert [item["product_id"] for item in order["items"]] == ["P2", "P1"]

    @pytest.mark.asyncio
    async def test_caller_supplied_price_and_name_are_ignored(self, order_service):
        order = await order_service.create_order(
            user_id="user-1",
            items=[
                {
                    "product_id": "P1",
                    "quantity": 1,
                    "price": Decimal("0.01"),
                    "product_name": "Forged",
                }
            ],
        )

        assert order["items"][0]["price"] == Decimal("9.99")
        assert order["items"][0]["product_name"] == "Widget"
        assert order["total_amount"] == Decimal("9.99")

    @pytest.mark.asyncio
    async def test_uses_catalog_identifier(self, order_service, fake_catalog):
        fake_catalog.add_product("sku-7", "Sprocket", "3.50")

        order = await order_service.create_order(
            user_id="user-1",
            items=[{"product_id": "sku-7", "quantity": 4}],
        )

        assert order["items"][0]["product_id"] == "sku-7"
        assert order["total_amount"] == Decimal("14.00")

    @pytest.mark.asyncio
    async def test_missing_product_aborts_without_persisting(
        self, order_service, fake_catalog, order_repository
    ):
        fake_catalog.products.pop("P2")

        with pytest.raises(ProductUnavailableError) as exc_info:
            await order_service.create_order(
                user_id="user-1",
                items=[
                    {"product_id": "P1", "quantity": 1},
                    {"product_id": "P2", "quantity": 1},
                ],
            )

        assert exc_info.value.product_id == "P2"
        assert str(exc_info.value) == "Product P2 not found"
        assert order_repository.orders == {}
        assert await order_service.list_orders() == []

    @pytest.mark.asyncio
    async def test_stops_at_first_failing_product(self, order_service, fake_catalog):
        with pytest.raises(ProductUnavailableError) as exc_info:
            await order_service.create_order(
                user_id="user-1",
                items=[
                    {"product_id": "P1", "quantity": 1},
                    {"product_id": "missing", "quantity": 1},
                    {"product_id": "P2", "quantity": 1},
                ],
            )

        assert exc_info.value.product_id == "missing"
        assert fake_catalog.calls == ["P1", "missing"]

    @pytest.mark.asyncio
    async def test_catalog_outage_reported_as_unavailable_product(
        self, order_service, fake_catalog, order_repository
    ):
        fake_catalog.fail_with(
            "P1", CatalogUnavailableError("Catalog lookup for product P1 timed out", product_id="P1")
        )

        with pytest.raises(ProductUnavailableError) as exc_info:
            await create_widget_order(order_service)

        assert str(exc_info.value) == "Product P1 not found"
        assert exc_info.value.context["reason"] == "CatalogUnavailableError"
        assert isinstance(exc_info.value, OrderValidationError)
        assert order_repository.orders == {}

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_validation_error(self, order_service):
        order_service.repository.create_order = AsyncMock(
            side_effect=OrderIntegrityError("constraint", error="ck_order_items_quantity_positive")
        )

        with pytest.raises(OrderValidationError) as exc_info:
            await create_widget_order(order_service)

        assert not isinstance(exc_info.value, ProductUnavailableError)
        assert exc_info.value.context["error"] == "ck_order_items_quantity_positive"

    @pytest.mark.asyncio
    async def test_database_error_becomes_processing_error(self, order_service):
        order_service.repository.create_order = AsyncMock(
            side_effect=OrderCreationError("database down")
        )

        with pytest.raises(OrderProcessingError):
            await create_widget_order(order_service)


class TestQueries:
    """Order lookups and listings."""

    @pytest.mark.asyncio
    async def test_get_order_is_repeatable(self, order_service):
        created = await create_widget_order(order_service)

        first = await order_service.get_order(created["id"])
        second = await order_service.get_order(created["id"])

        assert first == second == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order_id", ["not-a-uuid", "", str(uuid.uuid4())])
    async def test_unknown_order_raises_not_found(self, order_service, order_id):
        with pytest.raises(OrderNotFoundError):
            await order_service.get_order(order_id)

    @pytest.mark.asyncio
    async def test_list_user_orders_filters_by_user(self, order_service):
        mine = await create_widget_order(order_service, user_id="user-1")
        await create_widget_order(order_service, user_id="user-2")

        orders = await order_service.list_user_orders("user-1")

        assert [order["id"] for order in orders] == [mine["id"]]

    @pytest.mark.asyncio
    async def test_list_orders_returns_everything(self, order_service):
        await create_widget_order(order_service, user_id="user-1")
        await create_widget_order(order_service, user_id="user-2")

        orders = await order_service.list_orders()

        assert {order["user_id"] for order in orders} == {"user-1", "user-2"}

    @pytest.mark.asyncio
    async def test_list_failure_becomes_processing_error(self, order_service):
        order_service.repository.list_orders = AsyncMock(
            side_effect=OrderRepositoryError("Failed to list orders")
        )

        with pytest.raises(OrderProcessingError):
            await order_service.list_orders()


class TestUpdateOrderStatus:
    """Status changes and cancellation."""

    @pytest.mark.asyncio
    async def test_status_change_keeps_items_and_total(self, order_service, order_repository):
        created = await create_widget_order(order_service)
        stored = next(iter(order_repository.orders.values()))
        stored.updated_at = stored.updated_at - timedelta(seconds=30)
        previous_updated_at = stored.updated_at

        updated = await order_service.update_order_status(created["id"], OrderStatus.SHIPPED)

        fetched = await order_service.get_order(created["id"])
        assert fetched["status"] == "shipped"
        assert fetched["updated_at"] > previous_updated_at
        assert fetched["items"] == created["items"]
        assert fetched["total_amount"] == created["total_amount"]
        assert updated == fetched
        assert order_repository.saved == [stored]

    @pytest.mark.asyncio
    async def test_unknown_order_has_no_side_effects(self, order_service, order_repository):
        await create_widget_order(order_service)

        with pytest.raises(OrderNotFoundError):
            await order_service.update_order_status("nonexistent-id", OrderStatus.SHIPPED)

        assert order_repository.saved == []
        assert [o.status for o in order_repository.orders.values()] == [OrderStatus.PENDING]

    @pytest.mark.asyncio
    async def test_cancel_keeps_order_queryable(self, order_service):
        created = await create_widget_order(order_service)

        cancelled = await order_service.cancel_order(created["id"])

        assert cancelled["status"] == "cancelled"
        assert (await order_service.get_order(created["id"]))["status"] == "cancelled"
        user_orders = await order_service.list_user_orders("user-1")
        assert [order["id"] for order in user_orders] == [created["id"]]

    @pytest.mark.asyncio
    async def test_permissive_by_default(self, order_service):
        created = await create_widget_order(order_service)
        await order_service.update_order_status(created["id"], OrderStatus.DELIVERED)

        reopened = await order_service.update_order_status(created["id"], OrderStatus.PENDING)

        assert reopened["status"] == "pending"

    @pytest.mark.asyncio
    async def test_enforced_transitions_reject_out_of_flow(self, order_service_factory):
        service = order_service_factory(enforce_status_transitions=True)
        created = await create_widget_order(service)
        await service.cancel_order(created["id"])

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            await service.update_order_status(created["id"], OrderStatus.SHIPPED)

        assert exc_info.value.context["allowed_transitions"] == []
        assert (await service.get_order(created["id"]))["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_save_failure_becomes_processing_error(self, order_service):
        created = await create_widget_order(order_service)
        order_service.repository.save = AsyncMock(
            side_effect=OrderUpdateError("Order update failed")
        )

        with pytest.raises(OrderProcessingError):
            await order_service.update_order_status(created["id"], OrderStatus.PROCESSING)
