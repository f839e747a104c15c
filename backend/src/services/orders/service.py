"""
Order service orchestrating order creation, status changes and queries.

Order creation validates every requested item against the product catalog,
in request order, and stops at the first product that cannot be resolved.
Item names and prices always come from the catalog, never from the caller,
and the order total is computed once from those snapshots. Nothing is
persisted unless every item resolved.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.logging import get_logger, log_performance
from src.database.models.order import Order
from src.services.catalog.client import (
    CatalogClient,
    CatalogLookupError,
    CatalogUnavailableError,
)
from src.services.orders.enums import OrderStatus
from src.services.orders.repository import (
    OrderCreationError,
    OrderIntegrityError,
    OrderNotFoundError,
    OrderRepository,
    OrderRepositoryError,
)
from src.services.orders.state_machine import OrderStateMachine, StateTransitionError

logger = get_logger(__name__)


class OrderServiceError(Exception):
    """Base exception for order service errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderValidationError(OrderServiceError):
    """Raised when an order request or change is invalid."""

    pass


class ProductUnavailableError(OrderValidationError):
    """Raised when a requested product could not be resolved in the catalog.

    Attributes:
        product_id: First product in the request that failed to resolve
    """

    def __init__(self, message: str, product_id: str, **context: Any):
        super().__init__(message, product_id=product_id, **context)
        self.product_id = product_id


class InvalidStatusTransitionError(OrderValidationError):
    """Raised when transition enforcement rejects a status change."""

    pass


class OrderProcessingError(OrderServiceError):
    """Raised when order processing fails for reasons other than input."""

    pass


def serialize_order(order: Order) -> dict[str, Any]:
    """
    Convert an order and its items to a plain dictionary.

    Args:
        order: Loaded order

    Returns:
        Dictionary with snake_case keys, money as Decimal
    """
    return {
        "id": str(order.id),
        "user_id": order.user_id,
        "items": [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.items
        ],
        "total_amount": order.total_amount,
        "status": order.status.value,
        "shipping_address": order.shipping_address,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class OrderService:
    """
    Order service orchestrating business logic and integrations.

    Attributes:
        repository: Order repository for data access
        catalog: Catalog client for product lookups
        state_machine: State machine for status changes
    """

    def __init__(
        self,
        session: AsyncSession,
        catalog: CatalogClient,
        enforce_status_transitions: bool = False,
    ):
        """
        Initialize order service.

        Args:
            session: Async database session
            catalog: Catalog client shared across requests
            enforce_status_transitions: Restrict status changes to the
                documented order flow
        """
        self.repository = OrderRepository(session)
        self.catalog = catalog
        self.state_machine = OrderStateMachine(
            enforce_transitions=enforce_status_transitions
        )

    async def create_order(
        self,
        user_id: str,
        items: Sequence[dict[str, Any]],
        shipping_address: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Create a new order from catalog-validated items.

        Args:
            user_id: User placing the order
            items: Requested items; only ``product_id`` and ``quantity`` are
                read, any other key (such as a price) is ignored
            shipping_address: Shipping address document

        Returns:
            Dictionary containing the persisted order

        Raises:
            ProductUnavailableError: If any product cannot be resolved
            OrderValidationError: If the order violates stored constraints
            OrderProcessingError: If persistence fails
        """
        logger.info("Creating order", user_id=user_id, item_count=len(items))

        enriched_items: list[dict[str, Any]] = []
        total_amount = Decimal("0")

        for item in items:
            product_id = item["product_id"]
            quantity = item["quantity"]

            try:
                product = await self.catalog.lookup(product_id)
            except CatalogLookupError as e:
                logger.warning(
                    "Order rejected - product lookup failed",
                    user_id=user_id,
                    product_id=product_id,
                    catalog_unavailable=isinstance(e, CatalogUnavailableError),
                )
                raise ProductUnavailableError(
                    f"Product {product_id} not found",
                    product_id=product_id,
                    reason=type(e).__name__,
                ) from e

            enriched_items.append(
                {
                    "product_id": product.id,
                    "product_name": product.name,
                    "quantity": quantity,
                    "price": product.price,
                }
            )
            total_amount += product.price * quantity

        try:
            with log_performance(logger, "order_persist", user_id=user_id):
                order = await self.repository.create_order(
                    user_id=user_id,
                    items=enriched_items,
                    total_amount=total_amount,
                    shipping_address=shipping_address,
                )
        except OrderIntegrityError as e:
            raise OrderValidationError(
                "Order validation failed",
                user_id=user_id,
                error=e.context.get("error"),
            ) from e
        except OrderCreationError as e:
            raise OrderProcessingError(
                "Failed to create order",
                user_id=user_id,
                error=str(e),
            ) from e

        logger.info(
            "Order created",
            order_id=str(order.id),
            user_id=user_id,
            total_amount=str(total_amount),
        )

        return serialize_order(order)

    async def get_order(self, order_id: Any) -> dict[str, Any]:
        """
        Get order by ID.

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderProcessingError: If the lookup fails
        """
        order = await self._load_order(order_id)
        return serialize_order(order)

    async def list_orders(self) -> list[dict[str, Any]]:
        """Get every order."""
        try:
            orders = await self.repository.list_orders()
        except OrderRepositoryError as e:
            raise OrderProcessingError("Failed to list orders", error=str(e)) from e
        return [serialize_order(order) for order in orders]

    async def list_user_orders(self, user_id: str) -> list[dict[str, Any]]:
        """Get every order placed by ``user_id``, cancelled ones included."""
        try:
            orders = await self.repository.list_user_orders(user_id)
        except OrderRepositoryError as e:
            raise OrderProcessingError(
                "Failed to list user orders",
                user_id=user_id,
                error=str(e),
            ) from e
        return [serialize_order(order) for order in orders]

    async def update_order_status(
        self,
        order_id: Any,
        new_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Set an order's status.

        Args:
            order_id: Order identifier
            new_status: New order status
            reason: Optional reason, logged only

        Returns:
            Dictionary containing the updated order

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidStatusTransitionError: If enforcement rejects the change
            OrderProcessingError: If the update fails
        """
        logger.info(
            "Updating order status",
            order_id=str(order_id),
            new_status=new_status.value,
        )

        order = await self._load_order(order_id)

        try:
            self.state_machine.apply_transition(order, new_status, reason=reason)
        except StateTransitionError as e:
            raise InvalidStatusTransitionError(
                str(e),
                order_id=str(order_id),
                **e.context,
            ) from e

        try:
            await self.repository.save(order)
        except OrderRepositoryError as e:
            raise OrderProcessingError(
                "Failed to update order status",
                order_id=str(order_id),
                error=str(e),
            ) from e

        return serialize_order(order)

    async def cancel_order(self, order_id: Any) -> dict[str, Any]:
        """
        Cancel an order by marking it cancelled; the record is kept.

        Raises:
            OrderNotFoundError: If the order does not exist
        """
        return await self.update_order_status(
            order_id,
            OrderStatus.CANCELLED,
            reason="cancelled by request",
        )

    async def _load_order(self, order_id: Any) -> Order:
        try:
            order = await self.repository.get_order_by_id(order_id)
        except OrderRepositoryError as e:
            raise OrderProcessingError(
                "Failed to fetch order",
                order_id=str(order_id),
                error=str(e),
            ) from e

        if order is None:
            raise OrderNotFoundError("Order not found", order_id=str(order_id))

        return order
