"""
Order data access repository.

This module implements the OrderRepository class providing async methods for
persisting new orders with their items, loading orders by id or user, and
flushing status changes. Database failures are wrapped in repository
exceptions after the session has been rolled back.
"""

import uuid
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.logging import get_logger
from src.database.models.order import Order, OrderItem
from src.services.orders.enums import OrderStatus

logger = get_logger(__name__)


class OrderRepositoryError(Exception):
    """Base exception for order repository errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderNotFoundError(OrderRepositoryError):
    """Raised when order is not found."""

    pass


class OrderCreationError(OrderRepositoryError):
    """Raised when order creation fails."""

    pass


class OrderIntegrityError(OrderCreationError):
    """Raised when a new order violates a table constraint."""

    pass


class OrderUpdateError(OrderRepositoryError):
    """Raised when order update fails."""

    pass


def parse_order_id(order_id: Any) -> Optional[uuid.UUID]:
    """
    Parse an opaque order identifier.

    Args:
        order_id: Order identifier as received from a caller

    Returns:
        UUID, or None when the value cannot identify any order
    """
    if isinstance(order_id, uuid.UUID):
        return order_id
    try:
        return uuid.UUID(str(order_id))
    except (ValueError, TypeError, AttributeError):
        return None


class OrderRepository:
    """
    Repository for order data access operations.

    Writes are flushed, not committed; the surrounding session scope
    commits or rolls back.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize order repository.

        Args:
            session: Async database session
        """
        self.session = session

    async def create_order(
        self,
        user_id: str,
        items: Sequence[dict[str, Any]],
        total_amount: Decimal,
        shipping_address: Optional[dict[str, Any]] = None,
    ) -> Order:
        """
        Persist a new pending order with its items.

        Args:
            user_id: User placing the order
            items: Item snapshots with product_id, product_name, quantity, price
            total_amount: Precomputed order total
            shipping_address: Shipping address document

        Returns:
            Persisted order with generated id and timestamps

        Raises:
            OrderIntegrityError: If a table constraint is violated
            OrderCreationError: If the insert fails for any other reason
        """
        try:
            logger.debug(
                "Persisting order",
                user_id=user_id,
                item_count=len(items),
            )

            order = Order(
                user_id=user_id,
                status=OrderStatus.PENDING,
                total_amount=total_amount,
                shipping_address=shipping_address,
                items=[
                    OrderItem(
                        position=position,
                        product_id=item["product_id"],
                        product_name=item["product_name"],
                        quantity=item["quantity"],
                        price=item["price"],
                    )
                    for position, item in enumerate(items)
                ],
            )

            self.session.add(order)
            await self.session.flush()

            logger.info(
                "Order persisted",
                order_id=str(order.id),
                user_id=user_id,
                item_count=len(items),
            )

            return order

        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Order creation failed - integrity error",
                user_id=user_id,
                error=str(e.orig) if e.orig is not None else str(e),
            )
            raise OrderIntegrityError(
                "Order violates stored schema constraints",
                user_id=user_id,
                error=str(e),
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Order creation failed - database error",
                user_id=user_id,
                error=str(e),
            )
            raise OrderCreationError(
                "Order creation failed due to database error",
                user_id=user_id,
                error=str(e),
            ) from e

    async def get_order_by_id(self, order_id: Any) -> Optional[Order]:
        """
        Get order by ID with its items.

        Args:
            order_id: Order identifier (string or UUID)

        Returns:
            Order if found, None otherwise

        Raises:
            OrderRepositoryError: If query fails
        """
        parsed_id = parse_order_id(order_id)
        if parsed_id is None:
            logger.debug("Unparseable order id", order_id=str(order_id))
            return None

        try:
            result = await self.session.execute(
                select(Order).where(Order.id == parsed_id)
            )
            order = result.scalar_one_or_none()

            logger.debug(
                "Order lookup",
                order_id=str(parsed_id),
                found=order is not None,
            )
            return order

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch order",
                order_id=str(order_id),
                error=str(e),
            )
            raise OrderRepositoryError(
                "Failed to fetch order",
                order_id=str(order_id),
                error=str(e),
            ) from e

    async def list_orders(self) -> Sequence[Order]:
        """
        Get all orders.

        Raises:
            OrderRepositoryError: If query fails
        """
        try:
            result = await self.session.execute(
                select(Order).order_by(Order.created_at)
            )
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list orders", error=str(e))
            raise OrderRepositoryError(
                "Failed to list orders",
                error=str(e),
            ) from e

    async def list_user_orders(self, user_id: str) -> Sequence[Order]:
        """
        Get all orders placed by a user.

        Args:
            user_id: User identifier

        Raises:
            OrderRepositoryError: If query fails
        """
        try:
            result = await self.session.execute(
                select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.created_at)
            )
            orders = result.scalars().all()

            logger.debug("User orders fetched", user_id=user_id, count=len(orders))
            return orders
        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch user orders",
                user_id=user_id,
                error=str(e),
            )
            raise OrderRepositoryError(
                "Failed to fetch user orders",
                user_id=user_id,
                error=str(e),
            ) from e

    async def save(self, order: Order) -> Order:
        """
        Flush changes made to a loaded order.

        Args:
            order: Order mutated in this session

        Returns:
            The same order

        Raises:
            OrderUpdateError: If the update fails
        """
        order_id = str(order.id)
        try:
            await self.session.flush()
            logger.debug("Order changes flushed", order_id=order_id)
            return order
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Order update failed",
                order_id=order_id,
                error=str(e),
            )
            raise OrderUpdateError(
                "Order update failed due to database error",
                order_id=order_id,
                error=str(e),
            ) from e
