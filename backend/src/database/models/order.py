"""
Order and order item models.

Orders are created once by the order creation workflow and afterwards only
their status (and ``updated_at``) changes. Order items embed a snapshot of the
catalog's product name and unit price taken at order time; those columns are
never refreshed from the catalog.
"""

import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.base import Base, BaseModel, UUIDMixin
from src.services.orders.enums import OrderStatus

# Unscaled so catalog prices and totals are stored exactly as computed
MONEY = Numeric(asdecimal=True)


class Order(BaseModel):
    """
    Customer order.

    Attributes:
        id: System-generated identifier (UUID, exposed as string)
        user_id: Opaque identifier of the user in the user service
        status: Current lifecycle status
        total_amount: Sum of price * quantity over items, fixed at creation
        shipping_address: Free-form address document
        items: Ordered order items (input order preserved via position)
        created_at: Creation timestamp (from BaseModel)
        updated_at: Last status change timestamp (from BaseModel)
    """

    __tablename__ = "orders"

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User who placed the order (owned by the user service)",
    )

    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            create_constraint=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
        comment="Current order status",
    )

    total_amount: Mapped[Decimal] = mapped_column(
        MONEY,
        nullable=False,
        comment="Order total computed at creation",
    )

    shipping_address: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=True,
        comment="Shipping address (street, city, state, zipCode, country)",
    )

    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_orders_user_id", "user_id"),
        Index("ix_orders_status", "status"),
        Index("ix_orders_created_at", "created_at"),
        CheckConstraint(
            "total_amount >= 0",
            name="ck_orders_total_amount_non_negative",
        ),
        {"comment": "Customer orders"},
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, user_id={self.user_id!r}, "
            f"status={self.status}, total_amount={self.total_amount})>"
        )


class OrderItem(Base, UUIDMixin):
    """
    Line item embedded in an order.

    Attributes:
        order_id: Parent order
        position: Zero-based index of the item in the request
        product_id: Catalog product identifier (not a foreign key)
        product_name: Product name snapshot at order time
        quantity: Units ordered, at least one
        price: Unit price snapshot at order time
    """

    __tablename__ = "order_items"

    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        comment="Parent order identifier",
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position of the item within the order",
    )

    product_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Catalog product identifier",
    )

    product_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Product name at time of order",
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Quantity ordered",
    )

    price: Mapped[Decimal] = mapped_column(
        MONEY,
        nullable=False,
        comment="Unit price at time of order",
    )

    order: Mapped["Order"] = relationship(
        "Order",
        back_populates="items",
    )

    __table_args__ = (
        Index("ix_order_items_order_position", "order_id", "position"),
        CheckConstraint(
            "quantity >= 1",
            name="ck_order_items_quantity_positive",
        ),
        CheckConstraint(
            "price >= 0",
            name="ck_order_items_price_non_negative",
        ),
        {"comment": "Items of an order with product snapshots"},
    )

    def __repr__(self) -> str:
        return (
            f"<OrderItem(id={self.id}, product_id={self.product_id!r}, "
            f"quantity={self.quantity}, price={self.price})>"
        )
