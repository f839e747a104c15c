"""
Order Pydantic schemas for API request/response validation.

Wire format is camelCase JSON. Request schemas only accept the fields the
service trusts from callers; anything else in the body (for example a
``price`` or ``productName`` on an item) is ignored.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
)
from pydantic.alias_generators import to_camel

from src.services.orders.enums import OrderStatus

# Money is kept as Decimal internally and rendered as a JSON number
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ShippingAddress(CamelModel):
    """Shipping address. Every component is optional."""

    model_config = ConfigDict(str_strip_whitespace=True)

    street: Optional[str] = Field(None, max_length=255, description="Street")
    city: Optional[str] = Field(None, max_length=100, description="City")
    state: Optional[str] = Field(None, max_length=100, description="State")
    zip_code: Optional[str] = Field(None, max_length=20, description="ZIP/postal code")
    country: Optional[str] = Field(None, max_length=100, description="Country")


class OrderItemRequest(CamelModel):
    """Requested item: product reference and quantity only."""

    product_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Catalog product identifier",
    )
    quantity: int = Field(
        ...,
        ge=1,
        description="Units to order",
    )


class OrderCreateRequest(CamelModel):
    """Request schema for creating a new order."""

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User placing the order",
    )
    items: list[OrderItemRequest] = Field(
        ...,
        min_length=1,
        description="Requested items, processed in order",
    )
    shipping_address: Optional[ShippingAddress] = Field(
        None,
        description="Shipping address",
    )


class OrderStatusUpdate(CamelModel):
    """Request schema for changing an order's status."""

    status: OrderStatus = Field(..., description="New order status")


class OrderItemResponse(CamelModel):
    """Order item with catalog snapshot."""

    product_id: str
    product_name: str
    quantity: int
    price: Money


class OrderResponse(CamelModel):
    """Full order representation."""

    id: str
    user_id: str
    items: list[OrderItemResponse]
    total_amount: Money
    status: OrderStatus
    shipping_address: Optional[ShippingAddress] = None
    created_at: datetime
    updated_at: datetime


class CancelOrderResponse(CamelModel):
    """Response returned when an order is cancelled."""

    message: str = "Order cancelled"
    order: OrderResponse


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""

    message: str
