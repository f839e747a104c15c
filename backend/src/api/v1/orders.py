"""
Order API endpoints.

This module implements the FastAPI router for order creation, retrieval,
status changes and cancellation. Service exceptions are translated into
HTTP errors here; the application-level handlers render every error as a
``{"message": ...}`` body.
"""

from fastapi import APIRouter, HTTPException, status

from src.api.deps import OrderServiceDep
from src.core.logging import get_logger
from src.schemas.orders import (
    CancelOrderResponse,
    ErrorResponse,
    OrderCreateRequest,
    OrderResponse,
    OrderStatusUpdate,
)
from src.services.orders.repository import OrderNotFoundError
from src.services.orders.service import (
    OrderProcessingError,
    OrderValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

ORDER_NOT_FOUND = "Order not found"


def _not_found(order_id: str) -> HTTPException:
    logger.info("Order not found", order_id=order_id)
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ORDER_NOT_FOUND)


def _processing_failed(exc: OrderProcessingError) -> HTTPException:
    logger.error("Order processing failed", error=str(exc), context=exc.context)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.get(
    "",
    response_model=list[OrderResponse],
    summary="List all orders",
    responses={500: {"model": ErrorResponse}},
)
async def list_orders(order_service: OrderServiceDep) -> list[OrderResponse]:
    """List every order in the system."""
    try:
        orders = await order_service.list_orders()
    except OrderProcessingError as e:
        raise _processing_failed(e) from e
    return [OrderResponse(**order) for order in orders]


@router.get(
    "/user/{user_id}",
    response_model=list[OrderResponse],
    summary="List a user's orders",
    responses={500: {"model": ErrorResponse}},
)
async def list_user_orders(
    user_id: str,
    order_service: OrderServiceDep,
) -> list[OrderResponse]:
    """List every order placed by a user, cancelled orders included."""
    try:
        orders = await order_service.list_user_orders(user_id)
    except OrderProcessingError as e:
        raise _processing_failed(e) from e
    return [OrderResponse(**order) for order in orders]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order details",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_order(order_id: str, order_service: OrderServiceDep) -> OrderResponse:
    """Get a single order by its identifier."""
    try:
        order = await order_service.get_order(order_id)
    except OrderNotFoundError as e:
        raise _not_found(order_id) from e
    except OrderProcessingError as e:
        raise _processing_failed(e) from e
    return OrderResponse(**order)


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new order",
    description=(
        "Validate each item against the product catalog, snapshot product "
        "names and prices, compute the total and persist a pending order."
    ),
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_order(
    request: OrderCreateRequest,
    order_service: OrderServiceDep,
) -> OrderResponse:
    """
    Create a new order.

    Args:
        request: User, requested items and shipping address
        order_service: Order service

    Returns:
        OrderResponse: The created order

    Raises:
        HTTPException: 400 if a product cannot be resolved or the order is
            invalid, 500 if persistence fails
    """
    shipping_address = (
        request.shipping_address.model_dump(by_alias=True, exclude_none=True)
        if request.shipping_address is not None
        else None
    )

    try:
        order = await order_service.create_order(
            user_id=request.user_id,
            items=[
                {"product_id": item.product_id, "quantity": item.quantity}
                for item in request.items
            ],
            shipping_address=shipping_address,
        )
    except OrderValidationError as e:
        logger.warning(
            "Order rejected",
            user_id=request.user_id,
            error=str(e),
            context=e.context,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except OrderProcessingError as e:
        raise _processing_failed(e) from e

    return OrderResponse(**order)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdate,
    order_service: OrderServiceDep,
) -> OrderResponse:
    """Set the status of an order."""
    try:
        order = await order_service.update_order_status(order_id, request.status)
    except OrderNotFoundError as e:
        raise _not_found(order_id) from e
    except OrderValidationError as e:
        logger.warning(
            "Order status change rejected",
            order_id=order_id,
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except OrderProcessingError as e:
        raise _processing_failed(e) from e

    return OrderResponse(**order)


@router.delete(
    "/{order_id}",
    response_model=CancelOrderResponse,
    summary="Cancel order",
    description="Mark the order as cancelled. The order is kept and stays queryable.",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def cancel_order(order_id: str, order_service: OrderServiceDep) -> CancelOrderResponse:
    """Cancel an order."""
    try:
        order = await order_service.cancel_order(order_id)
    except OrderNotFoundError as e:
        raise _not_found(order_id) from e
    except OrderValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except OrderProcessingError as e:
        raise _processing_failed(e) from e

    return CancelOrderResponse(order=OrderResponse(**order))
