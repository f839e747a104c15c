"""Order state machine for status changes.

Status changes are permissive by default: any status may follow any other,
which is how orders have always behaved in this service. When
``enforce_transitions`` is on, changes must follow the documented flow in
``src.services.orders.enums``.
"""

from typing import Any, Optional

from src.core.logging import get_logger
from src.database.base import utc_now
from src.database.models.order import Order
from src.services.orders.enums import (
    OrderStatus,
    get_allowed_order_transitions,
    validate_order_status_transition,
)

logger = get_logger(__name__)


class StateTransitionError(Exception):
    """Raised when a status change is outside the documented flow."""

    def __init__(
        self,
        message: str,
        current_state: OrderStatus,
        target_state: OrderStatus,
        **context: Any,
    ):
        super().__init__(message)
        self.current_state = current_state
        self.target_state = target_state
        self.context = context


class OrderStateMachine:
    """Applies status changes to orders.

    Attributes:
        enforce_transitions: Reject changes outside the documented flow
    """

    def __init__(self, enforce_transitions: bool = False):
        self.enforce_transitions = enforce_transitions

    def validate_transition(self, order: Order, target_status: OrderStatus) -> bool:
        """Validate a status change for ``order``.

        Args:
            order: Order to change
            target_status: Desired status

        Returns:
            True if the change may be applied

        Raises:
            StateTransitionError: If enforcement is on and the change is
                outside the documented flow
        """
        current_status = order.status

        if not self.enforce_transitions:
            return True

        if not validate_order_status_transition(current_status, target_status):
            allowed = sorted(s.value for s in get_allowed_order_transitions(current_status))
            raise StateTransitionError(
                f"Invalid status transition from {current_status.value} to "
                f"{target_status.value}",
                current_state=current_status,
                target_state=target_status,
                allowed_transitions=allowed,
            )

        return True

    def apply_transition(
        self,
        order: Order,
        target_status: OrderStatus,
        reason: Optional[str] = None,
    ) -> Order:
        """Validate and apply a status change in memory.

        ``updated_at`` never moves backwards, even if the clock does.

        Args:
            order: Order to change
            target_status: New status
            reason: Optional reason, logged only

        Returns:
            The same order instance, mutated

        Raises:
            StateTransitionError: If the change is rejected
        """
        self.validate_transition(order, target_status)

        previous_status = order.status
        previous_updated_at = order.updated_at
        now = utc_now()

        order.status = target_status
        order.updated_at = (
            max(now, previous_updated_at) if previous_updated_at is not None else now
        )

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            transition=f"{previous_status.value}->{target_status.value}",
            reason=reason,
        )

        return order
