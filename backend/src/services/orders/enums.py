"""Order status enum and the documented order flow.

The flow below describes how orders normally move through fulfilment. It is
advisory unless transition enforcement is switched on; see
``OrderStateMachine``.
"""

from enum import Enum
from typing import Dict, Set


class OrderStatus(str, Enum):
    """Order lifecycle status.

    Documented flow:
    - PENDING -> PROCESSING, CANCELLED
    - PROCESSING -> SHIPPED, CANCELLED
    - SHIPPED -> DELIVERED
    - DELIVERED -> (terminal)
    - CANCELLED -> (terminal)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUS_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def get_allowed_order_transitions(current_status: OrderStatus) -> Set[OrderStatus]:
    """Get the statuses reachable from ``current_status`` in the documented flow."""
    return ORDER_STATUS_TRANSITIONS.get(current_status, set())


def validate_order_status_transition(
    current_status: OrderStatus, target_status: OrderStatus
) -> bool:
    """Check a transition against the documented flow.

    Re-applying the current status is always accepted.
    """
    if current_status == target_status:
        return True
    return target_status in get_allowed_order_transitions(current_status)
