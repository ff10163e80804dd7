"""Order status pipeline: received -> kitchen -> delivery -> delivered.

Updates are permissive by default (any stage may be set at any time). With
``config.set_strict_transitions(True)`` only staying put or moving one stage
forward is accepted.
"""
from enum import Enum
from typing import Optional

from . import config
from .errors import ValidationError


class OrderStatus(str, Enum):
    RECEIVED = "received"
    KITCHEN = "kitchen"
    DELIVERY = "delivery"
    DELIVERED = "delivered"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


PIPELINE = (
    OrderStatus.RECEIVED,
    OrderStatus.KITCHEN,
    OrderStatus.DELIVERY,
    OrderStatus.DELIVERED,
)

# everything before the terminal stage counts as an open order
OPEN_STATUSES = PIPELINE[:-1]

ALLOWED_TRANSITIONS = {
    OrderStatus.RECEIVED: {OrderStatus.KITCHEN},
    OrderStatus.KITCHEN: {OrderStatus.DELIVERY},
    OrderStatus.DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError("Invalid status")


def next_status(status) -> Optional[OrderStatus]:
    current = parse_status(status)
    index = PIPELINE.index(current)
    if index + 1 < len(PIPELINE):
        return PIPELINE[index + 1]
    return None


def is_terminal(status) -> bool:
    return next_status(status) is None


def check_transition(current, target) -> OrderStatus:
    """Validate a status change and return the target as an ``OrderStatus``."""
    target = parse_status(target)
    if not config.is_strict_transitions():
        return target
    current = parse_status(current)
    if target != current and target not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(f"cannot move order from {current.value} to {target.value}")
    return target
