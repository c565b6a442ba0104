"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class OrderStatus(str, Enum):
    NEW = "NEW"
    PROCESSING = "PROCESSING"
    INVALID = "INVALID"
    PROCESSED = "PROCESSED"


# Orders the reconciliation loop still polls
UNFINISHED_ORDER_STATUSES: tuple[OrderStatus, ...] = (OrderStatus.NEW, OrderStatus.PROCESSING)


class AdmissionResult(str, Enum):
    """Outcome of registering an order number for a user."""
    CREATED = "CREATED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
