"""Accrual domain models — pure dataclasses, no HTTP or SQL dependency."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from src.lm_common.enums import OrderStatus


class AccrualStatus(str, Enum):
    """Status vocabulary of the external accrual service."""
    REGISTERED = "REGISTERED"
    PROCESSING = "PROCESSING"
    INVALID = "INVALID"
    PROCESSED = "PROCESSED"


@dataclass(frozen=True)
class AccrualReport:
    """One parsed response of GET /api/orders/{number}."""
    order_number: str
    status: str  # raw external value, may be outside AccrualStatus
    accrual: Decimal | None = None


@dataclass(frozen=True)
class OrderResolution:
    """An order's next internal state, ready for the ledger updater."""
    order_number: str
    user_id: str
    status: OrderStatus
    accrual: Decimal
