"""Order domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.lm_common.enums import UNFINISHED_ORDER_STATUSES, OrderStatus
from src.lm_common.money import ZERO


@dataclass
class Order:
    order_number: str  # Luhn-valid, unique across all users
    user_id: str
    status: str = OrderStatus.NEW
    accrual: Decimal = ZERO  # meaningful only once PROCESSED
    uploaded_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_unfinished(self) -> bool:
        return self.status in UNFINISHED_ORDER_STATUSES
