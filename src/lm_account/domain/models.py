"""Domain models for lm_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Balance:
    user_id: str
    current: Decimal     # spendable, never negative
    withdrawn: Decimal   # cumulative, never decreases
    updated_at: datetime | None = None


@dataclass
class Withdrawal:
    order_number: str    # Luhn-valid receipt reference, unique across users
    user_id: str
    amount: Decimal
    processed_at: datetime | None = None
