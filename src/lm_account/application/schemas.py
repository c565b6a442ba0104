"""Pydantic schemas for lm_account API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.lm_account.domain.models import Balance, Withdrawal
from src.lm_common.money import amount_to_json

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class WithdrawRequest(BaseModel):
    order: str = Field(..., min_length=1, description="Luhn-valid withdrawal reference")
    sum: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    current: float
    withdrawn: float

    @classmethod
    def from_balance(cls, balance: Balance) -> "BalanceResponse":
        return cls(
            current=amount_to_json(balance.current),
            withdrawn=amount_to_json(balance.withdrawn),
        )


class WithdrawalItem(BaseModel):
    order: str
    sum: float
    processed_at: str  # ISO8601 string

    @classmethod
    def from_withdrawal(cls, withdrawal: Withdrawal) -> "WithdrawalItem":
        return cls(
            order=withdrawal.order_number,
            sum=amount_to_json(withdrawal.amount),
            processed_at=withdrawal.processed_at.isoformat() if withdrawal.processed_at else "",
        )
