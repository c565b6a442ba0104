"""Pydantic schemas for lm_order API."""

from pydantic import BaseModel

from src.lm_common.enums import OrderStatus
from src.lm_common.money import amount_to_json
from src.lm_order.domain.models import Order


class OrderItem(BaseModel):
    number: str
    status: str
    accrual: float | None = None  # present only for PROCESSED orders
    uploaded_at: str  # ISO8601 string

    @classmethod
    def from_order(cls, order: Order) -> "OrderItem":
        return cls(
            number=order.order_number,
            status=order.status,
            accrual=amount_to_json(order.accrual) if order.status == OrderStatus.PROCESSED else None,
            uploaded_at=order.uploaded_at.isoformat() if order.uploaded_at else "",
        )


class SubmitOrderResponse(BaseModel):
    number: str
    result: str  # AdmissionResult value
