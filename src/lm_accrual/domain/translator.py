"""Maps accrual-service statuses onto internal order statuses. Pure, no I/O."""
from src.lm_accrual.domain.models import AccrualReport, AccrualStatus, OrderResolution
from src.lm_common.enums import OrderStatus
from src.lm_common.money import ZERO, to_amount
from src.lm_order.domain.models import Order

_STATUS_MAP: dict[AccrualStatus, OrderStatus] = {
    AccrualStatus.REGISTERED: OrderStatus.PROCESSING,
    AccrualStatus.PROCESSING: OrderStatus.PROCESSING,
    AccrualStatus.INVALID: OrderStatus.INVALID,
    AccrualStatus.PROCESSED: OrderStatus.PROCESSED,
}


def translate_report(order: Order, report: AccrualReport) -> OrderResolution | None:
    """Return the order's next state, or None if the external status is unknown.

    Only PROCESSED carries the external accrual forward; every other status
    resolves with a zero accrual.
    """
    try:
        external = AccrualStatus(report.status)
    except ValueError:
        return None

    status = _STATUS_MAP[external]
    accrual = ZERO
    if status is OrderStatus.PROCESSED and report.accrual is not None:
        accrual = to_amount(report.accrual)

    return OrderResolution(
        order_number=order.order_number,
        user_id=order.user_id,
        status=status,
        accrual=accrual,
    )
