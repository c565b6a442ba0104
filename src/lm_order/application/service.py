# src/lm_order/application/service.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.checksum import validate_order_number
from src.lm_common.enums import AdmissionResult
from src.lm_order.application.schemas import OrderItem, SubmitOrderResponse
from src.lm_order.domain.repository import OrderRepositoryProtocol
from src.lm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderApplicationService:
    def __init__(self, repo: OrderRepositoryProtocol | None = None) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()

    async def submit_order(
        self, db: AsyncSession, user_id: str, raw_number: str
    ) -> SubmitOrderResponse:
        """Register an order number as NEW for the user.

        The checksum is checked before any storage access. Re-submitting a
        number the same user already owns succeeds without a second row.
        """
        number = validate_order_number(raw_number)
        try:
            result = await self._repo.add_order(db, user_id, number)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if result is AdmissionResult.ALREADY_REGISTERED:
            logger.info("Order %s already uploaded by user %s", number, user_id)
        return SubmitOrderResponse(number=number, result=result.value)

    async def list_orders(self, db: AsyncSession, user_id: str) -> list[OrderItem]:
        orders = await self._repo.list_by_user(db, user_id)
        return [OrderItem.from_order(o) for o in orders]
