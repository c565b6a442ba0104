"""LedgerRepository — the storage side of one reconciliation tick.

Composes the order and account repositories so that status writes and balance
credits share the caller's session and therefore its transaction.
"""
import logging
from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_accrual.domain.models import OrderResolution
from src.lm_account.domain.repository import AccountRepositoryProtocol
from src.lm_account.infrastructure.persistence import AccountRepository
from src.lm_common.enums import OrderStatus
from src.lm_common.money import ZERO
from src.lm_order.domain.models import Order
from src.lm_order.domain.repository import OrderRepositoryProtocol
from src.lm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class LedgerRepository:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()

    async def list_unfinished_orders(self, db: AsyncSession) -> list[Order]:
        return await self._orders.list_unfinished(db)

    async def apply_resolutions(
        self, db: AsyncSession, resolutions: Sequence[OrderResolution]
    ) -> dict[str, Decimal]:
        credits: dict[str, Decimal] = defaultdict(lambda: ZERO)

        for resolution in resolutions:
            updated = await self._orders.update_status(
                db, resolution.order_number, resolution.status, resolution.accrual
            )
            if updated is None:
                # Finalized by an earlier commit; crediting again would double-count
                logger.warning("Order %s already finalized, skipped", resolution.order_number)
                continue
            if updated.status == OrderStatus.PROCESSED and updated.accrual > ZERO:
                credits[updated.user_id] += updated.accrual

        # Fixed user order keeps concurrent ticks from deadlocking on balance rows
        for user_id in sorted(credits):
            await self._accounts.credit(db, user_id, credits[user_id])

        return dict(credits)
