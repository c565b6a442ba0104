"""OrderRepository Protocol — interface contract for persistence layer."""
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.enums import AdmissionResult
from src.lm_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def add_order(
        self, db: AsyncSession, user_id: str, order_number: str
    ) -> AdmissionResult:
        """Insert a NEW order; raises OrderOwnedByAnotherUserError on conflict."""
        ...

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Order]: ...

    async def list_unfinished(self, db: AsyncSession) -> list[Order]: ...

    async def update_status(
        self, db: AsyncSession, order_number: str, status: str, accrual: Decimal
    ) -> Order | None:
        """Advance an unfinished order; returns None if it was already terminal."""
        ...
