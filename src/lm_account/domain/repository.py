"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or in-memory store that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_account.domain.models import Balance, Withdrawal


class AccountRepositoryProtocol(Protocol):
    async def create_balance(self, db: AsyncSession, user_id: str) -> Balance: ...

    async def get_balance(self, db: AsyncSession, user_id: str) -> Balance | None: ...

    async def credit(
        self, db: AsyncSession, user_id: str, amount: Decimal
    ) -> Balance: ...

    async def withdraw(
        self, db: AsyncSession, user_id: str, reference: str, amount: Decimal
    ) -> tuple[Balance, Withdrawal]: ...

    async def list_withdrawals(
        self, db: AsyncSession, user_id: str
    ) -> list[Withdrawal]: ...
