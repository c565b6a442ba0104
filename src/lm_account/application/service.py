"""AccountApplicationService — thin composition layer.

Withdraw validates the reference before touching storage and owns its
transaction (commit on success, rollback on any error). Reads run without an
explicit transaction.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_account.application.schemas import BalanceResponse, WithdrawalItem
from src.lm_account.domain.repository import AccountRepositoryProtocol
from src.lm_account.infrastructure.persistence import AccountRepository
from src.lm_common.checksum import validate_order_number
from src.lm_common.errors import BalanceNotFoundError
from src.lm_common.money import to_amount

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        balance = await self._repo.get_balance(db, user_id)
        if balance is None:
            raise BalanceNotFoundError(user_id)
        return BalanceResponse.from_balance(balance)

    async def withdraw(
        self, db: AsyncSession, user_id: str, reference: str, amount: Decimal
    ) -> BalanceResponse:
        reference = validate_order_number(reference)
        amount = to_amount(amount)
        try:
            balance, _ = await self._repo.withdraw(db, user_id, reference, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Withdrawal %s of %s for user %s", reference, amount, user_id)
        return BalanceResponse.from_balance(balance)

    async def list_withdrawals(
        self, db: AsyncSession, user_id: str
    ) -> list[WithdrawalItem]:
        withdrawals = await self._repo.list_withdrawals(db, user_id)
        return [WithdrawalItem.from_withdrawal(w) for w in withdrawals]
