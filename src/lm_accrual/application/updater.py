"""LedgerUpdater — applies one tick's resolutions as a single transaction.

Either every status write and balance credit of the batch commits, or none
does and the orders stay unfinished for the next tick.
"""
import logging
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.lm_accrual.domain.models import OrderResolution
from src.lm_accrual.domain.repository import LedgerRepositoryProtocol

logger = logging.getLogger(__name__)


class LedgerUpdater:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._repo = repo
        self._session_factory = session_factory

    async def apply(self, resolutions: Sequence[OrderResolution]) -> dict[str, Decimal]:
        if not resolutions:
            return {}
        async with self._session_factory() as db:
            try:
                credits = await self._repo.apply_resolutions(db, resolutions)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info(
            "Ledger batch committed: %d orders written, %d users credited",
            len(resolutions), len(credits),
        )
        return credits
