"""Ports used by the reconciliation loop.

The loop depends only on these Protocols; tests substitute an in-memory ledger
and a scripted accrual client.
"""
from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_accrual.domain.models import AccrualReport, OrderResolution
from src.lm_order.domain.models import Order


class LedgerRepositoryProtocol(Protocol):
    async def list_unfinished_orders(self, db: AsyncSession) -> list[Order]: ...

    async def apply_resolutions(
        self, db: AsyncSession, resolutions: Sequence[OrderResolution]
    ) -> dict[str, Decimal]:
        """Write statuses and credit balances; returns the credit per user id.

        Runs inside the caller's transaction and never commits.
        """
        ...


class AccrualClientProtocol(Protocol):
    async def fetch(self, order_number: str) -> AccrualReport: ...
