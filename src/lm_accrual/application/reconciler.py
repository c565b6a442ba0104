"""ReconciliationLoop — converges order statuses and balances to the accrual service.

Each tick:
  1. load every NEW / PROCESSING order
  2. look all of them up concurrently and wait for every lookup
  3. translate successful reports, drop failed or unknown ones
  4. hand the batch to LedgerUpdater as one transaction

Ticks never overlap: the next one starts only after the previous commit (or
failure) and at most once per interval. A failed lookup or a failed commit is
logged and the affected orders are simply polled again on the next tick; only
the stop signal or task cancellation ends the loop.
"""
import asyncio
import contextlib
import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.lm_accrual.application.updater import LedgerUpdater
from src.lm_accrual.domain.models import OrderResolution
from src.lm_accrual.domain.repository import AccrualClientProtocol, LedgerRepositoryProtocol
from src.lm_accrual.domain.translator import translate_report
from src.lm_common.errors import AccrualError
from src.lm_order.domain.models import Order

logger = logging.getLogger(__name__)


class ReconciliationLoop:
    def __init__(
        self,
        client: AccrualClientProtocol,
        repo: LedgerRepositoryProtocol,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        interval: float = 1.0,
        db_timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._repo = repo
        self._session_factory = session_factory
        self._updater = LedgerUpdater(repo, session_factory)
        self._interval = interval
        self._db_timeout = db_timeout
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, stop_event: asyncio.Event | None = None) -> asyncio.Task[None]:
        """Schedule the loop on the running event loop; stop_event ends it."""
        if self.is_running:
            raise RuntimeError("Reconciliation loop already running")
        self._stop_event = stop_event or asyncio.Event()
        self._task = asyncio.create_task(
            self.run(self._stop_event), name="accrual-reconciliation"
        )
        return self._task

    async def stop(self, grace: float | None = None) -> None:
        """Raise the stop signal and wait for the current tick.

        With a grace period, a tick still running after it is cancelled; its
        lookups are abandoned and its uncommitted batch rolls back.
        """
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        task, self._task = self._task, None
        done, _ = await asyncio.wait({task}, timeout=grace)
        if not done:
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def run(self, stop_event: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        logger.info("Reconciliation loop started (interval=%.2fs)", self._interval)
        while not stop_event.is_set():
            started = loop.time()
            await self._run_tick_logged()
            remaining = self._interval - (loop.time() - started)
            if remaining > 0:
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop_event.wait(), remaining)
        logger.info("Reconciliation loop stopped")

    # ------------------------------------------------------------------
    # One tick
    # ------------------------------------------------------------------

    async def _run_tick_logged(self) -> None:
        try:
            await self.run_tick()
        except Exception:
            logger.exception("Reconciliation tick failed, orders stay unfinished")

    async def run_tick(self) -> dict[str, Decimal]:
        """Run one reconciliation cycle; returns the credit applied per user."""
        orders = await self._load_unfinished()
        logger.debug("Reconciliation tick: %d unfinished orders", len(orders))
        if not orders:
            return {}

        async with asyncio.TaskGroup() as group:
            lookups = [group.create_task(self._resolve(order)) for order in orders]

        resolutions = [r for r in (task.result() for task in lookups) if r is not None]
        if not resolutions:
            return {}

        async with asyncio.timeout(self._db_timeout):
            return await self._updater.apply(resolutions)

    async def _load_unfinished(self) -> list[Order]:
        async with self._session_factory() as db:
            async with asyncio.timeout(self._db_timeout):
                return await self._repo.list_unfinished_orders(db)

    async def _resolve(self, order: Order) -> OrderResolution | None:
        # Any failure here drops this order only; the TaskGroup must not see it.
        try:
            report = await self._client.fetch(order.order_number)
            resolution = translate_report(order, report)
        except AccrualError as exc:
            logger.warning("Accrual lookup for order %s dropped: %s", order.order_number, exc.message)
            return None
        except Exception:
            logger.exception("Accrual lookup for order %s failed unexpectedly, dropped", order.order_number)
            return None

        if resolution is None:
            logger.warning(
                "Unknown accrual status %r for order %s, ignored",
                report.status, order.order_number,
            )
        return resolution
