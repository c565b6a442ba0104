"""OrderRepository — raw SQL persistence implementation."""
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.enums import UNFINISHED_ORDER_STATUSES, AdmissionResult, OrderStatus
from src.lm_common.errors import OrderOwnedByAnotherUserError
from src.lm_order.domain.models import Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_UNFINISHED_STATUSES_SQL = ", ".join(f"'{s.value}'" for s in UNFINISHED_ORDER_STATUSES)

_SELECT_COLUMNS = """
    order_number, CAST(user_id AS TEXT) AS user_id, status, accrual,
    uploaded_at, updated_at
"""

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (order_number, user_id, status)
    VALUES (:order_number, CAST(:user_id AS UUID), 'NEW')
    ON CONFLICT (order_number) DO NOTHING
    RETURNING order_number
""")

_GET_OWNER_SQL = text("""
    SELECT CAST(user_id AS TEXT) AS user_id FROM orders WHERE order_number = :order_number
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY uploaded_at DESC
""")

_LIST_UNFINISHED_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE status IN ({_UNFINISHED_STATUSES_SQL})
    ORDER BY uploaded_at ASC
""")

# The status guard keeps terminal orders immutable: a replayed PROCESSED
# result matches zero rows and therefore produces no second credit.
_UPDATE_STATUS_SQL = text(f"""
    UPDATE orders
    SET status = :status, accrual = :accrual, updated_at = NOW()
    WHERE order_number = :order_number
      AND status IN ({_UNFINISHED_STATUSES_SQL})
    RETURNING {_SELECT_COLUMNS}
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        order_number=row.order_number,
        user_id=row.user_id,
        status=row.status,
        accrual=row.accrual,
        uploaded_at=row.uploaded_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def add_order(
        self, db: AsyncSession, user_id: str, order_number: str
    ) -> AdmissionResult:
        result = await db.execute(
            _INSERT_ORDER_SQL, {"order_number": order_number, "user_id": user_id}
        )
        if result.fetchone() is not None:
            return AdmissionResult.CREATED

        owner = (await db.execute(_GET_OWNER_SQL, {"order_number": order_number})).fetchone()
        if owner is not None and owner.user_id == user_id:
            return AdmissionResult.ALREADY_REGISTERED
        raise OrderOwnedByAnotherUserError(order_number)

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Order]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_unfinished(self, db: AsyncSession) -> list[Order]:
        result = await db.execute(_LIST_UNFINISHED_SQL)
        return [_row_to_order(row) for row in result.fetchall()]

    async def update_status(
        self, db: AsyncSession, order_number: str, status: str, accrual: Decimal
    ) -> Order | None:
        result = await db.execute(
            _UPDATE_STATUS_SQL,
            {
                "order_number": order_number,
                "status": OrderStatus(status).value,
                "accrual": accrual,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None
