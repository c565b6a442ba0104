"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows means a business constraint was violated (insufficient funds).
Credits from the reconciliation loop and debits from withdrawals race on the
same row; the single-statement updates keep either from losing the other.

Transaction ownership: The CALLER (application service) commits or rolls back.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_account.domain.models import Balance, Withdrawal
from src.lm_common.errors import (
    BalanceNotFoundError,
    DuplicateWithdrawalError,
    InsufficientBalanceError,
    InternalError,
)
from src.lm_common.money import ZERO

_BALANCE_COLUMNS = "CAST(user_id AS TEXT) AS user_id, current, withdrawn, updated_at"

_CREATE_BALANCE_SQL = text(f"""
    INSERT INTO balances (user_id, current, withdrawn)
    VALUES (CAST(:user_id AS UUID), 0, 0)
    RETURNING {_BALANCE_COLUMNS}
""")

_GET_BALANCE_SQL = text(f"""
    SELECT {_BALANCE_COLUMNS}
    FROM balances
    WHERE user_id = CAST(:user_id AS UUID)
""")

_CREDIT_SQL = text(f"""
    UPDATE balances
    SET current = current + :amount,
        updated_at = NOW()
    WHERE user_id = CAST(:user_id AS UUID)
    RETURNING {_BALANCE_COLUMNS}
""")

_DEBIT_SQL = text(f"""
    UPDATE balances
    SET current   = current   - :amount,
        withdrawn = withdrawn + :amount,
        updated_at = NOW()
    WHERE user_id = CAST(:user_id AS UUID) AND current >= :amount
    RETURNING {_BALANCE_COLUMNS}
""")

_INSERT_WITHDRAWAL_SQL = text("""
    INSERT INTO withdrawals (order_number, user_id, amount)
    VALUES (:order_number, CAST(:user_id AS UUID), :amount)
    ON CONFLICT (order_number) DO NOTHING
    RETURNING order_number, CAST(user_id AS TEXT) AS user_id, amount, processed_at
""")

_LIST_WITHDRAWALS_SQL = text("""
    SELECT order_number, CAST(user_id AS TEXT) AS user_id, amount, processed_at
    FROM withdrawals
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY processed_at DESC
""")


def _row_to_balance(row: object) -> Balance:
    return Balance(
        user_id=row.user_id,  # type: ignore[attr-defined]
        current=row.current,  # type: ignore[attr-defined]
        withdrawn=row.withdrawn,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_withdrawal(row: object) -> Withdrawal:
    return Withdrawal(
        order_number=row.order_number,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        processed_at=row.processed_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — all operations atomic at the SQL level."""

    async def create_balance(self, db: AsyncSession, user_id: str) -> Balance:
        result = await db.execute(_CREATE_BALANCE_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            raise InternalError("Balance insert returned no rows")
        return _row_to_balance(row)

    async def get_balance(self, db: AsyncSession, user_id: str) -> Balance | None:
        result = await db.execute(_GET_BALANCE_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    async def credit(
        self, db: AsyncSession, user_id: str, amount: Decimal
    ) -> Balance:
        result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise BalanceNotFoundError(user_id)
        return _row_to_balance(row)

    async def withdraw(
        self, db: AsyncSession, user_id: str, reference: str, amount: Decimal
    ) -> tuple[Balance, Withdrawal]:
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_balance(db, user_id)
            raise InsufficientBalanceError(amount, current.current if current else ZERO)
        balance = _row_to_balance(row)

        # Conflict leaves the debit above in the open transaction; caller rolls back
        w_result = await db.execute(
            _INSERT_WITHDRAWAL_SQL,
            {"order_number": reference, "user_id": user_id, "amount": amount},
        )
        w_row = w_result.fetchone()
        if w_row is None:
            raise DuplicateWithdrawalError(reference)
        return balance, _row_to_withdrawal(w_row)

    async def list_withdrawals(
        self, db: AsyncSession, user_id: str
    ) -> list[Withdrawal]:
        result = await db.execute(_LIST_WITHDRAWALS_SQL, {"user_id": user_id})
        return [_row_to_withdrawal(row) for row in result.fetchall()]
