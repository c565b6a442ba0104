"""003: create orders table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            order_number    VARCHAR(64)     NOT NULL,
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            status          VARCHAR(20)     NOT NULL DEFAULT 'NEW',
            accrual         NUMERIC(15, 2)  NOT NULL DEFAULT 0.00,
            uploaded_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_orders_order_number   UNIQUE (order_number),
            CONSTRAINT ck_orders_status         CHECK (
                status IN ('NEW', 'PROCESSING', 'INVALID', 'PROCESSED')
            ),
            CONSTRAINT ck_orders_accrual_gte_0  CHECK (accrual >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_orders_user_uploaded ON orders (user_id, uploaded_at DESC);")
    # Partial index: the reconciliation loop only ever scans unfinished orders
    op.execute("""
        CREATE INDEX idx_orders_unfinished ON orders (uploaded_at)
            WHERE status IN ('NEW', 'PROCESSING');
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
