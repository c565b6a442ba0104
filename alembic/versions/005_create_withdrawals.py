"""005: create withdrawals table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE withdrawals (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            order_number    VARCHAR(64)     NOT NULL,
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            amount          NUMERIC(15, 2)  NOT NULL,
            processed_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_withdrawals_order_number  UNIQUE (order_number),
            CONSTRAINT ck_withdrawals_amount_gt_0   CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_withdrawals_user_processed ON withdrawals (user_id, processed_at DESC);")
    op.execute("COMMENT ON TABLE withdrawals IS 'Append-only withdrawal history';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS withdrawals CASCADE;")
