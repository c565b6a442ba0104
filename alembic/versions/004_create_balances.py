"""004: create balances table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE balances (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            current         NUMERIC(15, 2)  NOT NULL DEFAULT 0.00,
            withdrawn       NUMERIC(15, 2)  NOT NULL DEFAULT 0.00,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_balances_user_id          UNIQUE (user_id),
            CONSTRAINT ck_balances_current_gte_0    CHECK (current >= 0),
            CONSTRAINT ck_balances_withdrawn_gte_0  CHECK (withdrawn >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_balances_updated_at
            BEFORE UPDATE ON balances
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE balances IS 'Loyalty points balance, one row per user';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS balances CASCADE;")
