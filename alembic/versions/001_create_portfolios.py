"""001: create portfolios table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE portfolios (
            user_id             VARCHAR(64)     PRIMARY KEY,
            available_balance   NUMERIC(14, 2)  NOT NULL,
            trades_remaining    INT             NOT NULL,
            total_value         NUMERIC(14, 2)  NOT NULL,
            season_pl           NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            live_pl             NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            todays_pl           NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            last_updated        TIMESTAMPTZ     NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_portfolios_balance_gte_0  CHECK (available_balance >= 0),
            CONSTRAINT ck_portfolios_trades_gte_0   CHECK (trades_remaining >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE portfolios IS 'Per-user cash and derived totals, snapshot of the in-memory ledger';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS portfolios CASCADE;")
