"""003: create trades table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trades (
            id              VARCHAR(40)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            player_id       VARCHAR(64)     NOT NULL,
            player_name     VARCHAR(128)    NOT NULL,
            direction       VARCHAR(4)      NOT NULL,
            order_kind      VARCHAR(6)      NOT NULL,
            shares          INT             NOT NULL,
            price           NUMERIC(14, 2)  NOT NULL,
            total_amount    NUMERIC(14, 2)  NOT NULL,
            account_book    VARCHAR(10)     NOT NULL,
            status          VARCHAR(10)     NOT NULL,
            multiplier      NUMERIC(6, 2)   DEFAULT NULL,
            limit_order_id  VARCHAR(40)     DEFAULT NULL,
            executed_at     TIMESTAMPTZ     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_trades_direction      CHECK (direction IN ('buy', 'sell')),
            CONSTRAINT ck_trades_order_kind     CHECK (order_kind IN ('market', 'limit')),
            CONSTRAINT ck_trades_account_book   CHECK (account_book IN ('season', 'live')),
            CONSTRAINT ck_trades_status         CHECK (status IN ('executed', 'cancelled', 'failed')),
            CONSTRAINT ck_trades_shares_gt_0    CHECK (shares > 0),
            CONSTRAINT ck_trades_price_floor    CHECK (price >= 10)
        );
    """)
    op.execute("CREATE INDEX idx_trades_user_time ON trades (user_id, executed_at DESC);")
    op.execute("CREATE INDEX idx_trades_player_time ON trades (player_id, executed_at DESC);")
    op.execute("COMMENT ON TABLE trades IS 'Append-only executed trade log';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trades CASCADE;")
