"""002: create holdings table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE holdings (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES portfolios (user_id) ON DELETE CASCADE,
            account_book    VARCHAR(10)     NOT NULL,
            player_id       VARCHAR(64)     NOT NULL,
            player_name     VARCHAR(128)    NOT NULL,
            shares          INT             NOT NULL,
            average_price   NUMERIC(14, 6)  NOT NULL,
            current_price   NUMERIC(14, 2)  NOT NULL,
            purchase_date   TIMESTAMPTZ     NOT NULL,
            CONSTRAINT uq_holdings_user_book_player UNIQUE (user_id, account_book, player_id),
            CONSTRAINT ck_holdings_account_book     CHECK (account_book IN ('season', 'live')),
            CONSTRAINT ck_holdings_shares_gt_0      CHECK (shares > 0)
        );
    """)
    op.execute("CREATE INDEX idx_holdings_user ON holdings (user_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS holdings CASCADE;")
