"""002: create bets table

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
        CREATE TABLE bets (
            id              VARCHAR(64)     PRIMARY KEY,
            market_id       VARCHAR(64)     NOT NULL REFERENCES markets(id),
            bettor          VARCHAR(64)     NOT NULL,
            side            VARCHAR(3)      NOT NULL,
            amount          BIGINT          NOT NULL,
            odds            NUMERIC(30, 18) NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            settled         BOOLEAN         NOT NULL DEFAULT FALSE,
            payout          BIGINT          NOT NULL DEFAULT 0,
            claimed         BOOLEAN         NOT NULL DEFAULT FALSE,
            CONSTRAINT ck_bets_side         CHECK (side IN ('YES', 'NO')),
            CONSTRAINT ck_bets_amount_gt_0  CHECK (amount > 0),
            CONSTRAINT ck_bets_payout_gte_0 CHECK (payout >= 0),
            CONSTRAINT ck_bets_claim        CHECK (NOT claimed OR settled)
        );
    """)
    op.execute("CREATE INDEX idx_bets_market ON bets (market_id, created_at);")
    op.execute("CREATE INDEX idx_bets_bettor ON bets (bettor, created_at DESC);")
    op.execute("COMMENT ON TABLE bets IS 'Append-only bet records; settled/payout written once';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bets CASCADE;")
