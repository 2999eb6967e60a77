"""001: create markets table

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
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(64)     PRIMARY KEY,
            prediction_type     VARCHAR(32)     NOT NULL,
            title               VARCHAR(200)    NOT NULL,
            description         TEXT,
            category            VARCHAR(64)     NOT NULL DEFAULT 'general',
            target_id           VARCHAR(100)    NOT NULL,
            threshold           BIGINT          NOT NULL,
            deadline            TIMESTAMPTZ     NOT NULL,
            creator             VARCHAR(64)     NOT NULL,
            creator_stake       BIGINT          NOT NULL DEFAULT 0,
            status              VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            yes_pool            BIGINT          NOT NULL DEFAULT 0,
            no_pool             BIGINT          NOT NULL DEFAULT 0,
            total_volume        BIGINT          NOT NULL DEFAULT 0,
            bet_count           INT             NOT NULL DEFAULT 0,
            outcome             BOOLEAN,
            creator_rewarded    BOOLEAN         NOT NULL DEFAULT FALSE,
            creator_payout      BIGINT          NOT NULL DEFAULT 0,
            creator_claimed     BOOLEAN         NOT NULL DEFAULT FALSE,
            house_revenue       BIGINT          NOT NULL DEFAULT 0,
            metadata            JSONB           NOT NULL DEFAULT '{}'::jsonb,
            cancel_reason       VARCHAR(32),
            version             BIGINT          NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            settled_at          TIMESTAMPTZ,
            CONSTRAINT ck_markets_pools_gte_0     CHECK (yes_pool >= 0 AND no_pool >= 0),
            CONSTRAINT ck_markets_stake_gte_0     CHECK (creator_stake >= 0),
            CONSTRAINT ck_markets_threshold_gt_0  CHECK (threshold > 0),
            CONSTRAINT ck_markets_volume          CHECK (total_volume = yes_pool + no_pool),
            CONSTRAINT ck_markets_status CHECK (
                status IN ('ACTIVE', 'SETTLED', 'CANCELLED')
            ),
            CONSTRAINT ck_markets_outcome CHECK (
                (status = 'SETTLED') = (outcome IS NOT NULL)
            ),
            CONSTRAINT ck_markets_creator_claimed CHECK (
                NOT creator_claimed OR (status <> 'ACTIVE' AND creator_payout > 0)
            ),
            CONSTRAINT ck_markets_prediction_type CHECK (
                prediction_type IN (
                    'VIRAL_CAST', 'POLL_OUTCOME', 'CHANNEL_GROWTH', 'CREATOR_MILESTONE',
                    'FOLLOWER_GROWTH', 'LIVE_STREAM_VIEWS', 'ENGAGEMENT_BATTLE',
                    'TRENDING_CAST', 'FRAME_INTERACTIONS'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_status_created ON markets (status, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Pari-mutuel markets: pools, lifecycle, settlement totals';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
