"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
JSONB goes in as a JSON string and may come back as str or dict depending on codec setup.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.enums import MarketStatus, PredictionType
from src.bl_market.domain.models import Market, metadata_from_dict, metadata_to_dict

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

MARKET_COLUMNS = """
    id, prediction_type, title, description, category, target_id, threshold,
    deadline, creator, creator_stake, status,
    yes_pool, no_pool, total_volume, bet_count,
    outcome, creator_rewarded, creator_payout, creator_claimed, house_revenue,
    metadata, cancel_reason, version,
    created_at, updated_at, settled_at
"""

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO markets (
        id, prediction_type, title, description, category, target_id, threshold,
        deadline, creator, creator_stake, status, metadata
    ) VALUES (
        :id, :prediction_type, :title, :description, :category, :target_id, :threshold,
        :deadline, :creator, :creator_stake, :status, CAST(:metadata AS JSONB)
    )
    RETURNING {MARKET_COLUMNS}
""")

_GET_MARKET_SQL = text(f"""
    SELECT {MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (
            CAST(:prediction_type AS TEXT) IS NULL
            OR prediction_type = CAST(:prediction_type AS TEXT)
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _load_metadata(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        return json.loads(raw)  # type: ignore[no-any-return]
    return dict(raw)


def row_to_market(row: Any) -> Market:
    prediction_type = PredictionType(row.prediction_type)
    return Market(
        id=row.id,
        prediction_type=prediction_type,
        title=row.title,
        description=row.description,
        category=row.category,
        target_id=row.target_id,
        threshold=row.threshold,
        deadline=row.deadline,
        creator=row.creator,
        creator_stake=row.creator_stake,
        status=MarketStatus(row.status),
        yes_pool=row.yes_pool,
        no_pool=row.no_pool,
        total_volume=row.total_volume,
        bet_count=row.bet_count,
        outcome=row.outcome,
        creator_rewarded=row.creator_rewarded,
        creator_payout=row.creator_payout,
        creator_claimed=row.creator_claimed,
        house_revenue=row.house_revenue,
        metadata=metadata_from_dict(prediction_type, _load_metadata(row.metadata)),
        cancel_reason=row.cancel_reason,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
        settled_at=row.settled_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    async def create_market(self, db: AsyncSession, market: Market) -> Market:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "id": market.id,
                "prediction_type": market.prediction_type.value,
                "title": market.title,
                "description": market.description,
                "category": market.category,
                "target_id": market.target_id,
                "threshold": market.threshold,
                "deadline": market.deadline,
                "creator": market.creator,
                "creator_stake": market.creator_stake,
                "status": market.status.value,
                "metadata": json.dumps(metadata_to_dict(market.metadata)),
            },
        )
        return row_to_market(result.fetchone())

    async def get_market(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market | None:
        sql = _GET_MARKET_FOR_UPDATE_SQL if for_update else _GET_MARKET_SQL
        result = await db.execute(sql, {"market_id": market_id})
        row = result.fetchone()
        return row_to_market(row) if row else None

    async def list_markets(
        self,
        db: AsyncSession,
        status: MarketStatus | None,
        prediction_type: PredictionType | None,
        limit: int,
    ) -> list[Market]:
        result = await db.execute(
            _LIST_MARKETS_SQL,
            {
                "status": status.value if status else None,
                "prediction_type": prediction_type.value if prediction_type else None,
                "limit": limit,
            },
        )
        return [row_to_market(row) for row in result.fetchall()]
