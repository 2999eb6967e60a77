"""SqlPoolStore — PoolStoreProtocol on PostgreSQL.

Pool increments and terminal writes are single UPDATE statements guarded by
`version = :expected_version`; zero affected rows means another writer got
there first and surfaces as StorageConflictError. The caller also holds the
row lock from get_market(for_update=True) for the rest of the transaction.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.enums import Side
from src.bl_common.errors import (
    InvalidAmountError,
    MarketNotFoundError,
    StorageConflictError,
)
from src.bl_ledger.domain.models import Bet
from src.bl_market.domain.models import Market
from src.bl_market.infrastructure.persistence import (
    MARKET_COLUMNS,
    MarketRepository,
    row_to_market,
)

_BET_COLUMNS = """
    id, market_id, bettor, side, amount, odds, created_at, settled, payout, claimed
"""

_APPEND_POOL_SQL = text(f"""
    UPDATE markets
    SET yes_pool     = yes_pool + :yes_delta,
        no_pool      = no_pool + :no_delta,
        total_volume = total_volume + :amount,
        bet_count    = bet_count + 1,
        version      = version + 1
    WHERE id = :market_id
      AND version = :expected_version
      AND status = 'ACTIVE'
    RETURNING {MARKET_COLUMNS}
""")

_MARKET_EXISTS_SQL = text("SELECT 1 FROM markets WHERE id = :market_id")

_INSERT_BET_SQL = text("""
    INSERT INTO bets (id, market_id, bettor, side, amount, odds, created_at)
    VALUES (:id, :market_id, :bettor, :side, :amount, :odds, :created_at)
""")

_FINALIZE_MARKET_SQL = text("""
    UPDATE markets
    SET status           = :status,
        outcome          = :outcome,
        creator_rewarded = :creator_rewarded,
        creator_payout   = :creator_payout,
        house_revenue    = :house_revenue,
        cancel_reason    = :cancel_reason,
        settled_at       = :settled_at,
        version          = version + 1
    WHERE id = :market_id
      AND version = :expected_version
    RETURNING id
""")

_SETTLE_BET_SQL = text("""
    UPDATE bets
    SET settled = :settled, payout = :payout
    WHERE id = :id AND market_id = :market_id
""")

_MARK_CREATOR_CLAIMED_SQL = text("""
    UPDATE markets
    SET creator_claimed = TRUE
    WHERE id = :market_id
      AND status <> 'ACTIVE'
      AND creator_payout > 0
      AND creator_claimed = FALSE
    RETURNING id
""")

_GET_BET_SQL = text(f"SELECT {_BET_COLUMNS} FROM bets WHERE id = :bet_id")

_LIST_BETS_SQL = text(f"""
    SELECT {_BET_COLUMNS}
    FROM bets
    WHERE market_id = :market_id
    ORDER BY created_at ASC, id ASC
""")

_LIST_BETS_BY_BETTOR_SQL = text(f"""
    SELECT {_BET_COLUMNS}
    FROM bets
    WHERE bettor = :bettor
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_MARK_CLAIMED_SQL = text("""
    UPDATE bets
    SET claimed = TRUE
    WHERE id = :bet_id AND settled = TRUE AND claimed = FALSE
    RETURNING id
""")


def _row_to_bet(row: Any) -> Bet:
    return Bet(
        id=row.id,
        market_id=row.market_id,
        bettor=row.bettor,
        side=Side(row.side),
        amount=row.amount,
        odds=Decimal(row.odds),
        timestamp=row.created_at,
        settled=row.settled,
        payout=row.payout,
        claimed=row.claimed,
    )


class SqlPoolStore(MarketRepository):
    async def append_bet(self, db: AsyncSession, bet: Bet, expected_version: int) -> Market:
        if bet.amount <= 0:
            raise InvalidAmountError(bet.amount, "must be positive")
        result = await db.execute(
            _APPEND_POOL_SQL,
            {
                "market_id": bet.market_id,
                "yes_delta": bet.amount if bet.side is Side.YES else 0,
                "no_delta": bet.amount if bet.side is Side.NO else 0,
                "amount": bet.amount,
                "expected_version": expected_version,
            },
        )
        row = result.fetchone()
        if row is None:
            exists = await db.execute(_MARKET_EXISTS_SQL, {"market_id": bet.market_id})
            if exists.fetchone() is None:
                raise MarketNotFoundError(bet.market_id)
            raise StorageConflictError(bet.market_id)

        await db.execute(
            _INSERT_BET_SQL,
            {
                "id": bet.id,
                "market_id": bet.market_id,
                "bettor": bet.bettor,
                "side": bet.side.value,
                "amount": bet.amount,
                "odds": bet.odds,
                "created_at": bet.timestamp,
            },
        )
        return row_to_market(row)

    async def finalize_market(
        self,
        db: AsyncSession,
        market: Market,
        bets: list[Bet],
        expected_version: int,
    ) -> None:
        result = await db.execute(
            _FINALIZE_MARKET_SQL,
            {
                "market_id": market.id,
                "expected_version": expected_version,
                "status": market.status.value,
                "outcome": market.outcome,
                "creator_rewarded": market.creator_rewarded,
                "creator_payout": market.creator_payout,
                "house_revenue": market.house_revenue,
                "cancel_reason": market.cancel_reason,
                "settled_at": market.settled_at,
            },
        )
        if result.fetchone() is None:
            raise StorageConflictError(market.id)
        if bets:
            await db.execute(
                _SETTLE_BET_SQL,
                [
                    {
                        "id": bet.id,
                        "market_id": market.id,
                        "settled": bet.settled,
                        "payout": bet.payout,
                    }
                    for bet in bets
                ],
            )

    async def get_bet(self, db: AsyncSession, bet_id: str) -> Bet | None:
        row = (await db.execute(_GET_BET_SQL, {"bet_id": bet_id})).fetchone()
        return _row_to_bet(row) if row else None

    async def list_bets(self, db: AsyncSession, market_id: str) -> list[Bet]:
        result = await db.execute(_LIST_BETS_SQL, {"market_id": market_id})
        return [_row_to_bet(row) for row in result.fetchall()]

    async def list_bets_by_bettor(
        self, db: AsyncSession, bettor: str, limit: int
    ) -> list[Bet]:
        result = await db.execute(_LIST_BETS_BY_BETTOR_SQL, {"bettor": bettor, "limit": limit})
        return [_row_to_bet(row) for row in result.fetchall()]

    async def mark_claimed(self, db: AsyncSession, bet_id: str) -> bool:
        result = await db.execute(_MARK_CLAIMED_SQL, {"bet_id": bet_id})
        return result.fetchone() is not None

    async def mark_creator_claimed(self, db: AsyncSession, market_id: str) -> bool:
        result = await db.execute(_MARK_CREATOR_CLAIMED_SQL, {"market_id": market_id})
        return result.fetchone() is not None
