"""InMemoryPoolStore — PoolStoreProtocol backed by process-local dicts.

Used when STORE_BACKEND=memory (local demo, tests). Every method body runs
without awaiting, so on a single event loop each call is atomic. Records are
copied on the way in and out so callers never alias stored state; that keeps
the version compare-and-swap meaningful exactly as it is for the SQL store.
"""

from dataclasses import replace
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.datetime_utils import Clock, utc_now
from src.bl_common.enums import MarketStatus, PredictionType, Side
from src.bl_common.errors import (
    InvalidAmountError,
    MarketNotFoundError,
    StorageConflictError,
)
from src.bl_ledger.domain.models import Bet
from src.bl_market.domain.models import Market


class InMemoryPoolStore:
    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._markets: dict[str, Market] = {}
        self._bets: dict[str, Bet] = {}
        self._bet_ids_by_market: dict[str, list[str]] = {}

    # --- markets ---

    async def create_market(self, db: AsyncSession, market: Market) -> Market:
        if market.id in self._markets:
            raise ValueError(f"Duplicate market id: {market.id}")
        now = self._clock()
        stored = replace(market, created_at=market.created_at or now, updated_at=now)
        self._markets[stored.id] = stored
        self._bet_ids_by_market[stored.id] = []
        return replace(stored)

    async def get_market(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market | None:
        market = self._markets.get(market_id)
        return replace(market) if market is not None else None

    async def list_markets(
        self,
        db: AsyncSession,
        status: MarketStatus | None,
        prediction_type: PredictionType | None,
        limit: int,
    ) -> list[Market]:
        rows = [
            m for m in self._markets.values()
            if (status is None or m.status == status)
            and (prediction_type is None or m.prediction_type == prediction_type)
        ]
        rows.sort(key=lambda m: (m.created_at or datetime.min, m.id), reverse=True)
        return [replace(m) for m in rows[:limit]]

    # --- pools / bets ---

    async def append_bet(self, db: AsyncSession, bet: Bet, expected_version: int) -> Market:
        market = self._markets.get(bet.market_id)
        if market is None:
            raise MarketNotFoundError(bet.market_id)
        if bet.amount <= 0:
            raise InvalidAmountError(bet.amount, "must be positive")
        if market.version != expected_version or market.status != MarketStatus.ACTIVE:
            raise StorageConflictError(bet.market_id)

        updated = replace(
            market,
            yes_pool=market.yes_pool + (bet.amount if bet.side is Side.YES else 0),
            no_pool=market.no_pool + (bet.amount if bet.side is Side.NO else 0),
            total_volume=market.total_volume + bet.amount,
            bet_count=market.bet_count + 1,
            version=market.version + 1,
            updated_at=self._clock(),
        )
        self._markets[updated.id] = updated
        self._bets[bet.id] = replace(bet)
        self._bet_ids_by_market[bet.market_id].append(bet.id)
        return replace(updated)

    async def finalize_market(
        self,
        db: AsyncSession,
        market: Market,
        bets: list[Bet],
        expected_version: int,
    ) -> None:
        current = self._markets.get(market.id)
        if current is None:
            raise MarketNotFoundError(market.id)
        if current.version != expected_version:
            raise StorageConflictError(market.id)
        known = set(self._bet_ids_by_market[market.id])
        unknown = [b.id for b in bets if b.id not in known]
        if unknown:
            raise ValueError(f"Bets {unknown} do not belong to market {market.id}")

        self._markets[market.id] = replace(
            market, version=expected_version + 1, updated_at=self._clock()
        )
        for bet in bets:
            self._bets[bet.id] = replace(bet)

    async def get_bet(self, db: AsyncSession, bet_id: str) -> Bet | None:
        bet = self._bets.get(bet_id)
        return replace(bet) if bet is not None else None

    async def list_bets(self, db: AsyncSession, market_id: str) -> list[Bet]:
        return [replace(self._bets[i]) for i in self._bet_ids_by_market.get(market_id, [])]

    async def list_bets_by_bettor(
        self, db: AsyncSession, bettor: str, limit: int
    ) -> list[Bet]:
        rows = [b for b in self._bets.values() if b.bettor == bettor]
        rows.sort(key=lambda b: (b.timestamp, b.id), reverse=True)
        return [replace(b) for b in rows[:limit]]

    async def mark_claimed(self, db: AsyncSession, bet_id: str) -> bool:
        bet = self._bets.get(bet_id)
        if bet is None or bet.claimed or not bet.settled:
            return False
        self._bets[bet_id] = replace(bet, claimed=True)
        return True

    async def mark_creator_claimed(self, db: AsyncSession, market_id: str) -> bool:
        market = self._markets.get(market_id)
        if (
            market is None
            or market.is_active
            or market.creator_payout <= 0
            or market.creator_claimed
        ):
            return False
        self._markets[market_id] = replace(
            market, creator_claimed=True, updated_at=self._clock()
        )
        return True
