"""PoolLedger — per-market serialized access to pool totals and bets.

Every write to a market (bet admission, settlement, cancellation, creator
withdrawal) runs through PoolLedger.transact():

  1. acquire the market's asyncio.Lock (markets never block each other)
  2. load a fresh market row (SELECT ... FOR UPDATE on the SQL store)
  3. run the caller's work against a PoolTransaction
  4. commit while still holding the lock, roll back on any error
  5. publish the domain events the work emitted

Within one process the lock serializes writers; across processes the store's
version compare-and-swap rejects a stale write with StorageConflictError, and
the whole unit of work is retried a bounded number of times.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import datetime
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.datetime_utils import Clock, utc_now
from src.bl_common.enums import Side
from src.bl_common.errors import InvalidAmountError, MarketNotFoundError
from src.bl_common.id_generator import IdGenerator
from src.bl_common.retry import retry_on_conflict
from src.bl_events.domain.events import BetPlaced, DomainEvent, EventPublisherProtocol, publish_all
from src.bl_ledger.domain.models import Bet, PoolSnapshot
from src.bl_ledger.domain.repository import PoolStoreProtocol
from src.bl_market.domain.models import Market
from src.bl_odds.domain.odds import OddsQuote, odds

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PoolTransaction:
    """Handle given to a unit of work while the market lock is held."""

    def __init__(
        self,
        store: PoolStoreProtocol,
        db: AsyncSession,
        market: Market,
        id_generator: IdGenerator,
        clock: Clock,
    ) -> None:
        self._store = store
        self._db = db
        self._ids = id_generator
        self._clock = clock
        self.market = market
        self.events: list[DomainEvent] = []

    def now(self) -> datetime:
        return self._clock()

    def emit(self, event: DomainEvent) -> None:
        self.events.append(event)

    async def append_bet(self, bettor: str, side: Side, amount: int) -> Bet:
        """Record a bet quoted at the pre-trade odds, then grow the pool."""
        bet = Bet(
            id=self._ids.next_id(),
            market_id=self.market.id,
            bettor=bettor,
            side=side,
            amount=amount,
            odds=odds(self.market.yes_pool, self.market.no_pool, side),
            timestamp=self._clock(),
        )
        self.market = await self._store.append_bet(self._db, bet, self.market.version)
        quote = OddsQuote.from_pools(self.market.yes_pool, self.market.no_pool)
        self.emit(BetPlaced(
            market_id=bet.market_id,
            bet_id=bet.id,
            bettor=bettor,
            side=side.value,
            amount=amount,
            yes_pool=self.market.yes_pool,
            no_pool=self.market.no_pool,
            yes_odds=quote.yes_odds,
            no_odds=quote.no_odds,
        ))
        return bet

    async def list_bets(self) -> list[Bet]:
        return await self._store.list_bets(self._db, self.market.id)

    async def finalize(self, market: Market, bets: list[Bet]) -> Market:
        """Write the terminal market row and every bet in one atomic step."""
        await self._store.finalize_market(self._db, market, bets, self.market.version)
        self.market = replace(market, version=self.market.version + 1)
        return self.market


class PoolLedger:
    def __init__(
        self,
        store: PoolStoreProtocol,
        id_generator: IdGenerator,
        publisher: EventPublisherProtocol,
        clock: Clock = utc_now,
        conflict_retries: int = 3,
    ) -> None:
        self._store = store
        self._ids = id_generator
        self._publisher = publisher
        self._clock = clock
        self._conflict_retries = conflict_retries
        self._market_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def store(self) -> PoolStoreProtocol:
        return self._store

    @property
    def publisher(self) -> EventPublisherProtocol:
        return self._publisher

    def _get_or_create_lock(self, market_id: str) -> asyncio.Lock:
        return self._market_locks[market_id]

    async def transact(
        self,
        db: AsyncSession,
        market_id: str,
        work: Callable[[PoolTransaction], Awaitable[T]],
        label: str,
    ) -> T:
        """Run work under the market lock and commit it; publish events afterwards."""

        async def attempt() -> tuple[T, list[DomainEvent]]:
            async with self._get_or_create_lock(market_id):
                try:
                    market = await self._store.get_market(db, market_id, for_update=True)
                    if market is None:
                        raise MarketNotFoundError(market_id)
                    tx = PoolTransaction(self._store, db, market, self._ids, self._clock)
                    result = await work(tx)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
                return result, tx.events

        result, events = await retry_on_conflict(attempt, self._conflict_retries, label)
        await publish_all(self._publisher, events)
        return result

    async def record_bet(
        self,
        db: AsyncSession,
        market_id: str,
        bettor: str,
        side: Side,
        amount: int,
    ) -> Bet:
        """Append a bet and grow the side's pool and total volume atomically."""

        async def work(tx: PoolTransaction) -> Bet:
            if amount <= 0:
                raise InvalidAmountError(amount, "must be positive")
            return await tx.append_bet(bettor, side, amount)

        bet = await self.transact(db, market_id, work, label=f"record_bet market={market_id}")
        logger.info(
            "Bet recorded: market=%s bet=%s side=%s amount=%d",
            market_id, bet.id, bet.side.value, bet.amount,
        )
        return bet

    async def get_pools(self, db: AsyncSession, market_id: str) -> PoolSnapshot:
        market = await self._store.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return PoolSnapshot(
            market_id=market.id,
            yes_pool=market.yes_pool,
            no_pool=market.no_pool,
            total_volume=market.total_volume,
            version=market.version,
        )
