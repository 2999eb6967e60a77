# src/bl_ledger/domain/repository.py
"""PoolStore Protocol — the single shared mutable resource of the betting core.

Writes that change pool totals or market status carry the market version
they were computed from (`expected_version`). An implementation must apply
such a write atomically and raise StorageConflictError when the stored
version differs, so concurrent writers from other processes can never
lose an increment.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_ledger.domain.models import Bet
from src.bl_market.domain.models import Market
from src.bl_market.domain.repository import MarketRepositoryProtocol


class PoolStoreProtocol(MarketRepositoryProtocol, Protocol):
    async def append_bet(
        self, db: AsyncSession, bet: Bet, expected_version: int
    ) -> Market: ...

    async def finalize_market(
        self,
        db: AsyncSession,
        market: Market,
        bets: list[Bet],
        expected_version: int,
    ) -> None: ...

    async def get_bet(self, db: AsyncSession, bet_id: str) -> Bet | None: ...

    async def list_bets(self, db: AsyncSession, market_id: str) -> list[Bet]: ...

    async def list_bets_by_bettor(
        self, db: AsyncSession, bettor: str, limit: int
    ) -> list[Bet]: ...

    async def mark_claimed(self, db: AsyncSession, bet_id: str) -> bool: ...

    async def mark_creator_claimed(self, db: AsyncSession, market_id: str) -> bool: ...
