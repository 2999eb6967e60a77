# src/bl_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject the in-memory store or a mock that conforms to this Protocol.
Infrastructure layer provides the SQL implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.enums import MarketStatus, PredictionType
from src.bl_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def create_market(self, db: AsyncSession, market: Market) -> Market: ...

    async def get_market(
        self,
        db: AsyncSession,
        market_id: str,
        for_update: bool = False,
    ) -> Market | None: ...

    async def list_markets(
        self,
        db: AsyncSession,
        status: MarketStatus | None,
        prediction_type: PredictionType | None,
        limit: int,
    ) -> list[Market]: ...
