"""MarketApplicationService — market creation, reads and the creator's stake.

Creation writes a fresh row (no lock needed: nobody else can see the id yet).
Withdrawal changes status and therefore runs through the ledger's per-market
unit of work like every other status write.
Claiming the creator payout only touches a terminal market, and the store
flips creator_claimed with a conditional write so a second claim loses.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.datetime_utils import Clock, utc_now
from src.bl_common.enums import CancelReason, MarketStatus, PredictionType
from src.bl_common.errors import (
    CreatorAlreadyClaimedError,
    InvalidMarketParamsError,
    MarketHasBetsError,
    MarketNotFinalizedError,
    MarketNotFoundError,
    NoCreatorPayoutError,
    NotMarketCreatorError,
)
from src.bl_common.id_generator import IdGenerator
from src.bl_events.domain.events import CreatorPayoutClaimed, MarketCreated, publish_all
from src.bl_ledger.application.ledger import PoolLedger, PoolTransaction
from src.bl_market.domain.lifecycle import ensure_transition
from src.bl_market.domain.models import Market, MarketMetadata, metadata_from_dict
from src.bl_market.domain.templates import MARKET_TEMPLATES, validate_market_params
from src.bl_odds.domain.odds import OddsQuote
from src.bl_risk.rules.bet_limit import BetLimits
from src.bl_risk.rules.creator_stake import StakeLimits, check_creator_stake
from src.bl_settlement.application.service import SettlementService
from src.bl_settlement.domain.models import SettlementResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketWithOdds:
    market: Market
    quote: OddsQuote


class MarketApplicationService:
    def __init__(
        self,
        ledger: PoolLedger,
        settlement: SettlementService,
        id_generator: IdGenerator,
        stake_limits: StakeLimits,
        bet_limits: BetLimits,
        clock: Clock = utc_now,
    ) -> None:
        self._ledger = ledger
        self._settlement = settlement
        self._ids = id_generator
        self._stake_limits = stake_limits
        self._bet_limits = bet_limits
        self._clock = clock

    @property
    def bet_limits(self) -> BetLimits:
        return self._bet_limits

    @property
    def stake_limits(self) -> StakeLimits:
        return self._stake_limits

    async def create_market(
        self,
        db: AsyncSession,
        creator: str,
        prediction_type: PredictionType,
        title: str,
        target_id: str,
        threshold: int,
        duration_hours: float,
        creator_stake: int = 0,
        description: str | None = None,
        category: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Market:
        errors = validate_market_params(
            prediction_type, title, target_id, threshold, duration_hours
        )
        errors.extend(check_creator_stake(creator_stake, self._stake_limits))
        parsed_metadata: MarketMetadata | None = None
        try:
            parsed_metadata = metadata_from_dict(prediction_type, metadata)
        except TypeError:
            errors.append(f"Invalid metadata for {prediction_type.value}")
        if errors:
            raise InvalidMarketParamsError(errors)

        now = self._clock()
        market = Market(
            id=self._ids.next_id(),
            prediction_type=prediction_type,
            title=title,
            target_id=target_id,
            threshold=threshold,
            deadline=now + timedelta(hours=duration_hours),
            creator=creator,
            creator_stake=creator_stake,
            description=description,
            category=category or MARKET_TEMPLATES[prediction_type].category,
            metadata=parsed_metadata,
            created_at=now,
        )
        try:
            created = await self._ledger.store.create_market(db, market)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Market created: market=%s type=%s creator=%s stake=%d deadline=%s",
            created.id, prediction_type.value, creator, creator_stake,
            created.deadline.isoformat(),
        )
        await publish_all(self._ledger.publisher, [MarketCreated(
            market_id=created.id,
            prediction_type=prediction_type.value,
            creator=creator,
            creator_stake=creator_stake,
            deadline=created.deadline,
        )])
        return created

    async def get_market_with_odds(self, db: AsyncSession, market_id: str) -> MarketWithOdds:
        market = await self._ledger.store.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketWithOdds(market, OddsQuote.from_pools(market.yes_pool, market.no_pool))

    async def list_active_markets(
        self,
        db: AsyncSession,
        prediction_type: PredictionType | None = None,
        limit: int = 20,
    ) -> list[MarketWithOdds]:
        markets = await self._ledger.store.list_markets(
            db, MarketStatus.ACTIVE, prediction_type, limit
        )
        return [
            MarketWithOdds(m, OddsQuote.from_pools(m.yes_pool, m.no_pool)) for m in markets
        ]

    async def withdraw_creator_stake(
        self, db: AsyncSession, market_id: str, creator: str
    ) -> SettlementResult:
        """Creator pulls the stake back; only before any bet lands."""

        async def work(tx: PoolTransaction) -> SettlementResult:
            market = tx.market
            if market.creator != creator:
                raise NotMarketCreatorError(market_id)
            ensure_transition(market, MarketStatus.CANCELLED)
            if market.bet_count > 0:
                raise MarketHasBetsError(market_id, market.bet_count)
            return await self._settlement.apply_cancellation(tx, CancelReason.CREATOR_WITHDRAWN)

        result = await self._ledger.transact(
            db, market_id, work, label=f"withdraw market={market_id}"
        )
        logger.info(
            "Creator stake withdrawn: market=%s creator=%s stake=%d",
            market_id, creator, result.creator_stake_returned,
        )
        return result

    async def claim_creator_payout(
        self, db: AsyncSession, market_id: str, creator: str
    ) -> Market:
        """Take out the returned stake plus reward of a settled or cancelled market, once."""
        store = self._ledger.store
        market = await store.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if market.creator != creator:
            raise NotMarketCreatorError(market_id)
        if market.is_active:
            raise MarketNotFinalizedError(market_id)
        if market.creator_payout <= 0:
            raise NoCreatorPayoutError(market_id)
        if market.creator_claimed:
            raise CreatorAlreadyClaimedError(market_id)

        try:
            claimed = await store.mark_creator_claimed(db, market_id)
            if not claimed:
                raise CreatorAlreadyClaimedError(market_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        market.creator_claimed = True
        logger.info(
            "Creator payout claimed: market=%s creator=%s payout=%d",
            market_id, creator, market.creator_payout,
        )
        await publish_all(self._ledger.publisher, [CreatorPayoutClaimed(
            market_id=market_id, creator=creator, payout=market.creator_payout
        )])
        return market
