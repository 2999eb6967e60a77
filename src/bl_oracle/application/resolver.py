"""OutcomeResolver — turn a metrics snapshot into a settlement or cancellation."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.datetime_utils import Clock, utc_now
from src.bl_common.enums import CancelReason, MarketStatus
from src.bl_common.errors import MarketNotFoundError, NotReadyToSettleError
from src.bl_market.domain.lifecycle import ensure_transition, is_past_deadline
from src.bl_oracle.domain.outcome import MetricsSnapshot, check_outcome
from src.bl_settlement.application.service import SettlementService
from src.bl_settlement.domain.models import SettlementResult

logger = logging.getLogger(__name__)


class OutcomeResolver:
    def __init__(self, settlement: SettlementService, clock: Clock = utc_now) -> None:
        self._settlement = settlement
        self._clock = clock

    async def resolve_market(
        self, db: AsyncSession, market_id: str, metrics: MetricsSnapshot | None
    ) -> SettlementResult:
        """Settle from metrics; cancel with NO_RESOLUTION_DATA when undecidable.

        A threshold already reached settles YES immediately. A NO outcome or a
        cancellation waits for the deadline.
        """
        market = await self._settlement.ledger.store.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        ensure_transition(market, MarketStatus.SETTLED)

        now = self._clock()
        outcome = check_outcome(market.prediction_type, metrics, market.threshold, now)
        logger.info(
            "Resolving market=%s type=%s outcome=%s",
            market_id, market.prediction_type.value, outcome,
        )

        if outcome is None:
            if not is_past_deadline(market, now):
                raise NotReadyToSettleError(market_id)
            return await self._settlement.cancel(db, market_id, CancelReason.NO_RESOLUTION_DATA)
        return await self._settlement.settle(db, market_id, outcome, oracle_override=outcome)
