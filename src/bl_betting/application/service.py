# src/bl_betting/application/service.py
"""BetAdmissionService — the only path that grows a market's pools.

Preconditions are checked under the market lock, in this order, and the first
failure wins:

  1. market exists and is ACTIVE      MarketNotFound / MarketNotActive
  2. now < deadline                   MarketExpired
  3. min_bet <= amount <= max_bet     InvalidAmount
  4. side is yes / no                 InvalidSide

Nothing is written until all four pass.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.errors import (
    AlreadyClaimedError,
    BetNotFoundError,
    BetNotSettledError,
    NotBetOwnerError,
)
from src.bl_events.domain.events import WinningsClaimed, publish_all
from src.bl_ledger.application.ledger import PoolLedger, PoolTransaction
from src.bl_ledger.domain.models import Bet
from src.bl_risk.rules.bet_limit import BetLimits, check_bet_amount
from src.bl_risk.rules.deadline import check_before_deadline
from src.bl_risk.rules.market_status import check_market_active
from src.bl_risk.rules.side import parse_side

logger = logging.getLogger(__name__)


class BetAdmissionService:
    def __init__(self, ledger: PoolLedger, limits: BetLimits) -> None:
        self._ledger = ledger
        self._limits = limits

    @property
    def limits(self) -> BetLimits:
        return self._limits

    async def place_bet(
        self,
        db: AsyncSession,
        market_id: str,
        bettor: str,
        side: object,
        amount: int,
    ) -> Bet:
        async def work(tx: PoolTransaction) -> Bet:
            market = check_market_active(market_id, tx.market)
            check_before_deadline(market, tx.now())
            check_bet_amount(amount, self._limits)
            parsed_side = parse_side(side)
            return await tx.append_bet(bettor, parsed_side, amount)

        bet = await self._ledger.transact(
            db, market_id, work, label=f"place_bet market={market_id}"
        )
        logger.info(
            "Bet placed: market=%s bet=%s bettor=%s side=%s amount=%d odds=%s",
            market_id, bet.id, bettor, bet.side.value, bet.amount, bet.odds,
        )
        return bet

    async def claim_winnings(self, db: AsyncSession, bet_id: str, bettor: str) -> Bet:
        """Mark a settled bet claimed and return it; the payout itself moves off-ledger."""
        store = self._ledger.store
        bet = await store.get_bet(db, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        if bet.bettor != bettor:
            raise NotBetOwnerError(bet_id)
        if not bet.settled:
            raise BetNotSettledError(bet_id)
        if bet.claimed:
            raise AlreadyClaimedError(bet_id)

        try:
            claimed = await store.mark_claimed(db, bet_id)
            if not claimed:
                raise AlreadyClaimedError(bet_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        bet.claimed = True
        logger.info("Winnings claimed: bet=%s bettor=%s payout=%d", bet_id, bettor, bet.payout)
        await publish_all(
            self._ledger.publisher,
            [WinningsClaimed(
                market_id=bet.market_id, bet_id=bet.id, bettor=bettor, payout=bet.payout
            )],
        )
        return bet

    async def list_user_bets(self, db: AsyncSession, bettor: str, limit: int = 50) -> list[Bet]:
        return await self._ledger.store.list_bets_by_bettor(db, bettor, limit)
