# src/bl_settlement/application/service.py
"""SettlementService — settle or cancel a market as one atomic unit of work.

Both paths run under the ledger's per-market lock: the market is re-read,
the terminal status is computed from that exact pool state, and the market
row plus every bet row are written together before the lock is released.
A bet that has not reached the lock by then sees a non-ACTIVE market.
"""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.enums import CancelReason, CreatorDecision, MarketStatus
from src.bl_common.errors import SettlementInvariantError
from src.bl_events.domain.events import MarketCancelled, MarketSettled
from src.bl_ledger.application.ledger import PoolLedger, PoolTransaction
from src.bl_ledger.domain.models import Bet
from src.bl_market.domain.lifecycle import ensure_settleable, ensure_transition
from src.bl_settlement.domain.invariants import check_conservation, check_pools_match_bets
from src.bl_settlement.domain.models import SettlementPolicy, SettlementResult
from src.bl_settlement.domain.payout import compute_refunds, compute_settlement

logger = logging.getLogger(__name__)


def _raise_on_violations(violations: list[str]) -> None:
    if violations:
        raise SettlementInvariantError("; ".join(violations))


def _apply_payouts(bets: list[Bet], result: SettlementResult) -> list[Bet]:
    return [replace(b, settled=True, payout=result.payouts[b.id]) for b in bets]


class SettlementService:
    def __init__(self, ledger: PoolLedger, policy: SettlementPolicy) -> None:
        self._ledger = ledger
        self._policy = policy

    @property
    def ledger(self) -> PoolLedger:
        return self._ledger

    @property
    def policy(self) -> SettlementPolicy:
        return self._policy

    async def settle(
        self,
        db: AsyncSession,
        market_id: str,
        outcome: bool,
        oracle_override: bool = False,
        creator_decision: CreatorDecision = CreatorDecision.REWARD,
    ) -> SettlementResult:
        async def work(tx: PoolTransaction) -> SettlementResult:
            market = tx.market
            now = tx.now()
            ensure_settleable(market, now, oracle_override)

            bets = await tx.list_bets()
            _raise_on_violations(check_pools_match_bets(market, bets))
            result = compute_settlement(market, bets, outcome, self._policy, creator_decision)
            _raise_on_violations(check_conservation(result, bets))

            await tx.finalize(
                replace(
                    market,
                    status=MarketStatus.SETTLED,
                    outcome=outcome,
                    creator_rewarded=result.creator_reward > 0,
                    creator_payout=result.creator_payout,
                    house_revenue=result.house_revenue,
                    settled_at=now,
                ),
                _apply_payouts(bets, result),
            )
            tx.emit(MarketSettled(
                market_id=market.id,
                outcome=outcome,
                winner_count=result.winner_count,
                total_payout=result.total_payout,
                house_revenue=result.house_revenue,
                creator_payout=result.creator_payout,
            ))
            return result

        result = await self._ledger.transact(
            db, market_id, work, label=f"settle market={market_id}"
        )
        logger.info(
            "Market settled: market=%s outcome=%s winners=%d payout=%d house=%d creator=%d",
            market_id,
            "YES" if outcome else "NO",
            result.winner_count,
            result.total_payout,
            result.house_revenue,
            result.creator_payout,
        )
        return result

    async def apply_cancellation(
        self, tx: PoolTransaction, reason: CancelReason
    ) -> SettlementResult:
        """Refund every bet and the creator stake inside an open ledger transaction."""
        market = tx.market
        ensure_transition(market, MarketStatus.CANCELLED)

        bets = await tx.list_bets()
        _raise_on_violations(check_pools_match_bets(market, bets))
        result = compute_refunds(market, bets)
        _raise_on_violations(check_conservation(result, bets))

        await tx.finalize(
            replace(
                market,
                status=MarketStatus.CANCELLED,
                cancel_reason=reason.value,
                creator_payout=result.creator_payout,
                house_revenue=0,
                settled_at=tx.now(),
            ),
            _apply_payouts(bets, result),
        )
        tx.emit(MarketCancelled(
            market_id=market.id,
            reason=reason.value,
            refunded_bets=len(bets),
            refunded_amount=result.total_payout,
        ))
        return result

    async def cancel(
        self, db: AsyncSession, market_id: str, reason: CancelReason = CancelReason.ADMIN
    ) -> SettlementResult:
        async def work(tx: PoolTransaction) -> SettlementResult:
            return await self.apply_cancellation(tx, reason)

        result = await self._ledger.transact(
            db, market_id, work, label=f"cancel market={market_id}"
        )
        logger.info(
            "Market cancelled: market=%s reason=%s refunded=%d creator=%d",
            market_id, reason.value, result.total_payout, result.creator_payout,
        )
        return result
