"""Pydantic schemas for bl_market API requests and responses.

Amounts travel as int micro-units plus a "$x.xx" display string; odds and
probabilities travel as decimal strings so clients never see float drift.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.bl_common.amounts import micro_to_display
from src.bl_common.enums import PredictionType
from src.bl_market.application.service import MarketWithOdds
from src.bl_market.domain.models import metadata_to_dict
from src.bl_risk.rules.bet_limit import BetLimits
from src.bl_risk.rules.creator_stake import StakeLimits
from src.bl_settlement.domain.models import SettlementResult

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    prediction_type: PredictionType
    title: str
    target_id: str
    threshold: int
    duration_hours: float = Field(..., gt=0, allow_inf_nan=False)
    creator_stake: int = Field(0, ge=0, description="Micro-units; 0 = no stake")
    description: str | None = Field(None, max_length=2000)
    category: str | None = Field(None, max_length=64)
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _iso(dt: object) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()  # type: ignore[attr-defined]


class OddsOut(BaseModel):
    yes_odds: str
    no_odds: str
    yes_probability: str
    no_probability: str


class MarketOut(BaseModel):
    id: str
    prediction_type: str
    title: str
    description: str | None
    category: str
    target_id: str
    threshold: int
    deadline: str
    creator: str
    creator_stake: int
    status: str
    yes_pool: int
    no_pool: int
    total_volume: int
    total_volume_display: str
    bet_count: int
    outcome: bool | None
    creator_rewarded: bool
    creator_payout: int
    creator_claimed: bool
    house_revenue: int
    cancel_reason: str | None
    metadata: dict[str, Any]
    odds: OddsOut
    created_at: str | None
    settled_at: str | None

    @classmethod
    def from_view(cls, view: MarketWithOdds) -> "MarketOut":
        m, q = view.market, view.quote
        return cls(
            id=m.id,
            prediction_type=m.prediction_type.value,
            title=m.title,
            description=m.description,
            category=m.category,
            target_id=m.target_id,
            threshold=m.threshold,
            deadline=m.deadline.isoformat(),
            creator=m.creator,
            creator_stake=m.creator_stake,
            status=m.status.value,
            yes_pool=m.yes_pool,
            no_pool=m.no_pool,
            total_volume=m.total_volume,
            total_volume_display=micro_to_display(m.total_volume),
            bet_count=m.bet_count,
            outcome=m.outcome,
            creator_rewarded=m.creator_rewarded,
            creator_payout=m.creator_payout,
            creator_claimed=m.creator_claimed,
            house_revenue=m.house_revenue,
            cancel_reason=m.cancel_reason,
            metadata=metadata_to_dict(m.metadata),
            odds=OddsOut(
                yes_odds=str(q.yes_odds),
                no_odds=str(q.no_odds),
                yes_probability=str(q.yes_probability),
                no_probability=str(q.no_probability),
            ),
            created_at=_iso(m.created_at),
            settled_at=_iso(m.settled_at),
        )


class MarketListResponse(BaseModel):
    items: list[MarketOut]


class LimitsResponse(BaseModel):
    min_bet: int
    max_bet: int
    min_creator_stake: int
    max_creator_stake: int

    @classmethod
    def from_limits(cls, bets: BetLimits, stakes: StakeLimits) -> "LimitsResponse":
        return cls(
            min_bet=bets.min_bet,
            max_bet=bets.max_bet,
            min_creator_stake=stakes.min_stake,
            max_creator_stake=stakes.max_stake,
        )


class SettlementOut(BaseModel):
    market_id: str
    outcome: bool | None
    winner_count: int
    total_payout: int
    house_cut: int
    rounding_residue: int
    house_revenue: int
    creator_stake_returned: int
    creator_reward: int
    forfeited_stake: int
    payouts: dict[str, int]

    @classmethod
    def from_result(cls, r: SettlementResult) -> "SettlementOut":
        return cls(
            market_id=r.market_id,
            outcome=r.outcome,
            winner_count=r.winner_count,
            total_payout=r.total_payout,
            house_cut=r.house_cut,
            rounding_residue=r.rounding_residue,
            house_revenue=r.house_revenue,
            creator_stake_returned=r.creator_stake_returned,
            creator_reward=r.creator_reward,
            forfeited_stake=r.forfeited_stake,
            payouts=r.payouts,
        )
