"""Pydantic schemas for bl_betting API requests and responses."""

from pydantic import BaseModel, Field

from src.bl_common.amounts import micro_to_display
from src.bl_ledger.domain.models import Bet


class PlaceBetRequest(BaseModel):
    market_id: str
    side: str | bool = Field(..., description="'yes' / 'no' (or true / false)")
    amount: int = Field(..., description="Stake in USDC micro-units")


class BetOut(BaseModel):
    id: str
    market_id: str
    bettor: str
    side: str
    amount: int
    amount_display: str
    odds: str
    timestamp: str
    settled: bool
    payout: int
    payout_display: str
    claimed: bool

    @classmethod
    def from_domain(cls, b: Bet) -> "BetOut":
        return cls(
            id=b.id,
            market_id=b.market_id,
            bettor=b.bettor,
            side=b.side.value,
            amount=b.amount,
            amount_display=micro_to_display(b.amount),
            odds=str(b.odds),
            timestamp=b.timestamp.isoformat(),
            settled=b.settled,
            payout=b.payout,
            payout_display=micro_to_display(b.payout),
            claimed=b.claimed,
        )


class BetListResponse(BaseModel):
    items: list[BetOut]
