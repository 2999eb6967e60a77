"""Ledger domain models — pure dataclasses, no persistence dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bl_common.enums import Side


@dataclass
class Bet:
    id: str
    market_id: str
    bettor: str
    side: Side
    amount: int                # micro-units, immutable after admission
    odds: Decimal              # pre-trade quote shown at admission
    timestamp: datetime
    settled: bool = False      # written once, by settlement or cancellation
    payout: int = 0            # micro-units, 0 until settled or when losing
    claimed: bool = False

    @property
    def outcome(self) -> bool:
        """True = YES."""
        return self.side.as_bool


@dataclass(frozen=True)
class PoolSnapshot:
    """Read-only view of a market's pools at one instant."""

    market_id: str
    yes_pool: int
    no_pool: int
    total_volume: int
    version: int

    @property
    def total(self) -> int:
        return self.yes_pool + self.no_pool
