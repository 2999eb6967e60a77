"""Settlement domain models."""

from dataclasses import dataclass, field

from src.bl_common.amounts import BPS_DENOMINATOR


@dataclass(frozen=True)
class SettlementPolicy:
    """Platform economics applied at settlement (rates in bps, amounts in micro-units)."""

    house_edge_bps: int
    creator_reward_bps: int
    creator_min_volume: int

    def __post_init__(self) -> None:
        for name in ("house_edge_bps", "creator_reward_bps"):
            value = getattr(self, name)
            if not (0 <= value <= BPS_DENOMINATOR):
                raise ValueError(f"{name} must be in [0, {BPS_DENOMINATOR}], got {value}")
        if self.creator_min_volume < 0:
            raise ValueError(f"creator_min_volume must be >= 0, got {self.creator_min_volume}")


@dataclass
class SettlementResult:
    """Full accounting of one settlement or cancellation.

    Money in:  yes_pool + no_pool + creator_stake
    Money out: total_payout + house_revenue + creator_stake_returned + creator_reward

    house_revenue = house_cut - creator_reward + rounding_residue
                    + unclaimed_pool + forfeited_stake
    """

    market_id: str
    outcome: bool | None            # None for a cancellation
    yes_pool: int
    no_pool: int
    creator_stake: int
    payouts: dict[str, int] = field(default_factory=dict)   # bet_id -> payout
    winner_count: int = 0
    winning_pool: int = 0
    losing_pool: int = 0
    house_cut: int = 0
    distributable: int = 0
    rounding_residue: int = 0
    unclaimed_pool: int = 0         # losing pool net of edge when nobody backed the winner
    creator_stake_returned: int = 0
    creator_reward: int = 0
    forfeited_stake: int = 0
    house_revenue: int = 0

    @property
    def total_in(self) -> int:
        return self.yes_pool + self.no_pool + self.creator_stake

    @property
    def total_payout(self) -> int:
        return sum(self.payouts.values())

    @property
    def creator_payout(self) -> int:
        return self.creator_stake_returned + self.creator_reward

    @property
    def is_refund(self) -> bool:
        return self.outcome is None
