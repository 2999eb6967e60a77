"""Pari-mutuel odds — pure functions over pool totals.

odds(side) = (yes_pool + no_pool) / pool_for_side

An empty market, or an empty side, quotes DEFAULT_ODDS (even money) instead of
dividing by zero or returning infinity. Callers must treat that 2.0 as a
placeholder quote: the actual payout of a bet is only fixed at settlement.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.bl_common.enums import Side

DEFAULT_ODDS = Decimal("2.0")
EVEN_PROBABILITY = Decimal("0.5")


def _check_pools(yes_pool: int, no_pool: int) -> None:
    if yes_pool < 0 or no_pool < 0:
        raise ValueError(f"Pools must be non-negative: yes={yes_pool}, no={no_pool}")


def odds(yes_pool: int, no_pool: int, side: Side) -> Decimal:
    """Gross payout multiplier for one unit staked on side."""
    _check_pools(yes_pool, no_pool)
    side_pool = yes_pool if side is Side.YES else no_pool
    if side_pool == 0:
        return DEFAULT_ODDS
    return Decimal(yes_pool + no_pool) / Decimal(side_pool)


def implied_probability(yes_pool: int, no_pool: int, side: Side) -> Decimal:
    """Share of the total pool backing side, in [0, 1]."""
    _check_pools(yes_pool, no_pool)
    total = yes_pool + no_pool
    if total == 0:
        return EVEN_PROBABILITY
    side_pool = yes_pool if side is Side.YES else no_pool
    return Decimal(side_pool) / Decimal(total)


def potential_payout(yes_pool: int, no_pool: int, side: Side, amount: int) -> int:
    """Gross payout (micro-units, floored) of `amount` at the quote after it lands.

    Display estimate only; ignores the house edge taken at settlement.
    """
    if amount <= 0:
        return 0
    if side is Side.YES:
        quote = odds(yes_pool + amount, no_pool, side)
    else:
        quote = odds(yes_pool, no_pool + amount, side)
    return int(Decimal(amount) * quote)


@dataclass(frozen=True)
class OddsQuote:
    yes_odds: Decimal
    no_odds: Decimal
    yes_probability: Decimal
    no_probability: Decimal

    @classmethod
    def from_pools(cls, yes_pool: int, no_pool: int) -> "OddsQuote":
        return cls(
            yes_odds=odds(yes_pool, no_pool, Side.YES),
            no_odds=odds(yes_pool, no_pool, Side.NO),
            yes_probability=implied_probability(yes_pool, no_pool, Side.YES),
            no_probability=implied_probability(yes_pool, no_pool, Side.NO),
        )
