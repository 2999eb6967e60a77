from dataclasses import dataclass

from src.bl_common.errors import InvalidAmountError


@dataclass(frozen=True)
class BetLimits:
    """Inclusive bet-size bounds in micro-units."""

    min_bet: int
    max_bet: int

    def __post_init__(self) -> None:
        if not (0 < self.min_bet <= self.max_bet):
            raise ValueError(f"Invalid bet limits [{self.min_bet}, {self.max_bet}]")


def check_bet_amount(amount: int, limits: BetLimits) -> None:
    """Raise InvalidAmountError if amount is not in [min_bet, max_bet]."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount, "must be an integer number of micro-units")
    if not (limits.min_bet <= amount <= limits.max_bet):
        raise InvalidAmountError(amount, f"must be in [{limits.min_bet}, {limits.max_bet}]")
