from dataclasses import dataclass


@dataclass(frozen=True)
class StakeLimits:
    """Creator stake bounds in micro-units; a stake of 0 means no stake posted."""

    min_stake: int
    max_stake: int

    def __post_init__(self) -> None:
        if not (0 < self.min_stake <= self.max_stake):
            raise ValueError(f"Invalid stake limits [{self.min_stake}, {self.max_stake}]")


def check_creator_stake(stake: int, limits: StakeLimits) -> list[str]:
    """Return validation messages for a creator stake (empty when valid)."""
    if stake == 0:
        return []
    if stake < 0:
        return ["Creator stake cannot be negative"]
    if stake < limits.min_stake:
        return [f"Creator stake must be at least {limits.min_stake} micro-units"]
    if stake > limits.max_stake:
        return [f"Creator stake cannot exceed {limits.max_stake} micro-units"]
    return []
