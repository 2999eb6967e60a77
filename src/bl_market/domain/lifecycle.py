"""Market state machine.

    ACTIVE ──settle──▶ SETTLED     (terminal)
      │
      └───cancel──▶ CANCELLED      (terminal)

A finalized market rejects every further transition with AlreadyFinalizedError,
which is what makes a repeated settle/cancel a no-op for payouts.
"""

from datetime import datetime

from src.bl_common.datetime_utils import as_utc
from src.bl_common.enums import MarketStatus
from src.bl_common.errors import AlreadyFinalizedError, NotReadyToSettleError
from src.bl_market.domain.models import Market

_TRANSITIONS: dict[MarketStatus, frozenset[MarketStatus]] = {
    MarketStatus.ACTIVE: frozenset({MarketStatus.SETTLED, MarketStatus.CANCELLED}),
    MarketStatus.SETTLED: frozenset(),
    MarketStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES: frozenset[MarketStatus] = frozenset(
    status for status, targets in _TRANSITIONS.items() if not targets
)


def can_transition(current: MarketStatus, target: MarketStatus) -> bool:
    return target in _TRANSITIONS[current]


def ensure_transition(market: Market, target: MarketStatus) -> None:
    """Raise AlreadyFinalizedError when market is terminal, ValueError on an illegal edge."""
    if market.status in TERMINAL_STATES:
        raise AlreadyFinalizedError(market.id, market.status.value)
    if not can_transition(market.status, target):
        raise ValueError(f"Illegal market transition {market.status.value} -> {target.value}")


def is_past_deadline(market: Market, now: datetime) -> bool:
    return as_utc(now) >= as_utc(market.deadline)


def ensure_settleable(market: Market, now: datetime, oracle_override: bool) -> None:
    """Settlement requires an ACTIVE market and either a passed deadline or an oracle override."""
    ensure_transition(market, MarketStatus.SETTLED)
    if not oracle_override and not is_past_deadline(market, now):
        raise NotReadyToSettleError(market.id)
