"""Domain events emitted after a pool or market write commits.

Subscribers (feed, notifications, chat) consume these by message passing.
Events are immutable and carry only primitive/JSON-friendly values plus
datetimes, which to_dict() renders as ISO-8601.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Protocol

from src.bl_common.datetime_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    event_type: ClassVar[str] = "DomainEvent"

    market_id: str
    occurred_at: datetime = field(default_factory=utc_now, kw_only=True)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"event_type": self.event_type}
        for key, value in asdict(self).items():
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            payload[key] = value
        return payload


@dataclass(frozen=True)
class MarketCreated(DomainEvent):
    event_type: ClassVar[str] = "MarketCreated"

    prediction_type: str
    creator: str
    creator_stake: int
    deadline: datetime


@dataclass(frozen=True)
class BetPlaced(DomainEvent):
    event_type: ClassVar[str] = "BetPlaced"

    bet_id: str
    bettor: str
    side: str
    amount: int
    yes_pool: int
    no_pool: int
    yes_odds: Decimal
    no_odds: Decimal


@dataclass(frozen=True)
class MarketSettled(DomainEvent):
    event_type: ClassVar[str] = "MarketSettled"

    outcome: bool
    winner_count: int
    total_payout: int
    house_revenue: int
    creator_payout: int


@dataclass(frozen=True)
class MarketCancelled(DomainEvent):
    event_type: ClassVar[str] = "MarketCancelled"

    reason: str
    refunded_bets: int
    refunded_amount: int


@dataclass(frozen=True)
class WinningsClaimed(DomainEvent):
    event_type: ClassVar[str] = "WinningsClaimed"

    bet_id: str
    bettor: str
    payout: int


@dataclass(frozen=True)
class CreatorPayoutClaimed(DomainEvent):
    event_type: ClassVar[str] = "CreatorPayoutClaimed"

    creator: str
    payout: int


class EventPublisherProtocol(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...


async def publish_all(publisher: EventPublisherProtocol, events: list[DomainEvent]) -> None:
    """Publish committed events in order; a failing publisher never undoes the write."""
    for event in events:
        try:
            await publisher.publish(event)
        except Exception:
            logger.exception(
                "Failed to publish %s for market %s", event.event_type, event.market_id
            )
