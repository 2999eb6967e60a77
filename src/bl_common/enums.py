"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SETTLED = "SETTLED"
    CANCELLED = "CANCELLED"


class PredictionType(str, Enum):
    VIRAL_CAST = "VIRAL_CAST"
    POLL_OUTCOME = "POLL_OUTCOME"
    CHANNEL_GROWTH = "CHANNEL_GROWTH"
    CREATOR_MILESTONE = "CREATOR_MILESTONE"
    FOLLOWER_GROWTH = "FOLLOWER_GROWTH"
    LIVE_STREAM_VIEWS = "LIVE_STREAM_VIEWS"
    ENGAGEMENT_BATTLE = "ENGAGEMENT_BATTLE"
    TRENDING_CAST = "TRENDING_CAST"
    FRAME_INTERACTIONS = "FRAME_INTERACTIONS"


class Side(str, Enum):
    YES = "YES"
    NO = "NO"

    @property
    def as_bool(self) -> bool:
        return self is Side.YES

    @classmethod
    def from_bool(cls, outcome: bool) -> "Side":
        return cls.YES if outcome else cls.NO


class CreatorDecision(str, Enum):
    """Moderation verdict on a creator-staked market."""
    REWARD = "REWARD"
    FORFEIT = "FORFEIT"


class CancelReason(str, Enum):
    CREATOR_WITHDRAWN = "CREATOR_WITHDRAWN"
    INVALID_PARAMS = "INVALID_PARAMS"
    STALE_PRICE_FEED = "STALE_PRICE_FEED"
    NO_RESOLUTION_DATA = "NO_RESOLUTION_DATA"
    ADMIN = "ADMIN"
