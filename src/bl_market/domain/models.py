"""Domain models for bl_market — pure dataclasses, no persistence dependency.

Per-type resolution details are a tagged union keyed by PredictionType:
each metadata class lists the prediction types it may accompany, and
metadata_from_dict() picks the class from the market's type.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, ClassVar

from src.bl_common.enums import MarketStatus, PredictionType, Side

# ---------------------------------------------------------------------------
# Per-type metadata (tagged by prediction type)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CastMetadata:
    prediction_types: ClassVar[frozenset[PredictionType]] = frozenset({
        PredictionType.VIRAL_CAST,
        PredictionType.TRENDING_CAST,
        PredictionType.FRAME_INTERACTIONS,
    })
    metric: str = "total_engagement"  # likes / recasts / replies / total_engagement


@dataclass(frozen=True)
class PollMetadata:
    prediction_types: ClassVar[frozenset[PredictionType]] = frozenset({
        PredictionType.POLL_OUTCOME,
    })
    option_index: int = 0


@dataclass(frozen=True)
class GrowthMetadata:
    prediction_types: ClassVar[frozenset[PredictionType]] = frozenset({
        PredictionType.CHANNEL_GROWTH,
        PredictionType.FOLLOWER_GROWTH,
    })
    start_value: int = 0


@dataclass(frozen=True)
class MilestoneMetadata:
    prediction_types: ClassVar[frozenset[PredictionType]] = frozenset({
        PredictionType.CREATOR_MILESTONE,
    })
    metric: str = "followers"


@dataclass(frozen=True)
class StreamMetadata:
    prediction_types: ClassVar[frozenset[PredictionType]] = frozenset({
        PredictionType.LIVE_STREAM_VIEWS,
    })
    platform: str = "farcaster"


@dataclass(frozen=True)
class BattleMetadata:
    prediction_types: ClassVar[frozenset[PredictionType]] = frozenset({
        PredictionType.ENGAGEMENT_BATTLE,
    })
    opponent_id: str = ""


MarketMetadata = (
    CastMetadata
    | PollMetadata
    | GrowthMetadata
    | MilestoneMetadata
    | StreamMetadata
    | BattleMetadata
)

_METADATA_CLASSES: tuple[type[Any], ...] = (
    CastMetadata,
    PollMetadata,
    GrowthMetadata,
    MilestoneMetadata,
    StreamMetadata,
    BattleMetadata,
)

METADATA_BY_TYPE: dict[PredictionType, type[Any]] = {
    ptype: cls for cls in _METADATA_CLASSES for ptype in cls.prediction_types
}


def metadata_from_dict(
    prediction_type: PredictionType, data: dict[str, Any] | None
) -> MarketMetadata:
    """Build the metadata variant for prediction_type; unknown keys raise TypeError."""
    cls = METADATA_BY_TYPE[prediction_type]
    return cls(**(data or {}))  # type: ignore[no-any-return]


def metadata_to_dict(metadata: MarketMetadata | None) -> dict[str, Any]:
    return asdict(metadata) if metadata is not None else {}


# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------


@dataclass
class Market:
    id: str
    prediction_type: PredictionType
    title: str
    target_id: str
    threshold: int
    deadline: datetime
    creator: str
    creator_stake: int = 0           # micro-units, 0 = no stake posted
    status: MarketStatus = MarketStatus.ACTIVE
    yes_pool: int = 0                # micro-units
    no_pool: int = 0                 # micro-units
    total_volume: int = 0            # micro-units, historical sum of admitted stakes
    bet_count: int = 0
    outcome: bool | None = None      # meaningful only when SETTLED
    creator_rewarded: bool = False   # set once when the creator stake is resolved
    creator_payout: int = 0          # stake returned + reward
    creator_claimed: bool = False    # creator_payout taken out, at most once
    house_revenue: int = 0
    description: str | None = None
    category: str = "general"
    metadata: MarketMetadata | None = None
    cancel_reason: str | None = None
    version: int = 0                 # bumped on every pool/status write
    created_at: datetime | None = None
    updated_at: datetime | None = None
    settled_at: datetime | None = None

    @property
    def total_pool(self) -> int:
        return self.yes_pool + self.no_pool

    @property
    def is_active(self) -> bool:
        return self.status == MarketStatus.ACTIVE

    def pool_for(self, side: Side) -> int:
        return self.yes_pool if side is Side.YES else self.no_pool
