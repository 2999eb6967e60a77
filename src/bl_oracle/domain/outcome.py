"""Outcome calculation from externally supplied metrics.

The data provider (social-graph API, stream platform) is out of process; it
hands over a MetricsSnapshot and this module only decides YES / NO / unknown.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from src.bl_common.datetime_utils import as_utc
from src.bl_common.enums import PredictionType

STALE_AFTER = timedelta(minutes=5)

# Types decided by a single metric against the threshold. Poll results and
# head-to-head battles have no metric rule and always come back undecided.
THRESHOLD_TYPES = frozenset({
    PredictionType.VIRAL_CAST,
    PredictionType.FRAME_INTERACTIONS,
    PredictionType.FOLLOWER_GROWTH,
    PredictionType.CREATOR_MILESTONE,
    PredictionType.CHANNEL_GROWTH,
    PredictionType.LIVE_STREAM_VIEWS,
    PredictionType.TRENDING_CAST,
})


@dataclass(frozen=True)
class MetricsSnapshot:
    target_id: str
    current_value: int
    last_updated: datetime
    start_value: int = 0
    change_rate: float = 0.0  # units per hour, informational


def is_stale(metrics: MetricsSnapshot, now: datetime) -> bool:
    return as_utc(metrics.last_updated) < as_utc(now) - STALE_AFTER


def check_outcome(
    prediction_type: PredictionType,
    metrics: MetricsSnapshot | None,
    threshold: int,
    now: datetime,
) -> bool | None:
    """True/False once decidable, None when metrics are missing, stale or not applicable."""
    if metrics is None or is_stale(metrics, now):
        return None
    if prediction_type not in THRESHOLD_TYPES:
        return None
    if prediction_type == PredictionType.CHANNEL_GROWTH:
        return metrics.current_value - metrics.start_value >= threshold
    return metrics.current_value >= threshold
