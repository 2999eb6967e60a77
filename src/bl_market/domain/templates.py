"""Market templates and creation-parameter validation.

Each prediction type carries a duration window (hours), suggested thresholds
and a target-id format. validate_market_params() collects every problem
instead of stopping at the first one so the caller can show them all.
"""

import re
from dataclasses import dataclass

from src.bl_common.enums import PredictionType

TITLE_MIN_LENGTH = 10
TITLE_MAX_LENGTH = 200


@dataclass(frozen=True)
class MarketTemplate:
    prediction_type: PredictionType
    title: str
    description: str
    suggested_thresholds: tuple[int, ...]
    min_duration_hours: float
    max_duration_hours: float
    category: str  # growth / content / engagement / milestone


MARKET_TEMPLATES: dict[PredictionType, MarketTemplate] = {
    PredictionType.VIRAL_CAST: MarketTemplate(
        PredictionType.VIRAL_CAST, "Viral Cast Prediction",
        "Will this cast reach the target engagement?",
        (100, 500, 1000, 2500, 5000), 1, 72, "content",
    ),
    PredictionType.POLL_OUTCOME: MarketTemplate(
        PredictionType.POLL_OUTCOME, "Poll Result Prediction",
        "What will this poll result be?",
        (50, 60, 70, 80, 90), 1, 168, "content",
    ),
    PredictionType.CHANNEL_GROWTH: MarketTemplate(
        PredictionType.CHANNEL_GROWTH, "Channel Growth Battle",
        "Which channel will grow faster?",
        (10, 25, 50, 100, 250), 24, 168, "growth",
    ),
    PredictionType.CREATOR_MILESTONE: MarketTemplate(
        PredictionType.CREATOR_MILESTONE, "Creator Milestone",
        "Will creator reach this milestone?",
        (1000, 5000, 10000, 25000, 50000), 48, 720, "milestone",
    ),
    PredictionType.FOLLOWER_GROWTH: MarketTemplate(
        PredictionType.FOLLOWER_GROWTH, "Follower Growth Challenge",
        "Will this creator gain X followers?",
        (50, 100, 250, 500, 1000), 24, 168, "growth",
    ),
    PredictionType.LIVE_STREAM_VIEWS: MarketTemplate(
        PredictionType.LIVE_STREAM_VIEWS, "Live Stream Viewership",
        "Will this stream get X concurrent viewers?",
        (50, 100, 250, 500, 1000), 0.5, 12, "engagement",
    ),
    PredictionType.ENGAGEMENT_BATTLE: MarketTemplate(
        PredictionType.ENGAGEMENT_BATTLE, "Creator Engagement Battle",
        "Who will get more engagement?",
        (100, 250, 500, 1000, 2500), 6, 72, "engagement",
    ),
    PredictionType.TRENDING_CAST: MarketTemplate(
        PredictionType.TRENDING_CAST, "Trending Cast Prediction",
        "Will this cast trend today?",
        (10, 25, 50, 100, 250), 1, 24, "content",
    ),
    PredictionType.FRAME_INTERACTIONS: MarketTemplate(
        PredictionType.FRAME_INTERACTIONS, "Frame Interaction Bet",
        "How many will interact with this Frame?",
        (25, 50, 100, 250, 500), 1, 72, "engagement",
    ),
}

_CAST_HASH_RE = re.compile(r"0x[a-fA-F0-9]{40}")
_FID_RE = re.compile(r"[0-9]+")
_CHANNEL_RE = re.compile(r"[a-z0-9-]{1,50}")


def is_valid_target_id(prediction_type: PredictionType, target_id: str) -> bool:
    if prediction_type in (
        PredictionType.VIRAL_CAST,
        PredictionType.TRENDING_CAST,
        PredictionType.FRAME_INTERACTIONS,
    ):
        return bool(_CAST_HASH_RE.fullmatch(target_id))
    if prediction_type in (PredictionType.FOLLOWER_GROWTH, PredictionType.CREATOR_MILESTONE):
        return bool(_FID_RE.fullmatch(target_id)) and int(target_id) > 0
    if prediction_type == PredictionType.CHANNEL_GROWTH:
        return bool(_CHANNEL_RE.fullmatch(target_id))
    if prediction_type == PredictionType.LIVE_STREAM_VIEWS:
        return 0 < len(target_id) <= 100
    return True


def validate_market_params(
    prediction_type: PredictionType,
    title: str,
    target_id: str,
    threshold: int,
    duration_hours: float,
) -> list[str]:
    """Return a list of validation errors (empty when valid)."""
    errors: list[str] = []
    template = MARKET_TEMPLATES[prediction_type]

    if duration_hours < template.min_duration_hours:
        errors.append(f"Duration must be at least {template.min_duration_hours} hours")
    if duration_hours > template.max_duration_hours:
        errors.append(f"Duration cannot exceed {template.max_duration_hours} hours")

    if threshold <= 0:
        errors.append("Threshold must be positive")

    if len(title) < TITLE_MIN_LENGTH:
        errors.append(f"Title must be at least {TITLE_MIN_LENGTH} characters")
    if len(title) > TITLE_MAX_LENGTH:
        errors.append(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")

    if not is_valid_target_id(prediction_type, target_id):
        errors.append("Invalid target ID format")

    return errors
