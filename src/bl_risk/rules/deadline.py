from datetime import datetime

from src.bl_common.errors import MarketExpiredError
from src.bl_market.domain.lifecycle import is_past_deadline
from src.bl_market.domain.models import Market


def check_before_deadline(market: Market, now: datetime) -> None:
    """Raise MarketExpiredError once now >= market.deadline."""
    if is_past_deadline(market, now):
        raise MarketExpiredError(market.id)
