from src.bl_common.errors import MarketNotActiveError, MarketNotFoundError
from src.bl_market.domain.models import Market


def check_market_active(market_id: str, market: Market | None) -> Market:
    """Return the market when it exists and is ACTIVE."""
    if market is None:
        raise MarketNotFoundError(market_id)
    if not market.is_active:
        raise MarketNotActiveError(market_id)
    return market
