"""bl_market REST endpoints.

GET  /markets                       — active markets with live odds
POST /markets                       — create a market (optionally creator-staked)
GET  /markets/limits                — bet and creator-stake bounds
GET  /markets/{market_id}           — market detail with odds
POST /markets/{market_id}/withdraw  — creator withdraws stake (no bets yet)
POST /markets/{market_id}/claim-creator — creator takes out stake + reward after close
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.database import get_db_session
from src.bl_common.enums import PredictionType
from src.bl_common.response import ApiResponse, success_response
from src.bl_gateway.auth.dependencies import get_container, get_current_bettor
from src.bl_market.application.schemas import (
    CreateMarketRequest,
    LimitsResponse,
    MarketListResponse,
    MarketOut,
    SettlementOut,
)
from src.bl_market.application.service import MarketWithOdds
from src.bl_odds.domain.odds import OddsQuote
from src.container import Container

router = APIRouter(prefix="/markets", tags=["markets"])


@router.get("")
async def list_markets(
    request: Request,
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    prediction_type: PredictionType | None = Query(None, alias="type"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    views = await container.markets.list_active_markets(db, prediction_type, limit)
    result = MarketListResponse(items=[MarketOut.from_view(v) for v in views])
    return success_response(result.model_dump(), request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    request: Request,
    body: CreateMarketRequest,
    creator: Annotated[str, Depends(get_current_bettor)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    market = await container.markets.create_market(
        db,
        creator=creator,
        prediction_type=body.prediction_type,
        title=body.title,
        target_id=body.target_id,
        threshold=body.threshold,
        duration_hours=body.duration_hours,
        creator_stake=body.creator_stake,
        description=body.description,
        category=body.category,
        metadata=body.metadata,
    )
    view = MarketWithOdds(market, OddsQuote.from_pools(market.yes_pool, market.no_pool))
    resp = success_response(MarketOut.from_view(view).model_dump(), request)
    resp.message = "Market created"
    return resp


@router.get("/limits")
async def get_limits(
    request: Request,
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    result = LimitsResponse.from_limits(
        container.markets.bet_limits, container.markets.stake_limits
    )
    return success_response(result.model_dump(), request)


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    view = await container.markets.get_market_with_odds(db, market_id)
    return success_response(MarketOut.from_view(view).model_dump(), request)


@router.post("/{market_id}/withdraw")
async def withdraw_creator_stake(
    market_id: str,
    request: Request,
    creator: Annotated[str, Depends(get_current_bettor)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await container.markets.withdraw_creator_stake(db, market_id, creator)
    resp = success_response(SettlementOut.from_result(result).model_dump(), request)
    resp.message = "Creator stake withdrawn"
    return resp


@router.post("/{market_id}/claim-creator")
async def claim_creator_payout(
    market_id: str,
    request: Request,
    creator: Annotated[str, Depends(get_current_bettor)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    market = await container.markets.claim_creator_payout(db, market_id, creator)
    view = MarketWithOdds(market, OddsQuote.from_pools(market.yes_pool, market.no_pool))
    resp = success_response(MarketOut.from_view(view).model_dump(), request)
    resp.message = "Creator payout claimed"
    return resp
