"""bl_betting REST endpoints.

POST /bets                 — place a bet (pre-trade odds quoted in the response)
GET  /bets                 — caller's bets, newest first
POST /bets/{bet_id}/claim  — claim a settled bet's payout
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_betting.application.schemas import BetListResponse, BetOut, PlaceBetRequest
from src.bl_common.database import get_db_session
from src.bl_common.response import ApiResponse, success_response
from src.bl_gateway.auth.dependencies import get_container, get_current_bettor
from src.container import Container

router = APIRouter(prefix="/bets", tags=["bets"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_bet(
    request: Request,
    body: PlaceBetRequest,
    bettor: Annotated[str, Depends(get_current_bettor)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bet = await container.betting.place_bet(db, body.market_id, bettor, body.side, body.amount)
    resp = success_response(BetOut.from_domain(bet).model_dump(), request)
    resp.message = "Bet placed"
    return resp


@router.get("")
async def list_my_bets(
    request: Request,
    bettor: Annotated[str, Depends(get_current_bettor)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    bets = await container.betting.list_user_bets(db, bettor, limit)
    result = BetListResponse(items=[BetOut.from_domain(b) for b in bets])
    return success_response(result.model_dump(), request)


@router.post("/{bet_id}/claim")
async def claim_winnings(
    bet_id: str,
    request: Request,
    bettor: Annotated[str, Depends(get_current_bettor)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    bet = await container.betting.claim_winnings(db, bet_id, bettor)
    resp = success_response(BetOut.from_domain(bet).model_dump(), request)
    resp.message = "Winnings claimed"
    return resp
