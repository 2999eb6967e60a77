# src/bl_settlement/api/router.py
"""Admin REST API: settle, cancel, resolve from metrics."""
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_common.database import get_db_session
from src.bl_common.enums import CancelReason, CreatorDecision
from src.bl_common.response import ApiResponse, success_response
from src.bl_gateway.auth.dependencies import get_container, require_admin
from src.bl_market.application.schemas import SettlementOut
from src.bl_oracle.domain.outcome import MetricsSnapshot
from src.container import Container

router = APIRouter(prefix="/admin", tags=["admin"])


class SettleRequest(BaseModel):
    outcome: bool
    force: bool = False  # oracle override: settle before the deadline
    creator_decision: CreatorDecision = CreatorDecision.REWARD


class CancelRequest(BaseModel):
    reason: CancelReason = CancelReason.ADMIN


class ResolveRequest(BaseModel):
    target_id: str = ""
    current_value: int | None = None  # None: provider had no data
    start_value: int = 0
    last_updated: datetime | None = None


@router.post("/markets/{market_id}/settle")
async def settle_market(
    market_id: str,
    body: SettleRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await container.settlement.settle(
        db,
        market_id,
        body.outcome,
        oracle_override=body.force,
        creator_decision=body.creator_decision,
    )
    return success_response(SettlementOut.from_result(result).model_dump(), request)


@router.post("/markets/{market_id}/cancel")
async def cancel_market(
    market_id: str,
    body: CancelRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await container.settlement.cancel(db, market_id, body.reason)
    return success_response(SettlementOut.from_result(result).model_dump(), request)


@router.post("/markets/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    body: ResolveRequest,
    request: Request,
    admin: Annotated[str, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    metrics = None
    if body.current_value is not None and body.last_updated is not None:
        metrics = MetricsSnapshot(
            target_id=body.target_id,
            current_value=body.current_value,
            start_value=body.start_value,
            last_updated=body.last_updated,
        )
    result = await container.resolver.resolve_market(db, market_id, metrics)
    return success_response(SettlementOut.from_result(result).model_dump(), request)
