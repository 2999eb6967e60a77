"""Wallet auth router: nonce, verify.

POST /auth/nonce   — issue a single-use nonce to embed in the signed message
POST /auth/verify  — verify (address, message, signature) and issue a JWT
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from src.bl_common.response import ApiResponse, success_response
from src.bl_gateway.auth.dependencies import get_container
from src.container import Container

router = APIRouter(prefix="/auth", tags=["auth"])


class VerifyRequest(BaseModel):
    address: str = Field(..., pattern=r"^0x[a-fA-F0-9]{40}$")
    message: str = Field(..., min_length=1, max_length=2000)
    signature: str = Field(..., pattern=r"^0x[a-fA-F0-9]+$")


@router.post("/nonce", summary="Issue login nonce")
async def issue_nonce(
    request: Request,
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    nonce = await container.auth.issue_nonce()
    return success_response({"nonce": nonce}, request)


@router.post("/verify", summary="Verify wallet signature")
async def verify(
    request: Request,
    body: VerifyRequest,
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    token = await container.auth.verify(body.address, body.message, body.signature)
    resp = success_response(
        {
            "access_token": token,
            "token_type": "Bearer",
            "expires_in": container.auth.jwt.expires_in_seconds,
            "address": body.address.lower(),
        },
        request,
    )
    resp.message = "Login successful"
    return resp
