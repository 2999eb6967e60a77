"""FastAPI dependencies: container access, current bettor, admin guard.

Usage in any protected router:
    from src.bl_gateway.auth.dependencies import get_current_bettor

    @router.post("/protected")
    async def protected(bettor: str = Depends(get_current_bettor)):
        ...
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.bl_common.errors import AdminRequiredError, InvalidCredentialsError
from src.container import Container

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (RFC 6750)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


def get_container(request: Request) -> Container:
    return request.app.state.container  # type: ignore[no-any-return]


async def get_current_bettor(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    container: Container = Depends(get_container),
) -> str:
    """Return the lower-cased wallet address from the Bearer token (HTTP 401 otherwise)."""
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = container.auth.jwt.decode_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    return payload["sub"]


async def require_admin(
    bettor: str = Depends(get_current_bettor),
    container: Container = Depends(get_container),
) -> str:
    """Raise AdminRequiredError (403) unless the caller is listed in ADMIN_ADDRESSES."""
    if bettor not in container.admin_addresses:
        raise AdminRequiredError()
    return bettor
