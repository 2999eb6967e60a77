"""Integration-test fixtures.

Each test gets a fresh app wired to the in-memory store and event bus, so no
PostgreSQL or Redis is needed. Wallets are throwaway eth-account keys.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.container import build_container
from src.main import create_app

Login = Callable[[LocalAccount], Awaitable[dict[str, str]]]


@pytest.fixture
def admin() -> LocalAccount:
    return Account.create()


@pytest_asyncio.fixture
async def client(admin: LocalAccount) -> AsyncGenerator[AsyncClient, None]:
    settings = Settings(
        JWT_SECRET="integration-secret",
        STORE_BACKEND="memory",
        EVENT_BACKEND="memory",
        ADMIN_ADDRESSES=[admin.address],
    )
    app = create_app(build_container(settings))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def login(client: AsyncClient) -> Login:
    """Sign a fresh nonce with account and return Authorization headers."""

    async def _login(account: LocalAccount) -> dict[str, str]:
        nonce_resp = await client.post("/api/v1/auth/nonce")
        nonce = nonce_resp.json()["data"]["nonce"]
        message = f"Sign in to Blink Markets at {nonce}"
        signed = account.sign_message(encode_defunct(text=message))
        resp = await client.post("/api/v1/auth/verify", json={
            "address": account.address,
            "message": message,
            "signature": "0x" + bytes(signed.signature).hex(),
        })
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}

    return _login
