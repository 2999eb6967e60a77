"""Shared test fixtures.

JWT_SECRET must exist before config.settings is imported anywhere.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")

import asyncio  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from src.bl_common.database import NullSession  # noqa: E402
from src.bl_common.enums import PredictionType  # noqa: E402
from src.bl_common.errors import StorageConflictError  # noqa: E402
from src.bl_common.id_generator import SequentialIdGenerator  # noqa: E402
from src.bl_events.infrastructure.memory_bus import InMemoryEventBus  # noqa: E402
from src.bl_ledger.application.ledger import PoolLedger  # noqa: E402
from src.bl_ledger.infrastructure.memory_store import InMemoryPoolStore  # noqa: E402
from src.bl_market.domain.models import Market  # noqa: E402
from src.bl_settlement.application.service import SettlementService  # noqa: E402
from src.bl_settlement.domain.models import SettlementPolicy  # noqa: E402

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Deterministic clock; call it to read, advance() to move forward."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db() -> NullSession:
    return NullSession()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryPoolStore:
    return InMemoryPoolStore(clock)


class InterleavingPoolStore(InMemoryPoolStore):
    """Suspends inside every read and write so concurrent units of work interleave.

    conflicts counts writes rejected by the version compare-and-swap; under the
    ledger's per-market lock it stays at zero.
    """

    def __init__(self, clock: FakeClock) -> None:
        super().__init__(clock)
        self.conflicts = 0

    async def get_market(self, db, market_id, for_update=False):
        market = await super().get_market(db, market_id, for_update)
        await asyncio.sleep(0)
        return market

    async def append_bet(self, db, bet, expected_version):
        await asyncio.sleep(0)
        try:
            return await super().append_bet(db, bet, expected_version)
        except StorageConflictError:
            self.conflicts += 1
            raise

    async def finalize_market(self, db, market, bets, expected_version):
        await asyncio.sleep(0)
        try:
            await super().finalize_market(db, market, bets, expected_version)
        except StorageConflictError:
            self.conflicts += 1
            raise


@pytest.fixture
def interleaving_store(clock: FakeClock) -> InterleavingPoolStore:
    return InterleavingPoolStore(clock)


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def ledger(store: InMemoryPoolStore, bus: InMemoryEventBus, clock: FakeClock) -> PoolLedger:
    return PoolLedger(store, SequentialIdGenerator(prefix="id-"), bus, clock=clock)


@pytest.fixture
def interleaving_ledger(
    interleaving_store: InterleavingPoolStore, bus: InMemoryEventBus, clock: FakeClock
) -> PoolLedger:
    return PoolLedger(interleaving_store, SequentialIdGenerator(prefix="id-"), bus, clock=clock)


@pytest.fixture
def policy() -> SettlementPolicy:
    return SettlementPolicy(
        house_edge_bps=300, creator_reward_bps=100, creator_min_volume=100_000_000
    )


@pytest.fixture
def settlement(ledger: PoolLedger, policy: SettlementPolicy) -> SettlementService:
    return SettlementService(ledger, policy)


@pytest.fixture
def make_market(store: InMemoryPoolStore, db: NullSession, clock: FakeClock):
    """Factory: insert an ACTIVE market (VIRAL_CAST by default) into the memory store."""

    async def _make(
        market_id: str = "mkt-1",
        creator: str = "0xcreator",
        creator_stake: int = 0,
        hours: float = 24,
        prediction_type: PredictionType = PredictionType.VIRAL_CAST,
        **kwargs: Any,
    ) -> Market:
        market = Market(
            id=market_id,
            prediction_type=prediction_type,
            title="Will this cast reach 1000 likes?",
            target_id="0x" + "a" * 40,
            threshold=1000,
            deadline=clock() + timedelta(hours=hours),
            creator=creator,
            creator_stake=creator_stake,
            **kwargs,
        )
        return await store.create_market(db, market)  # type: ignore[arg-type]

    return _make
