"""Composition root — the only module that turns Settings into objects.

Everything else receives its collaborators through constructors, so tests
build a Container straight from a Settings instance (memory backends) and
hand it to create_app().
"""

import logging
from dataclasses import dataclass

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from config.settings import Settings
from src.bl_betting.application.service import BetAdmissionService
from src.bl_common.database import build_engine, build_session_factory
from src.bl_common.datetime_utils import Clock, utc_now
from src.bl_common.id_generator import IdGenerator, SequentialIdGenerator, SnowflakeIdGenerator
from src.bl_common.redis_client import close_redis, create_redis
from src.bl_events.domain.events import EventPublisherProtocol
from src.bl_events.infrastructure.memory_bus import InMemoryEventBus
from src.bl_events.infrastructure.redis_bus import RedisEventPublisher
from src.bl_gateway.auth.jwt_handler import JwtHandler
from src.bl_gateway.auth.nonce_store import (
    InMemoryNonceStore,
    NonceStoreProtocol,
    RedisNonceStore,
)
from src.bl_gateway.auth.service import WalletAuthService
from src.bl_ledger.application.ledger import PoolLedger
from src.bl_ledger.domain.repository import PoolStoreProtocol
from src.bl_ledger.infrastructure.memory_store import InMemoryPoolStore
from src.bl_ledger.infrastructure.persistence import SqlPoolStore
from src.bl_market.application.service import MarketApplicationService
from src.bl_oracle.application.resolver import OutcomeResolver
from src.bl_risk.rules.bet_limit import BetLimits
from src.bl_risk.rules.creator_stake import StakeLimits
from src.bl_settlement.application.service import SettlementService
from src.bl_settlement.domain.models import SettlementPolicy

logger = logging.getLogger(__name__)

_STORE_BACKENDS = ("postgres", "memory")
_EVENT_BACKENDS = ("redis", "memory")


@dataclass
class Container:
    engine: AsyncEngine | None
    session_factory: async_sessionmaker[AsyncSession] | None
    redis: aioredis.Redis | None
    store: PoolStoreProtocol
    publisher: EventPublisherProtocol
    ledger: PoolLedger
    settlement: SettlementService
    betting: BetAdmissionService
    markets: MarketApplicationService
    resolver: OutcomeResolver
    auth: WalletAuthService
    admin_addresses: frozenset[str]

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        await close_redis(self.redis)


def build_container(
    settings: Settings,
    clock: Clock = utc_now,
    id_generator: IdGenerator | None = None,
) -> Container:
    if settings.STORE_BACKEND not in _STORE_BACKENDS:
        raise ValueError(f"STORE_BACKEND must be one of {_STORE_BACKENDS}")
    if settings.EVENT_BACKEND not in _EVENT_BACKENDS:
        raise ValueError(f"EVENT_BACKEND must be one of {_EVENT_BACKENDS}")

    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None
    store: PoolStoreProtocol
    if settings.STORE_BACKEND == "postgres":
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        session_factory = build_session_factory(engine)
        store = SqlPoolStore()
        ids = id_generator or SnowflakeIdGenerator()
    else:
        store = InMemoryPoolStore(clock)
        ids = id_generator or SequentialIdGenerator()

    redis: aioredis.Redis | None = None
    publisher: EventPublisherProtocol
    nonces: NonceStoreProtocol
    if settings.EVENT_BACKEND == "redis":
        redis = create_redis(settings.REDIS_URL)
        publisher = RedisEventPublisher(redis)
        nonces = RedisNonceStore(redis, settings.NONCE_TTL_SECONDS)
    else:
        publisher = InMemoryEventBus()
        nonces = InMemoryNonceStore(settings.NONCE_TTL_SECONDS, clock)

    ledger = PoolLedger(
        store,
        ids,
        publisher,
        clock=clock,
        conflict_retries=settings.STORAGE_CONFLICT_RETRIES,
    )
    policy = SettlementPolicy(
        house_edge_bps=settings.HOUSE_EDGE_BPS,
        creator_reward_bps=settings.CREATOR_REWARD_BPS,
        creator_min_volume=settings.CREATOR_MIN_VOLUME,
    )
    bet_limits = BetLimits(settings.MIN_BET_AMOUNT, settings.MAX_BET_AMOUNT)
    stake_limits = StakeLimits(settings.MIN_CREATOR_STAKE, settings.MAX_CREATOR_STAKE)

    settlement = SettlementService(ledger, policy)
    logger.info(
        "Container built: store=%s events=%s house_edge_bps=%d",
        settings.STORE_BACKEND, settings.EVENT_BACKEND, settings.HOUSE_EDGE_BPS,
    )
    return Container(
        engine=engine,
        session_factory=session_factory,
        redis=redis,
        store=store,
        publisher=publisher,
        ledger=ledger,
        settlement=settlement,
        betting=BetAdmissionService(ledger, bet_limits),
        markets=MarketApplicationService(
            ledger, settlement, ids, stake_limits, bet_limits, clock=clock
        ),
        resolver=OutcomeResolver(settlement, clock=clock),
        auth=WalletAuthService(
            nonces,
            JwtHandler(
                settings.JWT_SECRET,
                algorithm=settings.JWT_ALGORITHM,
                expire_minutes=settings.JWT_EXPIRE_MINUTES,
            ),
        ),
        admin_addresses=frozenset(a.lower() for a in settings.ADMIN_ADDRESSES),
    )
