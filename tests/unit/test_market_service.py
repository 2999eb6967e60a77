"""MarketApplicationService: creation, reads, creator withdrawal and payout claims."""

from datetime import timedelta
from decimal import Decimal

import pytest

from src.bl_common.enums import (
    CancelReason,
    CreatorDecision,
    MarketStatus,
    PredictionType,
    Side,
)
from src.bl_common.errors import (
    AlreadyFinalizedError,
    CreatorAlreadyClaimedError,
    InvalidMarketParamsError,
    MarketHasBetsError,
    MarketNotFinalizedError,
    MarketNotFoundError,
    NoCreatorPayoutError,
    NotMarketCreatorError,
)
from src.bl_common.id_generator import SequentialIdGenerator
from src.bl_events.domain.events import CreatorPayoutClaimed, MarketCreated
from src.bl_market.application.service import MarketApplicationService
from src.bl_market.domain.models import CastMetadata, GrowthMetadata
from src.bl_risk.rules.bet_limit import BetLimits
from src.bl_risk.rules.creator_stake import StakeLimits

CAST_HASH = "0x" + "c" * 40


@pytest.fixture
def markets(ledger, settlement, clock) -> MarketApplicationService:
    return MarketApplicationService(
        ledger,
        settlement,
        SequentialIdGenerator(prefix="mkt-"),
        StakeLimits(min_stake=1_000_000, max_stake=100_000_000),
        BetLimits(min_bet=1_000_000, max_bet=500_000_000),
        clock=clock,
    )


async def _create(markets, db, **overrides):
    params = {
        "creator": "0xcreator",
        "prediction_type": PredictionType.VIRAL_CAST,
        "title": "Will this cast reach 1000 likes?",
        "target_id": CAST_HASH,
        "threshold": 1000,
        "duration_hours": 24,
    }
    params.update(overrides)
    return await markets.create_market(db, **params)


class TestCreateMarket:
    @pytest.mark.asyncio
    async def test_creates_active_empty_market(self, markets, bus, db, clock) -> None:
        queue = bus.subscribe()
        market = await _create(markets, db, creator_stake=5_000_000)

        assert market.id == "mkt-1"
        assert market.status == MarketStatus.ACTIVE
        assert (market.yes_pool, market.no_pool, market.total_volume) == (0, 0, 0)
        assert market.deadline == clock() + timedelta(hours=24)
        assert market.category == "content"
        assert market.metadata == CastMetadata()

        event = queue.get_nowait()
        assert isinstance(event, MarketCreated)
        assert event.creator_stake == 5_000_000

    @pytest.mark.asyncio
    async def test_typed_metadata(self, markets, db) -> None:
        market = await _create(
            markets, db,
            prediction_type=PredictionType.FOLLOWER_GROWTH,
            title="Will @dwr gain 500 followers?",
            target_id="3",
            threshold=500,
            metadata={"start_value": 1200},
        )
        assert market.metadata == GrowthMetadata(start_value=1200)
        assert market.category == "growth"

    @pytest.mark.asyncio
    async def test_collects_every_error(self, markets, db) -> None:
        with pytest.raises(InvalidMarketParamsError) as exc_info:
            await _create(
                markets, db,
                title="short",
                target_id="not-a-hash",
                threshold=0,
                duration_hours=100,
                creator_stake=1,
            )
        errors = exc_info.value.errors
        assert len(errors) == 5
        assert exc_info.value.http_status == 400

    @pytest.mark.asyncio
    async def test_unknown_metadata_key(self, markets, db) -> None:
        with pytest.raises(InvalidMarketParamsError, match="metadata"):
            await _create(markets, db, metadata={"colour": "blue"})


class TestReads:
    @pytest.mark.asyncio
    async def test_market_with_odds(self, markets, ledger, db) -> None:
        market = await _create(markets, db)
        await ledger.record_bet(db, market.id, "0xalice", Side.YES, 100)
        await ledger.record_bet(db, market.id, "0xbob", Side.NO, 50)

        view = await markets.get_market_with_odds(db, market.id)
        assert view.quote.yes_odds == Decimal("1.5")
        assert view.quote.no_odds == Decimal("3")

    @pytest.mark.asyncio
    async def test_missing_market(self, markets, db) -> None:
        with pytest.raises(MarketNotFoundError):
            await markets.get_market_with_odds(db, "mkt-404")

    @pytest.mark.asyncio
    async def test_list_only_active(self, markets, settlement, db) -> None:
        first = await _create(markets, db)
        second = await _create(
            markets, db,
            prediction_type=PredictionType.FOLLOWER_GROWTH,
            target_id="3",
            threshold=100,
        )
        await settlement.cancel(db, first.id)

        views = await markets.list_active_markets(db)
        assert [v.market.id for v in views] == [second.id]
        filtered = await markets.list_active_markets(db, PredictionType.VIRAL_CAST)
        assert filtered == []


class TestWithdrawCreatorStake:
    @pytest.mark.asyncio
    async def test_withdraw_before_any_bet(self, markets, store, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)

        result = await markets.withdraw_creator_stake(db, market.id, "0xcreator")

        assert result.creator_stake_returned == 20_000_000
        stored = await store.get_market(db, market.id)
        assert stored.status == MarketStatus.CANCELLED
        assert stored.cancel_reason == CancelReason.CREATOR_WITHDRAWN.value

    @pytest.mark.asyncio
    async def test_only_creator(self, markets, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        with pytest.raises(NotMarketCreatorError):
            await markets.withdraw_creator_stake(db, market.id, "0xsomeone")

    @pytest.mark.asyncio
    async def test_blocked_once_bets_exist(self, markets, ledger, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await ledger.record_bet(db, market.id, "0xalice", Side.YES, 100)
        with pytest.raises(MarketHasBetsError):
            await markets.withdraw_creator_stake(db, market.id, "0xcreator")

    @pytest.mark.asyncio
    async def test_finalized_market(self, markets, settlement, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await settlement.cancel(db, market.id)
        with pytest.raises(AlreadyFinalizedError):
            await markets.withdraw_creator_stake(db, market.id, "0xcreator")


class TestClaimCreatorPayout:
    @pytest.mark.asyncio
    async def test_claim_after_settlement(
        self, markets, settlement, ledger, store, bus, db
    ) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await ledger.record_bet(db, market.id, "0xalice", Side.YES, 5_000_000)
        await settlement.settle(db, market.id, True, oracle_override=True)
        queue = bus.subscribe()

        claimed = await markets.claim_creator_payout(db, market.id, "0xcreator")

        assert claimed.creator_payout == 20_000_000
        assert claimed.creator_claimed is True
        assert (await store.get_market(db, market.id)).creator_claimed is True
        event = queue.get_nowait()
        assert isinstance(event, CreatorPayoutClaimed)
        assert event.payout == 20_000_000

    @pytest.mark.asyncio
    async def test_claim_refunded_stake_after_cancel(self, markets, settlement, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await settlement.cancel(db, market.id)

        claimed = await markets.claim_creator_payout(db, market.id, "0xcreator")
        assert claimed.creator_payout == 20_000_000

    @pytest.mark.asyncio
    async def test_second_claim_rejected(self, markets, settlement, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await settlement.cancel(db, market.id)
        await markets.claim_creator_payout(db, market.id, "0xcreator")

        with pytest.raises(CreatorAlreadyClaimedError):
            await markets.claim_creator_payout(db, market.id, "0xcreator")

    @pytest.mark.asyncio
    async def test_only_creator(self, markets, settlement, store, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await settlement.cancel(db, market.id)

        with pytest.raises(NotMarketCreatorError):
            await markets.claim_creator_payout(db, market.id, "0xsomeone")
        assert (await store.get_market(db, market.id)).creator_claimed is False

    @pytest.mark.asyncio
    async def test_active_market(self, markets, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        with pytest.raises(MarketNotFinalizedError):
            await markets.claim_creator_payout(db, market.id, "0xcreator")

    @pytest.mark.asyncio
    async def test_forfeited_stake_leaves_nothing(self, markets, settlement, ledger, db) -> None:
        market = await _create(markets, db, creator_stake=20_000_000)
        await ledger.record_bet(db, market.id, "0xalice", Side.YES, 5_000_000)
        await settlement.settle(
            db, market.id, True,
            oracle_override=True, creator_decision=CreatorDecision.FORFEIT,
        )
        with pytest.raises(NoCreatorPayoutError):
            await markets.claim_creator_payout(db, market.id, "0xcreator")

    @pytest.mark.asyncio
    async def test_missing_market(self, markets, db) -> None:
        with pytest.raises(MarketNotFoundError):
            await markets.claim_creator_payout(db, "mkt-404", "0xcreator")
