# tests/unit/test_pool_store_persistence.py
"""Unit tests for MarketRepository / SqlPoolStore using MagicMock AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bl_common.enums import MarketStatus, PredictionType, Side
from src.bl_common.errors import MarketNotFoundError, StorageConflictError
from src.bl_ledger.domain.models import Bet
from src.bl_ledger.infrastructure.persistence import SqlPoolStore
from src.bl_market.domain.models import CastMetadata, GrowthMetadata, Market

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _make_market_row(**kwargs):
    """Build a mock DB row with all required fields."""
    row = MagicMock()
    row.id = kwargs.get("id", "MKT-1")
    row.prediction_type = kwargs.get("prediction_type", "VIRAL_CAST")
    row.title = "Will this cast reach 1000 likes?"
    row.description = None
    row.category = "content"
    row.target_id = "0x" + "a" * 40
    row.threshold = 1000
    row.deadline = NOW
    row.creator = "0xcreator"
    row.creator_stake = 0
    row.status = kwargs.get("status", "ACTIVE")
    row.yes_pool = kwargs.get("yes_pool", 0)
    row.no_pool = kwargs.get("no_pool", 0)
    row.total_volume = kwargs.get("yes_pool", 0) + kwargs.get("no_pool", 0)
    row.bet_count = kwargs.get("bet_count", 0)
    row.outcome = None
    row.creator_rewarded = False
    row.creator_payout = 0
    row.creator_claimed = False
    row.house_revenue = 0
    row.metadata = kwargs.get("metadata", '{"metric": "likes"}')
    row.cancel_reason = None
    row.version = kwargs.get("version", 0)
    row.created_at = NOW
    row.updated_at = NOW
    row.settled_at = None
    return row


def _make_bet_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "BET-1")
    row.market_id = "MKT-1"
    row.bettor = "0xalice"
    row.side = kwargs.get("side", "YES")
    row.amount = 100
    row.odds = "2.0000"
    row.created_at = NOW
    row.settled = kwargs.get("settled", False)
    row.payout = 0
    row.claimed = False
    return row


def _result(fetchone=None, fetchall=None):
    result = MagicMock()
    result.fetchone.return_value = fetchone
    result.fetchall.return_value = fetchall or []
    return result


def _bet(side: Side = Side.YES, amount: int = 100) -> Bet:
    return Bet(
        id="BET-1", market_id="MKT-1", bettor="0xalice", side=side,
        amount=amount, odds=Decimal("2.0"), timestamp=NOW,
    )


@pytest.fixture
def db():
    return MagicMock()


class TestMarketRows:
    @pytest.mark.asyncio
    async def test_get_market_maps_row(self, db):
        db.execute = AsyncMock(return_value=_result(_make_market_row(yes_pool=70, no_pool=30)))

        market = await SqlPoolStore().get_market(db, "MKT-1")

        assert market.prediction_type == PredictionType.VIRAL_CAST
        assert market.status == MarketStatus.ACTIVE
        assert market.total_pool == 100
        assert market.metadata == CastMetadata(metric="likes")

    @pytest.mark.asyncio
    async def test_metadata_as_dict(self, db):
        row = _make_market_row(prediction_type="CHANNEL_GROWTH", metadata={"start_value": 9})
        db.execute = AsyncMock(return_value=_result(row))

        market = await SqlPoolStore().get_market(db, "MKT-1")

        assert market.metadata == GrowthMetadata(start_value=9)

    @pytest.mark.asyncio
    async def test_get_market_missing(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await SqlPoolStore().get_market(db, "MKT-404") is None

    @pytest.mark.asyncio
    async def test_for_update_uses_locking_select(self, db):
        db.execute = AsyncMock(return_value=_result(_make_market_row()))

        await SqlPoolStore().get_market(db, "MKT-1", for_update=True)

        sql = str(db.execute.call_args[0][0])
        assert "FOR UPDATE" in sql

    @pytest.mark.asyncio
    async def test_create_market_serializes_metadata(self, db):
        db.execute = AsyncMock(return_value=_result(_make_market_row()))
        market = Market(
            id="MKT-1", prediction_type=PredictionType.VIRAL_CAST,
            title="Will this cast reach 1000 likes?", target_id="0x" + "a" * 40,
            threshold=1000, deadline=NOW, creator="0xcreator",
            metadata=CastMetadata(metric="likes"),
        )

        await SqlPoolStore().create_market(db, market)

        params = db.execute.call_args[0][1]
        assert params["metadata"] == '{"metric": "likes"}'
        assert params["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_list_markets_passes_none_filters(self, db):
        db.execute = AsyncMock(return_value=_result(fetchall=[_make_market_row()]))

        markets = await SqlPoolStore().list_markets(db, None, None, 20)

        assert len(markets) == 1
        params = db.execute.call_args[0][1]
        assert params == {"status": None, "prediction_type": None, "limit": 20}


class TestAppendBet:
    @pytest.mark.asyncio
    async def test_updates_pool_then_inserts_bet(self, db):
        db.execute = AsyncMock(side_effect=[
            _result(_make_market_row(no_pool=100, version=1)),
            _result(),
        ])

        market = await SqlPoolStore().append_bet(db, _bet(Side.NO), expected_version=0)

        assert market.no_pool == 100
        update_params = db.execute.call_args_list[0][0][1]
        assert update_params["no_delta"] == 100
        assert update_params["yes_delta"] == 0
        assert update_params["expected_version"] == 0
        insert_params = db.execute.call_args_list[1][0][1]
        assert insert_params["side"] == "NO"

    @pytest.mark.asyncio
    async def test_stale_version_is_conflict(self, db):
        db.execute = AsyncMock(side_effect=[_result(None), _result(MagicMock())])

        with pytest.raises(StorageConflictError):
            await SqlPoolStore().append_bet(db, _bet(), expected_version=3)
        assert db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_market(self, db):
        db.execute = AsyncMock(side_effect=[_result(None), _result(None)])

        with pytest.raises(MarketNotFoundError):
            await SqlPoolStore().append_bet(db, _bet(), expected_version=0)


class TestFinalizeAndClaims:
    @pytest.mark.asyncio
    async def test_finalize_updates_every_bet(self, db):
        db.execute = AsyncMock(side_effect=[_result(MagicMock()), _result()])
        market = Market(
            id="MKT-1", prediction_type=PredictionType.VIRAL_CAST, title="t" * 10,
            target_id="x", threshold=1, deadline=NOW, creator="0xc",
            status=MarketStatus.SETTLED, outcome=True,
        )
        bets = [_bet()]
        bets[0].settled, bets[0].payout = True, 100

        await SqlPoolStore().finalize_market(db, market, bets, expected_version=4)

        bet_params = db.execute.call_args_list[1][0][1]
        assert bet_params == [{"id": "BET-1", "market_id": "MKT-1", "settled": True, "payout": 100}]

    @pytest.mark.asyncio
    async def test_finalize_conflict(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        market = Market(
            id="MKT-1", prediction_type=PredictionType.VIRAL_CAST, title="t" * 10,
            target_id="x", threshold=1, deadline=NOW, creator="0xc",
        )
        with pytest.raises(StorageConflictError):
            await SqlPoolStore().finalize_market(db, market, [], expected_version=4)

    @pytest.mark.asyncio
    async def test_get_bet_maps_row(self, db):
        db.execute = AsyncMock(return_value=_result(_make_bet_row(side="NO")))

        bet = await SqlPoolStore().get_bet(db, "BET-1")

        assert bet.side is Side.NO
        assert bet.odds == Decimal("2")

    @pytest.mark.asyncio
    async def test_mark_claimed(self, db):
        db.execute = AsyncMock(return_value=_result(MagicMock()))
        assert await SqlPoolStore().mark_claimed(db, "BET-1") is True

        db.execute = AsyncMock(return_value=_result(None))
        assert await SqlPoolStore().mark_claimed(db, "BET-1") is False

    @pytest.mark.asyncio
    async def test_mark_creator_claimed_is_conditional(self, db):
        db.execute = AsyncMock(return_value=_result(MagicMock()))
        assert await SqlPoolStore().mark_creator_claimed(db, "MKT-1") is True
        sql = str(db.execute.call_args[0][0])
        assert "creator_claimed = FALSE" in sql
        assert "status <> 'ACTIVE'" in sql

        db.execute = AsyncMock(return_value=_result(None))
        assert await SqlPoolStore().mark_creator_claimed(db, "MKT-1") is False
