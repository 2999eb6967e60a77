"""InMemoryPoolStore: copy semantics and version compare-and-swap."""

from dataclasses import replace
from decimal import Decimal

import pytest

from src.bl_common.enums import MarketStatus, Side
from src.bl_common.errors import InvalidAmountError, MarketNotFoundError, StorageConflictError
from src.bl_ledger.domain.models import Bet


def _bet(clock, bet_id: str = "b1", amount: int = 10, side: Side = Side.YES) -> Bet:
    return Bet(
        id=bet_id, market_id="mkt-1", bettor="0xalice", side=side,
        amount=amount, odds=Decimal("2.0"), timestamp=clock(),
    )


class TestMarkets:
    @pytest.mark.asyncio
    async def test_returned_market_is_a_copy(self, store, db, make_market) -> None:
        market = await make_market()
        market.yes_pool = 999
        assert (await store.get_market(db, "mkt-1")).yes_pool == 0

    @pytest.mark.asyncio
    async def test_duplicate_id(self, store, db, make_market) -> None:
        market = await make_market()
        with pytest.raises(ValueError, match="Duplicate"):
            await store.create_market(db, market)

    @pytest.mark.asyncio
    async def test_list_filters_status(self, store, db, make_market) -> None:
        await make_market("a")
        await make_market("b", status=MarketStatus.CANCELLED)
        active = await store.list_markets(db, MarketStatus.ACTIVE, None, 10)
        assert [m.id for m in active] == ["a"]


class TestAppendBet:
    @pytest.mark.asyncio
    async def test_bumps_version_and_pools(self, store, db, clock, make_market) -> None:
        await make_market()
        market = await store.append_bet(db, _bet(clock, amount=25, side=Side.NO), 0)
        assert (market.no_pool, market.total_volume, market.bet_count, market.version) == (
            25, 25, 1, 1,
        )

    @pytest.mark.asyncio
    async def test_stale_version(self, store, db, clock, make_market) -> None:
        await make_market()
        await store.append_bet(db, _bet(clock, "b1"), 0)
        with pytest.raises(StorageConflictError):
            await store.append_bet(db, _bet(clock, "b2"), 0)
        assert len(await store.list_bets(db, "mkt-1")) == 1

    @pytest.mark.asyncio
    async def test_refuses_inactive_market(self, store, db, clock, make_market) -> None:
        await make_market(status=MarketStatus.SETTLED)
        with pytest.raises(StorageConflictError):
            await store.append_bet(db, _bet(clock), 0)

    @pytest.mark.asyncio
    async def test_unknown_market(self, store, db, clock) -> None:
        with pytest.raises(MarketNotFoundError):
            await store.append_bet(db, _bet(clock), 0)

    @pytest.mark.asyncio
    async def test_zero_amount(self, store, db, clock, make_market) -> None:
        await make_market()
        with pytest.raises(InvalidAmountError):
            await store.append_bet(db, _bet(clock, amount=0), 0)


class TestFinalizeAndClaim:
    @pytest.mark.asyncio
    async def test_finalize_then_claim_once(self, store, db, clock, make_market) -> None:
        await make_market()
        market = await store.append_bet(db, _bet(clock), 0)
        bet = await store.get_bet(db, "b1")
        assert await store.mark_claimed(db, "b1") is False  # not settled yet

        await store.finalize_market(
            db,
            replace(market, status=MarketStatus.SETTLED, outcome=True),
            [replace(bet, settled=True, payout=10)],
            expected_version=market.version,
        )

        assert (await store.get_market(db, "mkt-1")).version == market.version + 1
        assert await store.mark_claimed(db, "b1") is True
        assert await store.mark_claimed(db, "b1") is False
        assert (await store.get_bet(db, "b1")).claimed

    @pytest.mark.asyncio
    async def test_finalize_stale_version(self, store, db, clock, make_market) -> None:
        market = await make_market()
        await store.append_bet(db, _bet(clock), 0)
        with pytest.raises(StorageConflictError):
            await store.finalize_market(db, market, [], expected_version=0)

    @pytest.mark.asyncio
    async def test_finalize_rejects_foreign_bets(self, store, db, clock, make_market) -> None:
        market = await make_market()
        stray = replace(_bet(clock), id="other")
        with pytest.raises(ValueError, match="do not belong"):
            await store.finalize_market(db, market, [stray], expected_version=0)

    @pytest.mark.asyncio
    async def test_creator_claim_needs_closed_market_with_payout(
        self, store, db, make_market
    ) -> None:
        market = await make_market(creator_stake=5)
        assert await store.mark_creator_claimed(db, "mkt-1") is False  # still active

        await store.finalize_market(
            db,
            replace(market, status=MarketStatus.CANCELLED, creator_payout=5),
            [],
            expected_version=market.version,
        )

        assert await store.mark_creator_claimed(db, "mkt-1") is True
        assert await store.mark_creator_claimed(db, "mkt-1") is False
        assert (await store.get_market(db, "mkt-1")).creator_claimed is True
        assert await store.mark_creator_claimed(db, "mkt-404") is False
