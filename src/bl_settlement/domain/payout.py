"""Pari-mutuel payout computation — pure integer arithmetic.

Normal settlement:
    house_cut     = ceil(losing_pool * house_edge_bps / 10000)
    distributable = losing_pool - house_cut
    share(bet)    = floor(bet.amount * distributable / winning_pool)
    payout(bet)   = bet.amount + share(bet)          (winners)
                  = 0                                (losers)

Floor division leaves a residue of less than one micro-unit per winner; it
accrues to the house. With no winners the whole losing pool goes to the house.

The creator reward is paid out of the house cut, so it never touches the
bettors' distributable pool.
"""

from src.bl_common.amounts import bps_ceil, bps_floor
from src.bl_common.enums import CreatorDecision, Side
from src.bl_ledger.domain.models import Bet
from src.bl_market.domain.models import Market
from src.bl_settlement.domain.models import SettlementPolicy, SettlementResult


def _creator_split(
    market: Market,
    house_cut: int,
    policy: SettlementPolicy,
    decision: CreatorDecision,
) -> tuple[int, int, int]:
    """Return (stake_returned, reward, forfeited) for the creator stake."""
    stake = market.creator_stake
    if stake == 0:
        return 0, 0, 0
    if decision is CreatorDecision.FORFEIT:
        return 0, 0, stake
    if market.total_volume > policy.creator_min_volume:
        reward = min(bps_floor(market.total_volume, policy.creator_reward_bps), house_cut)
        return stake, reward, 0
    # No or too little activity: stake comes back, nothing earned
    return stake, 0, 0


def compute_settlement(
    market: Market,
    bets: list[Bet],
    outcome: bool,
    policy: SettlementPolicy,
    creator_decision: CreatorDecision = CreatorDecision.REWARD,
) -> SettlementResult:
    winning_side = Side.from_bool(outcome)
    winning_pool = market.pool_for(winning_side)
    losing_pool = market.total_pool - winning_pool

    house_cut = bps_ceil(losing_pool, policy.house_edge_bps)
    distributable = losing_pool - house_cut

    payouts: dict[str, int] = {}
    winner_count = 0
    shares_paid = 0
    for bet in bets:
        if bet.side is winning_side:
            share = bet.amount * distributable // winning_pool
            payouts[bet.id] = bet.amount + share
            shares_paid += share
            winner_count += 1
        else:
            payouts[bet.id] = 0

    if winner_count:
        residue = distributable - shares_paid
        unclaimed = 0
    else:
        residue = 0
        unclaimed = distributable

    stake_returned, reward, forfeited = _creator_split(
        market, house_cut, policy, creator_decision
    )

    return SettlementResult(
        market_id=market.id,
        outcome=outcome,
        yes_pool=market.yes_pool,
        no_pool=market.no_pool,
        creator_stake=market.creator_stake,
        payouts=payouts,
        winner_count=winner_count,
        winning_pool=winning_pool,
        losing_pool=losing_pool,
        house_cut=house_cut,
        distributable=distributable,
        rounding_residue=residue,
        unclaimed_pool=unclaimed,
        creator_stake_returned=stake_returned,
        creator_reward=reward,
        forfeited_stake=forfeited,
        house_revenue=house_cut - reward + residue + unclaimed + forfeited,
    )


def compute_refunds(market: Market, bets: list[Bet]) -> SettlementResult:
    """Cancellation: every bet gets its amount back, no edge, creator stake returned."""
    return SettlementResult(
        market_id=market.id,
        outcome=None,
        yes_pool=market.yes_pool,
        no_pool=market.no_pool,
        creator_stake=market.creator_stake,
        payouts={bet.id: bet.amount for bet in bets},
        creator_stake_returned=market.creator_stake,
    )
