"""Settlement invariant verification, run before anything is written.

INV-1: sum of bet amounts per side == the market's pools; total_volume == pools
INV-2: total_payout + house_revenue + creator_payout == yes + no + creator_stake
INV-3: rounding residue < number of winners (zero when nobody won)
INV-4: no negative payout; every winner gets at least their stake back
"""

import logging

from src.bl_common.enums import Side
from src.bl_ledger.domain.models import Bet
from src.bl_market.domain.models import Market
from src.bl_settlement.domain.models import SettlementResult

logger = logging.getLogger(__name__)


def check_pools_match_bets(market: Market, bets: list[Bet]) -> list[str]:
    violations: list[str] = []
    yes = sum(b.amount for b in bets if b.side is Side.YES)
    no = sum(b.amount for b in bets if b.side is Side.NO)
    if yes != market.yes_pool or no != market.no_pool:
        violations.append(
            f"INV-1 violated: bets yes={yes} no={no} != "
            f"pools yes={market.yes_pool} no={market.no_pool}"
        )
    if market.total_volume != market.total_pool:
        violations.append(
            f"INV-1 violated: total_volume={market.total_volume} != "
            f"yes_pool + no_pool = {market.total_pool}"
        )
    if market.yes_pool < 0 or market.no_pool < 0:
        violations.append(
            f"INV-1 violated: negative pool yes={market.yes_pool} no={market.no_pool}"
        )
    return violations


def check_conservation(result: SettlementResult, bets: list[Bet]) -> list[str]:
    violations: list[str] = []
    money_out = result.total_payout + result.house_revenue + result.creator_payout
    if money_out != result.total_in:
        violations.append(
            f"INV-2 violated: payouts({result.total_payout}) + "
            f"house({result.house_revenue}) + creator({result.creator_payout}) "
            f"= {money_out} != total_in={result.total_in}"
        )

    if result.winner_count:
        if not (0 <= result.rounding_residue < result.winner_count):
            violations.append(
                f"INV-3 violated: residue={result.rounding_residue} "
                f"winners={result.winner_count}"
            )
    elif result.rounding_residue != 0:
        violations.append(f"INV-3 violated: residue={result.rounding_residue} with no winners")

    winning_side = None if result.outcome is None else Side.from_bool(result.outcome)
    for bet in bets:
        payout = result.payouts.get(bet.id)
        if payout is None:
            violations.append(f"INV-4 violated: bet {bet.id} has no payout entry")
        elif payout < 0:
            violations.append(f"INV-4 violated: bet {bet.id} payout={payout} < 0")
        elif (winning_side is None or bet.side is winning_side) and payout < bet.amount:
            violations.append(
                f"INV-4 violated: bet {bet.id} payout={payout} < stake={bet.amount}"
            )

    for msg in violations:
        logger.error("market=%s %s", result.market_id, msg)
    if not violations:
        logger.debug(
            "Invariants OK: market=%s, in=%d, house=%d",
            result.market_id, result.total_in, result.house_revenue,
        )
    return violations
