"""Integer arithmetic utilities for USDC micro-unit amounts.

All stakes, pools and payouts use int micro-units (6 decimals, matching USDC).
No float anywhere in the money path; Decimal only at the parsing edge.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

MICRO_PER_USDC = 1_000_000
BPS_DENOMINATOR = 10_000


def usdc_to_micro(value: str | int | Decimal) -> int:
    """Convert a USDC amount ("12.34", 12, Decimal) to micro-units.

    Digits beyond the 6th decimal are truncated, never rounded up.
    """
    try:
        dec = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal amount: {value!r}") from e
    if not dec.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return int((dec * MICRO_PER_USDC).to_integral_value(rounding=ROUND_DOWN))


def micro_to_display(micro: int) -> str:
    """Convert micro-units to display string: 148_500_000 -> '$148.50'.

    Sub-cent digits are truncated.
    """
    sign = "-" if micro < 0 else ""
    cents = abs(micro) // 10_000
    return f"{sign}${cents // 100:,}.{cents % 100:02d}"


def bps_ceil(amount: int, rate_bps: int) -> int:
    """amount * rate_bps / 10000, ceiling (platform never under-collects).

    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or rate_bps == 0:
        return 0
    return (amount * rate_bps + BPS_DENOMINATOR - 1) // BPS_DENOMINATOR


def bps_floor(amount: int, rate_bps: int) -> int:
    """amount * rate_bps / 10000, floor (never over-pays)."""
    return amount * rate_bps // BPS_DENOMINATOR
