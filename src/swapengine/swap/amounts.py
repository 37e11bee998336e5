"""Amount conversion and slippage helpers shared by all strategies."""

from decimal import Decimal, InvalidOperation, ROUND_DOWN

from swapengine.exceptions import InvalidSwapParamsError

BPS_DENOMINATOR = 10_000


def parse_amount(amount: str, decimals: int) -> int:
    """Convert a human-readable amount into integer base units (rounding down)."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidSwapParamsError(f"Invalid amount: {amount}")
    if not value.is_finite() or value < 0:
        raise InvalidSwapParamsError(f"Invalid amount: {amount}")
    return int((value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN))


def format_amount(amount: int, decimals: int) -> Decimal:
    """Convert integer base units into a human-readable Decimal."""
    return Decimal(amount) / (Decimal(10) ** decimals)


def calculate_min_amount_out(expected: int, slippage_bps: int) -> int:
    """Apply slippage tolerance to an expected output.

    floor = expected * (10000 - bps) // 10000, so the floor never exceeds
    the expected amount and equals it at 0 bps.
    """
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise ValueError(f"Slippage must be between 0 and {BPS_DENOMINATOR} bps, got {slippage_bps}")
    if expected < 0:
        raise ValueError(f"Expected amount must be non-negative, got {expected}")
    return expected * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def bps_to_fraction(slippage_bps: int) -> Decimal:
    """50 bps -> Decimal('0.005')."""
    return Decimal(slippage_bps) / Decimal(BPS_DENOMINATOR)


def price_impact_percent(expected_out: Decimal, amount_in: Decimal, reference_rate: Decimal) -> Decimal:
    """Shortfall of the realised rate against a one-unit reference rate, in percent.

    Never negative; zero when there is no reference rate.
    """
    if reference_rate <= 0 or amount_in <= 0:
        return Decimal("0")
    actual_rate = expected_out / amount_in
    return max(Decimal("0"), (reference_rate - actual_rate) / reference_rate * 100)
