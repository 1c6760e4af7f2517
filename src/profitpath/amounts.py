"""Conversion between human-readable amounts and minimal units.

Minimal units are integer token amounts scaled by 10**decimals and are
always passed to the aggregator as decimal strings.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from profitpath.errors import ValidationError

# Upstream convention for price-only quotes: one minimal unit. Callers opt
# in with price_probe=True; executable amounts never fall back to it.
PRICE_PROBE_AMOUNT = "1"

# Largest on-chain amount (uint256) has 78 digits
MAX_UNIT_DIGITS = 78

AmountLike = Union[str, int, Decimal]


def parse_amount(amount: AmountLike) -> Decimal:
    """Parse a non-negative decimal amount without going through float."""
    if isinstance(amount, float):
        raise ValidationError("Amounts must be passed as strings, not floats")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValidationError(f"Amount must not be negative: {amount!r}")
    return value


def to_minimal_units(
    amount: Optional[AmountLike],
    decimals: int,
    price_probe: bool = False,
) -> str:
    """Convert a decimal amount into an integer minimal-unit string.

    Digits beyond the token's precision are truncated toward zero so the
    request never exceeds what the user entered.

    Args:
        amount: Human-readable amount, e.g. "1.5"
        decimals: Token decimal count
        price_probe: Caller only wants a price; absent or zero amounts
            become PRICE_PROBE_AMOUNT

    Returns:
        Minimal units as a decimal string, e.g. "1500000" for ("1.5", 6)

    Raises:
        ValidationError: On malformed, negative, oversized or (for execution) zero amounts
    """
    if decimals < 0:
        raise ValidationError(f"Decimals must be non-negative: {decimals}")

    if amount is None or str(amount).strip() == "":
        if price_probe:
            return PRICE_PROBE_AMOUNT
        raise ValidationError("Amount is required")

    value = parse_amount(amount)
    if value == 0:
        if price_probe:
            return PRICE_PROBE_AMOUNT
        raise ValidationError("Amount must be greater than zero")

    if value.adjusted() + decimals + 1 > MAX_UNIT_DIGITS:
        raise ValidationError(
            f"Amount is too large: more than {MAX_UNIT_DIGITS} digits in minimal units"
        )

    with localcontext() as ctx:
        # Enough precision to hold every integer digit exactly
        ctx.prec = max(28, value.adjusted() + decimals + 10)
        scaled = value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_DOWN)

    if scaled == 0:
        if price_probe:
            return PRICE_PROBE_AMOUNT
        raise ValidationError(
            f"Amount {amount} is below the smallest unit of a {decimals}-decimal token"
        )
    return str(int(scaled))


def from_minimal_units(value: AmountLike, decimals: int) -> Decimal:
    """Convert a minimal-unit integer back to a human-readable Decimal."""
    units = parse_amount(value)
    with localcontext() as ctx:
        ctx.prec = max(28, units.adjusted() + decimals + 10)
        return units.scaleb(-decimals)
