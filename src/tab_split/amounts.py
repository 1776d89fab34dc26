"""Currency amount parsing shared by the models and the split calculator."""

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")

# Anything larger is treated like unparseable input
MAX_AMOUNT = Decimal("1000000000000")


def parse_amount(
    value: str | int | float | Decimal | None,
    limit: Decimal | None = MAX_AMOUNT,
) -> Decimal:
    """
    Coerce user input into a non-negative Decimal amount.

    Blank, non-numeric, non-finite, negative and absurdly large input
    (above limit) all become zero.
    This never raises: validation of what the user typed happens upstream.

    Args:
        value: Raw amount as typed or stored
        limit: Largest accepted amount, or None for no ceiling

    Returns:
        Amount as Decimal (>= 0)
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, float):
        # repr keeps the shortest round-tripping form (0.1 -> "0.1")
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite() or amount <= 0:
        return ZERO
    if limit is not None and amount > limit:
        return ZERO
    return amount
