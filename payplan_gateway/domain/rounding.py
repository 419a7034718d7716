"""Round-up price bands used for installment and fee amounts"""

from decimal import Decimal, ROUND_CEILING
from typing import Optional, Sequence, Tuple

# (upper bound exclusive, granularity) evaluated in ascending order; None = no upper bound
Band = Tuple[Optional[Decimal], Decimal]

# Smart installment bands: <20 -> $1, <100 -> $5, else $10
INSTALLMENT_BANDS: Sequence[Band] = (
    (Decimal("20"), Decimal("1")),
    (Decimal("100"), Decimal("5")),
    (None, Decimal("10")),
)

# Admin fee bands: <5 -> $1, else $5
FEE_BANDS: Sequence[Band] = (
    (Decimal("5"), Decimal("1")),
    (None, Decimal("5")),
)

# Psychological price points used by the optimizer
PRICE_POINT_BANDS: Sequence[Band] = (
    (Decimal("50"), Decimal("5")),
    (Decimal("100"), Decimal("10")),
    (Decimal("500"), Decimal("25")),
    (Decimal("1000"), Decimal("50")),
    (None, Decimal("100")),
)


def ceil_to(amount: Decimal, granularity: Decimal) -> Decimal:
    """Round amount up to the next multiple of granularity"""
    return (amount / granularity).to_integral_value(rounding=ROUND_CEILING) * granularity


def round_up_to_band(amount: Decimal, bands: Sequence[Band]) -> Decimal:
    """
    Round amount up using the granularity of the first band whose upper bound exceeds it.

    Example:
        round_up_to_band(Decimal("416.67"), INSTALLMENT_BANDS) -> 420
        round_up_to_band(Decimal("42.10"), INSTALLMENT_BANDS) -> 45
    """
    for upper_bound, granularity in bands:
        if upper_bound is None or amount < upper_bound:
            return ceil_to(amount, granularity)
    # Tables always end with an unbounded band
    raise ValueError("Band table has no unbounded entry")
