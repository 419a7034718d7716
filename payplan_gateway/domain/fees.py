"""Discount and admin fee calculations"""

from decimal import Decimal, ROUND_HALF_UP

from payplan_gateway.domain.exceptions import InvariantViolation
from payplan_gateway.domain.models import CENT, FeeConfiguration
from payplan_gateway.domain.rounding import FEE_BANDS, round_up_to_band

MINIMUM_FEE_PER_INSTALLMENT = Decimal("1")


def calculate_discount(principal: Decimal, percentage: Decimal) -> Decimal:
    """Discount on principal, rounded to the cent"""
    return (principal * percentage / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_admin_fee(
    total_amount: Decimal,
    installment_count: int,
    fee_config: FeeConfiguration,
) -> Decimal:
    """
    Admin fee charged on each installment of a custom plan.

    total fee = flat fee + total * percentage / 100, spread evenly over the installments,
    then kept from being silly: at least $1, rounded up to $1 below $5 and to $5 above.

    Example:
        flat 25 + 2% of 1000 = 45 over 4 installments -> 11.25 -> 15
    """
    if installment_count <= 0:
        raise InvariantViolation("Installment count must be positive")

    total_fee = fee_config.custom_plan_admin_fee_flat + total_amount * (
        fee_config.custom_plan_admin_fee_percentage / Decimal("100")
    )
    fee_per_installment = total_fee / installment_count

    if fee_per_installment < MINIMUM_FEE_PER_INSTALLMENT:
        return MINIMUM_FEE_PER_INSTALLMENT

    return round_up_to_band(fee_per_installment, FEE_BANDS)
