"""Installment sizing and schedule generation for repayment plans"""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Tuple

from payplan_gateway.domain.exceptions import InvariantViolation
from payplan_gateway.domain.models import InstallmentPreview, PaymentFrequency
from payplan_gateway.domain.rounding import INSTALLMENT_BANDS, round_up_to_band

# First installment is due one week after the plan is generated
FIRST_INSTALLMENT_LEAD_DAYS = 7


def calculate_smart_installments(
    total_amount: Decimal,
    minimum_installment: Decimal,
    target_weeks: int,
    max_installments: int,
) -> Tuple[int, Decimal]:
    """
    Pick an installment count and a rounded installment amount for a total.

    Rules:
    - Never go below the minimum installment (no $10 payments on a $5000 debt)
    - Never exceed the target period (in weeks) or the maximum installment count
    - Round the amount UP to $1 (<20), $5 (<100) or $10, so installments never under-collect

    Returns:
        (installment_count, installment_amount); count * amount >= total unless
        the maximum count clamps it, in which case the last installment absorbs the rest.

    Example:
        5000 with min 50, 12 weeks, max 52 -> ideal 100, clamped to 12
        5000 / 12 = 416.67 -> 420 -> ceil(5000 / 420) = 12 -> (12, 420)
    """
    if total_amount <= 0 or minimum_installment <= 0:
        raise InvariantViolation("Amounts reaching the installment calculator must be positive")
    if target_weeks <= 0 or max_installments <= 0:
        raise InvariantViolation("Target period and maximum installments must be positive")

    ideal_count = math.ceil(total_amount / minimum_installment)
    ideal_count = max(1, min(ideal_count, target_weeks, max_installments))

    base_amount = total_amount / ideal_count
    rounded_amount = round_up_to_band(base_amount, INSTALLMENT_BANDS)

    adjusted_count = math.ceil(total_amount / rounded_amount)
    adjusted_count = min(adjusted_count, max_installments)

    return adjusted_count, rounded_amount


def build_schedule(
    installment_count: int,
    installment_amount: Decimal,
    total_amount: Decimal,
    frequency: PaymentFrequency,
    start_date: date | None = None,
    label: str = "installment",
) -> List[InstallmentPreview]:
    """
    Build an ordered installment schedule that sums exactly to total_amount.

    Requirements:
    - First due date is start_date (default: today + 7 days)
    - Due dates step by the frequency's day increment (7 / 14 / 30)
    - Every installment but the last uses installment_amount
    - Last installment = total - sum(previous), absorbing rounding drift

    Example:
        5000 as 12 x 420 -> 11 x 420 + 380
    """
    if installment_count <= 0 or installment_amount <= 0:
        raise InvariantViolation("Schedule needs a positive installment count and amount")

    if start_date is None:
        start_date = date.today() + timedelta(days=FIRST_INSTALLMENT_LEAD_DAYS)

    interval_days = frequency.days_between_payments
    running_total = Decimal("0")
    schedule = []

    for i in range(installment_count):
        is_last = i == installment_count - 1
        amount = total_amount - running_total if is_last else installment_amount

        if amount <= 0:
            raise InvariantViolation(
                f"{installment_count} installments of {installment_amount} overshoot total {total_amount}"
            )

        schedule.append(
            InstallmentPreview(
                sequence=i + 1,
                due_date=start_date + timedelta(days=i * interval_days),
                amount=amount,
                description=f"{frequency.label} {label} {i + 1} of {installment_count}",
            )
        )
        running_total += amount

    return schedule
