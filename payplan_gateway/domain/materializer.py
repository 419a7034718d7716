"""Turn a chosen option or a custom schedule into a committed payment plan"""

from datetime import datetime, timezone
from typing import List

from payplan_gateway.domain.exceptions import InvariantViolation
from payplan_gateway.domain.fees import calculate_admin_fee
from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    PaymentFrequency,
    PaymentPlan,
    PaymentPlanOption,
    PaymentPlanType,
)


def build_reference(debt: DebtSnapshot, custom: bool = False, now: datetime | None = None) -> str:
    """PP-{debt}-{yyyyMMddHHmmss}, with a CUSTOM marker for debtor-proposed plans"""
    now = now or datetime.now(timezone.utc)
    prefix = "PP-CUSTOM" if custom else "PP"
    return f"{prefix}-{debt.debt_id.hex}-{now:%Y%m%d%H%M%S}"


def materialize_from_option(
    debt: DebtSnapshot,
    option: PaymentPlanOption,
    actor_id: str,
    now: datetime | None = None,
) -> PaymentPlan:
    """Create a plan mirroring the selected option; custom options always need manual review"""
    plan = PaymentPlan(
        debt_id=debt.debt_id,
        reference=build_reference(debt, now=now),
        type=option.type,
        frequency=option.frequency,
        start_date=option.start_date,
        installment_amount=option.installment_amount,
        installment_count=option.installment_count,
    )
    plan.set_created_by(actor_id)
    plan.apply_discount(option.discount_amount)
    plan.set_down_payment(option.down_payment_amount, option.down_payment_due_date)

    for installment in option.installment_schedule:
        plan.schedule_installment(installment.sequence, installment.due_date, installment.amount)

    if option.type == PaymentPlanType.CUSTOM:
        plan.require_manual_review()

    return plan


def materialize_custom_schedule(
    debt: DebtSnapshot,
    schedule: List[InstallmentPreview],
    fee_config: FeeConfiguration,
    actor_id: str,
    now: datetime | None = None,
) -> PaymentPlan:
    """
    Create a custom plan from an already-validated schedule.

    The admin fee is computed on the proposed total and count, then added on top
    of every installment.
    """
    if not schedule:
        raise InvariantViolation("Custom schedule cannot be empty")

    proposed_total = sum(i.amount for i in schedule)
    fee = calculate_admin_fee(proposed_total, len(schedule), fee_config)
    fee_text = f"{debt.currency} {fee:.2f}"

    adjusted = [
        InstallmentPreview(
            sequence=i.sequence,
            due_date=i.due_date,
            amount=i.amount + fee,
            description=f"Payment installment + admin fee ({fee_text})",
        )
        for i in schedule
    ]
    average = sum(i.amount for i in adjusted) / len(adjusted)

    plan = PaymentPlan(
        debt_id=debt.debt_id,
        reference=build_reference(debt, custom=True, now=now),
        type=PaymentPlanType.CUSTOM,
        frequency=PaymentFrequency.CUSTOM,
        start_date=adjusted[0].due_date,
        installment_amount=average,
        installment_count=len(adjusted),
    )
    plan.set_created_by(actor_id)
    plan.require_manual_review()

    for installment in adjusted:
        plan.schedule_installment(installment.sequence, installment.due_date, installment.amount)

    plan.append_note(
        f"Custom payment plan with {len(schedule)} installments. Admin fee per installment: {fee_text}"
    )
    return plan
