"""Builders for the three payment plan options offered on a debt"""

from datetime import date, timedelta
from decimal import Decimal

from payplan_gateway.domain.fees import calculate_discount
from payplan_gateway.domain.installments import FIRST_INSTALLMENT_LEAD_DAYS
from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    PaymentFrequency,
    PaymentPlanOption,
    PaymentPlanType,
    ScheduleRecommendation,
)


def _percent(value: Decimal) -> str:
    return f"{value.normalize():f}"


def _saving(debt: DebtSnapshot, discount: Decimal, percentage: Decimal) -> str:
    return f"Save {debt.currency} {discount:.2f} ({_percent(percentage)}% discount)"


def full_settlement_option(
    debt: DebtSnapshot,
    fee_config: FeeConfiguration,
    today: date | None = None,
) -> PaymentPlanOption:
    """Single payment due tomorrow with the full-payment discount"""
    today = today or date.today()
    percentage = fee_config.full_payment_discount_percentage
    discount = calculate_discount(debt.outstanding_principal, percentage)
    total = debt.outstanding_principal - discount

    return PaymentPlanOption(
        type=PaymentPlanType.FULL_SETTLEMENT,
        title="Pay in Full with Discount",
        description="Pay the entire debt now and receive maximum discount",
        original_amount=debt.outstanding_principal,
        total_amount=total,
        discount_amount=discount,
        discount_percentage=percentage,
        frequency=PaymentFrequency.ONE_OFF,
        installment_count=1,
        installment_amount=total,
        start_date=today,
        end_date=today,
        installment_schedule=[
            InstallmentPreview(
                sequence=1,
                due_date=today + timedelta(days=1),
                amount=total,
                description="Full payment (one-time)",
            )
        ],
        benefits=[
            _saving(debt, discount, percentage),
            "Debt settled immediately",
            "No ongoing payments or fees",
            "Best value option",
        ],
        is_recommended=True,
        requires_approval=False,
    )


def system_plan_discount(debt: DebtSnapshot, fee_config: FeeConfiguration) -> tuple[Decimal, Decimal]:
    """(discount, amount left to schedule) for the system-generated plan"""
    discount = calculate_discount(debt.outstanding_principal, fee_config.system_plan_discount_percentage)
    return discount, debt.outstanding_principal - discount


def system_generated_option(
    debt: DebtSnapshot,
    fee_config: FeeConfiguration,
    recommendation: ScheduleRecommendation,
    source: str,
) -> PaymentPlanOption:
    """
    System plan from either a trusted scoring recommendation or the weekly rules plan.

    The schedule is taken verbatim; total is what the schedule collects.
    """
    percentage = fee_config.system_plan_discount_percentage
    discount, _ = system_plan_discount(debt, fee_config)
    schedule = recommendation.schedule
    total = sum((i.amount for i in schedule), Decimal("0"))
    saving = _saving(debt, discount, percentage)

    if source == "scoring":
        title = "AI-Optimized Payment Plan"
        description = recommendation.rationale
        is_recommended = True
        benefits = [
            saving,
            "AI-optimized for your situation",
            "Automatic payment reminders",
            recommendation.rationale,
        ]
    else:
        title = "Weekly Payment Plan"
        description = "Automated weekly installments with partial discount"
        is_recommended = False
        benefits = [
            saving,
            f"Manageable weekly payments of ~{debt.currency} {recommendation.installment_amount:.2f}",
            "Automatic payment reminders",
            f"Fixed schedule over {recommendation.installment_count} weeks",
        ]

    return PaymentPlanOption(
        type=PaymentPlanType.SYSTEM_GENERATED,
        title=title,
        description=description,
        original_amount=debt.outstanding_principal,
        total_amount=total,
        discount_amount=discount,
        discount_percentage=percentage,
        frequency=recommendation.recommended_frequency,
        installment_count=recommendation.installment_count,
        installment_amount=recommendation.installment_amount,
        start_date=schedule[0].due_date,
        end_date=schedule[-1].due_date,
        installment_schedule=list(schedule),
        benefits=benefits,
        is_recommended=is_recommended,
        requires_approval=False,
    )


def custom_template_option(
    debt: DebtSnapshot,
    fee_config: FeeConfiguration,
    today: date | None = None,
) -> PaymentPlanOption:
    """Empty placeholder inviting the debtor to propose a schedule"""
    today = today or date.today()

    return PaymentPlanOption(
        type=PaymentPlanType.CUSTOM,
        title="Custom Payment Schedule",
        description="Propose your own payment dates and amounts",
        original_amount=debt.outstanding_principal,
        total_amount=debt.outstanding_principal,
        admin_fee=fee_config.custom_plan_admin_fee_flat,
        frequency=PaymentFrequency.CUSTOM,
        installment_count=0,
        installment_amount=Decimal("0"),
        start_date=today + timedelta(days=FIRST_INSTALLMENT_LEAD_DAYS),
        installment_schedule=[],
        benefits=[
            "Flexible payment schedule",
            "Pay according to your cash flow",
            "Subject to admin approval",
        ],
        is_recommended=False,
        requires_approval=True,
    )
