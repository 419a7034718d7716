"""Validation of debtor-proposed custom repayment schedules"""

from collections import Counter
from decimal import Decimal
from typing import List

from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    ScheduleValidationResult,
)

# Heuristic policy constants
COVERAGE_TOLERANCE = Decimal("0.01")
MAX_AMOUNT_DEVIATION_RATIO = Decimal("0.5")
SMALL_INSTALLMENT_AMOUNT = Decimal("25")
MIN_AVERAGE_INTERVAL_DAYS = 5
MAX_INTERVAL_DEVIATION_DAYS = 14
MAX_INSTALLMENTS = 52
MAX_PLAN_SPAN_DAYS = 365
OUTLIER_RATIO = 2


def validate_custom_schedule(
    debt: DebtSnapshot,
    schedule: List[InstallmentPreview],
    fee_config: FeeConfiguration,
) -> ScheduleValidationResult:
    """
    Check a proposed schedule against coverage, distribution, frequency and reasonableness rules.

    Checks never short-circuit. Errors make the schedule invalid; warnings and
    unusual amount patterns only send it to manual review.
    """
    result = ScheduleValidationResult()

    _check_coverage(debt, schedule, result)
    _check_distribution(debt, schedule, result)
    _check_frequency(schedule, result)
    _check_reasonableness(schedule, result)
    _check_organization_policy(debt, schedule, fee_config, result)

    result.is_valid = not result.errors
    result.requires_manual_review = bool(result.warnings) or detect_unusual_pattern(schedule)
    result.recommendation = _build_recommendation(debt, schedule, result)
    return result


def _check_coverage(debt: DebtSnapshot, schedule: List[InstallmentPreview], result: ScheduleValidationResult) -> None:
    total = sum((i.amount for i in schedule), Decimal("0"))
    shortfall = debt.outstanding_principal - total
    currency = debt.currency

    if shortfall > COVERAGE_TOLERANCE:
        result.errors.append(
            f"Schedule total ({currency} {total:,.2f}) does not cover full debt amount "
            f"({currency} {debt.outstanding_principal:,.2f}). Shortfall: {currency} {shortfall:,.2f}"
        )
    elif shortfall < -COVERAGE_TOLERANCE:
        result.warnings.append(
            f"Schedule total ({currency} {total:,.2f}) exceeds debt amount "
            f"({currency} {debt.outstanding_principal:,.2f}). Overpayment: {currency} {abs(shortfall):,.2f}"
        )


def _check_distribution(debt: DebtSnapshot, schedule: List[InstallmentPreview], result: ScheduleValidationResult) -> None:
    if len(schedule) < 2:
        return

    amounts = [i.amount for i in schedule]
    average = sum(amounts) / len(amounts)
    max_deviation = max(abs(a - average) for a in amounts)

    if max_deviation > average * MAX_AMOUNT_DEVIATION_RATIO:
        result.warnings.append(
            "Installment amounts vary significantly. Consider more consistent payment amounts for better budgeting."
        )

    tiny_count = sum(1 for a in amounts if a < SMALL_INSTALLMENT_AMOUNT)
    if tiny_count:
        result.warnings.append(
            f"{tiny_count} installment(s) are very small (< {debt.currency} {SMALL_INSTALLMENT_AMOUNT}). "
            f"Consider consolidating for efficiency."
        )


def _check_frequency(schedule: List[InstallmentPreview], result: ScheduleValidationResult) -> None:
    if len(schedule) < 2:
        return

    intervals = [(b.due_date - a.due_date).days for a, b in zip(schedule, schedule[1:])]
    average = sum(intervals) / len(intervals)

    if average < MIN_AVERAGE_INTERVAL_DAYS:
        result.warnings.append("Payments are very frequent. This may be difficult to maintain.")

    if max(abs(i - average) for i in intervals) > MAX_INTERVAL_DEVIATION_DAYS:
        result.warnings.append(
            "Payment intervals vary significantly. Regular intervals improve payment discipline."
        )


def _check_reasonableness(schedule: List[InstallmentPreview], result: ScheduleValidationResult) -> None:
    if len(schedule) > MAX_INSTALLMENTS:
        result.errors.append(
            f"Payment plan exceeds {MAX_INSTALLMENTS} installments (1 year). Please reduce the number of payments."
        )

    if len(schedule) >= 2:
        span_days = (schedule[-1].due_date - schedule[0].due_date).days
        if span_days > MAX_PLAN_SPAN_DAYS:
            result.warnings.append(
                f"Payment plan spans {span_days / 30:.0f} months. Longer plans increase the risk of non-completion."
            )


def _check_organization_policy(
    debt: DebtSnapshot,
    schedule: List[InstallmentPreview],
    fee_config: FeeConfiguration,
    result: ScheduleValidationResult,
) -> None:
    if len(schedule) > fee_config.maximum_installment_count:
        result.warnings.append(
            f"Payment plan has more than the organization's maximum of "
            f"{fee_config.maximum_installment_count} installments."
        )

    floor = fee_config.minimum_installment_amount / 2
    below_floor = sum(1 for i in schedule if i.amount < floor)
    if below_floor:
        result.warnings.append(
            f"{below_floor} installment(s) are below the recommended minimum of {debt.currency} {floor:,.2f}."
        )


def detect_unusual_pattern(schedule: List[InstallmentPreview]) -> bool:
    """
    Flag one wildly different installment among otherwise identical ones.

    Fires only for 3+ installments with exactly two distinct amounts, where one amount
    appears once and differs from the other by more than twice the other amount.
    """
    if len(schedule) < 3:
        return False

    counts = Counter(i.amount for i in schedule)
    if len(counts) != 2:
        return False

    (single, single_count), (common, _) = sorted(counts.items(), key=lambda kv: kv[1])
    return single_count == 1 and abs(single - common) > common * OUTLIER_RATIO


def _build_recommendation(
    debt: DebtSnapshot,
    schedule: List[InstallmentPreview],
    result: ScheduleValidationResult,
) -> str:
    if not result.is_valid:
        return "Please address the errors before submitting this payment plan."

    if result.requires_manual_review:
        return (
            "This schedule will be reviewed by an administrator. "
            "Consider using the system-generated plan for faster approval."
        )

    average = sum(i.amount for i in schedule) / len(schedule)
    return (
        f"Your custom schedule of {len(schedule)} payments averaging {debt.currency} {average:,.0f} "
        f"looks reasonable and will be submitted for approval."
    )
