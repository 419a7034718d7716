"""Deterministic schedule optimizer - fallback for, and local stand-in of, the scoring service"""

import logging
import math
from datetime import date
from decimal import Decimal
from typing import List

from payplan_gateway.domain.installments import build_schedule, calculate_smart_installments
from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    PaymentFrequency,
    ScheduleRecommendation,
    ScheduleValidationResult,
)
from payplan_gateway.domain.rounding import PRICE_POINT_BANDS, round_up_to_band
from payplan_gateway.domain.validation import validate_custom_schedule

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = Decimal("0.85")

FREQUENCY_REASONS = {
    PaymentFrequency.WEEKLY: "weekly payments help maintain payment discipline and reduce overall debt faster",
    PaymentFrequency.FORTNIGHTLY: "fortnightly payments align with typical pay cycles while providing flexibility",
    PaymentFrequency.MONTHLY: "monthly payments are manageable and predictable for budgeting",
}


def determine_frequency(debt_size: Decimal) -> PaymentFrequency:
    """Smaller debts are paid monthly, mid-size fortnightly, large ones weekly"""
    if debt_size < 1000:
        return PaymentFrequency.MONTHLY
    elif debt_size < 5000:
        return PaymentFrequency.FORTNIGHTLY
    else:
        return PaymentFrequency.WEEKLY


def calculate_optimal_installments(
    total_amount: Decimal,
    minimum_installment: Decimal,
    target_weeks: int,
    frequency: PaymentFrequency,
) -> tuple[int, Decimal]:
    """
    Size installments to psychological price points for the given frequency.

    Example:
        2000 fortnightly over 12 weeks -> 6 payments, 333.33 -> 350 -> ceil(2000 / 350) = 6
    """
    max_installments = max(1, target_weeks // frequency.weeks_per_payment)
    base_installment = total_amount / max_installments

    rounded_amount = round_up_to_band(base_installment, PRICE_POINT_BANDS)
    rounded_amount = max(rounded_amount, minimum_installment)

    return math.ceil(total_amount / rounded_amount), rounded_amount


def calculate_confidence_score(installment_count: int, installment_amount: Decimal) -> Decimal:
    """
    How well a plan matches preferred parameters.

    - Base 0.85
    - +0.10 for 4 to 26 installments
    - +0.05 for amounts on a $5 price point
    """
    score = BASE_CONFIDENCE
    if 4 <= installment_count <= 26:
        score += Decimal("0.10")
    if installment_amount % 5 == 0:
        score += Decimal("0.05")
    return min(score, Decimal("1.0"))


def build_rationale(
    debt_size: Decimal,
    currency: str,
    frequency: PaymentFrequency,
    installment_count: int,
    installment_amount: Decimal,
) -> str:
    reason = FREQUENCY_REASONS.get(frequency, "this is an optimal payment schedule")
    return (
        f"Based on analysis of your {currency} {debt_size:,.0f} debt, {reason}. "
        f"The recommended {installment_count} payments of {currency} {installment_amount:,.0f} "
        f"balance affordability with timely debt resolution."
    )


def rules_based_recommendation(
    total_amount: Decimal,
    fee_config: FeeConfiguration,
    start_date: date | None = None,
) -> ScheduleRecommendation:
    """
    Weekly plan used whenever the scoring service cannot be trusted.

    Installments come from the smart installment calculator, so the schedule honours
    the organization's minimum installment, period and maximum count and sums to total_amount.
    """
    installment_count, installment_amount = calculate_smart_installments(
        total_amount,
        fee_config.minimum_installment_amount,
        fee_config.default_installment_period_weeks,
        fee_config.maximum_installment_count,
    )
    schedule = build_schedule(
        installment_count,
        installment_amount,
        total_amount,
        PaymentFrequency.WEEKLY,
        start_date=start_date,
    )

    return ScheduleRecommendation(
        recommended_frequency=PaymentFrequency.WEEKLY,
        installment_count=installment_count,
        installment_amount=installment_amount,
        schedule=schedule,
        rationale="Automated weekly installments with partial discount",
        confidence_score=calculate_confidence_score(installment_count, installment_amount),
    )


class RulesBasedOptimizer:
    """
    In-process implementation of the scoring service contract.

    Used when no remote scoring service is configured, and as the reference the
    remote service is expected to match.
    """

    def recommend(
        self,
        debt: DebtSnapshot,
        target_weeks: int,
        minimum_installment: Decimal,
        start_date: date | None = None,
    ) -> ScheduleRecommendation:
        debt_size = debt.outstanding_principal
        frequency = determine_frequency(debt_size)
        installment_count, installment_amount = calculate_optimal_installments(
            debt_size, minimum_installment, target_weeks, frequency
        )
        schedule = build_schedule(
            installment_count,
            installment_amount,
            debt_size,
            frequency,
            start_date=start_date,
            label="payment",
        )

        recommendation = ScheduleRecommendation(
            recommended_frequency=frequency,
            installment_count=installment_count,
            installment_amount=installment_amount,
            schedule=schedule,
            rationale=build_rationale(debt_size, debt.currency, frequency, installment_count, installment_amount),
            confidence_score=calculate_confidence_score(installment_count, installment_amount),
        )

        logger.info(
            "Optimizer recommendation built",
            extra={
                "debt_id": str(debt.debt_id),
                "frequency": frequency.value,
                "installment_count": installment_count,
                "confidence": float(recommendation.confidence_score),
            },
        )
        return recommendation

    async def optimize_schedule(
        self,
        debt: DebtSnapshot,
        target_weeks: int,
        minimum_installment: Decimal,
        start_date: date | None = None,
    ) -> ScheduleRecommendation:
        return self.recommend(debt, target_weeks, minimum_installment, start_date=start_date)

    async def validate_proposed_schedule(
        self,
        debt: DebtSnapshot,
        schedule: List[InstallmentPreview],
        fee_config: FeeConfiguration,
    ) -> ScheduleValidationResult:
        return validate_custom_schedule(debt, schedule, fee_config)
