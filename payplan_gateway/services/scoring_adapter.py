"""Confidence-gated access to the scoring service with rules-based fallback"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol

from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    ScheduleRecommendation,
    ScheduleValidationResult,
)
from payplan_gateway.domain.optimizer import rules_based_recommendation
from payplan_gateway.domain.validation import validate_custom_schedule
from payplan_gateway.infrastructure.observability.metrics import scoring_fallback_counter

logger = logging.getLogger(__name__)

# Recommendations at or below this confidence are discarded
CONFIDENCE_THRESHOLD = Decimal("0.70")


class ScheduleOptimizer(Protocol):
    """Contract of the scoring collaborator"""

    async def optimize_schedule(
        self,
        debt: DebtSnapshot,
        target_weeks: int,
        minimum_installment: Decimal,
        start_date: date | None = None,
    ) -> ScheduleRecommendation: ...

    async def validate_proposed_schedule(
        self,
        debt: DebtSnapshot,
        schedule: List[InstallmentPreview],
        fee_config: FeeConfiguration,
    ) -> ScheduleValidationResult: ...


@dataclass
class ScoringOutcome:
    """Result of the single scoring call: a recommendation, an error, or neither (no optimizer)"""

    recommendation: Optional[ScheduleRecommendation] = None
    error: Optional[Exception] = None

    @property
    def confidence(self) -> Decimal:
        if self.error is not None or self.recommendation is None:
            return Decimal("0")
        # An empty schedule cannot back an option, whatever the score
        if not self.recommendation.schedule:
            return Decimal("0")
        score = self.recommendation.confidence_score
        # NaN, infinities and out-of-range scores are not a confidence
        if not score.is_finite() or not Decimal("0") <= score <= Decimal("1"):
            return Decimal("0")
        return score

    @property
    def fallback_reason(self) -> Optional[str]:
        if self.error is not None:
            return "error"
        if self.recommendation is None:
            return "unavailable"
        if self.confidence <= CONFIDENCE_THRESHOLD:
            return "low_confidence"
        return None


@dataclass
class SystemPlanDecision:
    """Recommendation chosen for the system-generated option and where it came from"""

    recommendation: ScheduleRecommendation
    source: str  # scoring | rules


class ScoringAdapter:
    """
    Wraps an optional scoring collaborator.

    Decision policy, in order:
    1. Any failure of the call counts as confidence 0 and is only logged
    2. Confidence > 0.70: the recommendation is used verbatim
    3. Otherwise the deterministic weekly rules plan is used

    Exactly one call per request; no retries or backoff.
    """

    def __init__(self, optimizer: Optional[ScheduleOptimizer] = None):
        self.optimizer = optimizer

    async def score(
        self,
        debt: DebtSnapshot,
        fee_config: FeeConfiguration,
        start_date: date | None = None,
    ) -> ScoringOutcome:
        if self.optimizer is None:
            return ScoringOutcome()

        try:
            recommendation = await self.optimizer.optimize_schedule(
                debt,
                fee_config.default_installment_period_weeks,
                fee_config.minimum_installment_amount,
                start_date=start_date,
            )
        except Exception as e:
            logger.warning(
                f"Scoring service failed, falling back to rules-based plan: {e}",
                extra={"debt_id": str(debt.debt_id), "step": "scoring_failed"},
            )
            return ScoringOutcome(error=e)

        logger.info(
            "Scoring recommendation received",
            extra={
                "debt_id": str(debt.debt_id),
                "step": "scoring_complete",
                "confidence": float(recommendation.confidence_score),
            },
        )
        return ScoringOutcome(recommendation=recommendation)

    async def recommend(
        self,
        debt: DebtSnapshot,
        fee_config: FeeConfiguration,
        start_date: date | None = None,
    ) -> SystemPlanDecision:
        """Choose the system plan for debt; its outstanding amount is the total to schedule"""
        outcome = await self.score(debt, fee_config, start_date)
        reason = outcome.fallback_reason

        if reason is None:
            return SystemPlanDecision(recommendation=outcome.recommendation, source="scoring")

        scoring_fallback_counter.labels(reason=reason).inc()
        if reason == "low_confidence":
            logger.warning(
                "Scoring confidence below threshold, using rules-based plan",
                extra={
                    "debt_id": str(debt.debt_id),
                    "step": "scoring_low_confidence",
                    "confidence": float(outcome.confidence),
                },
            )

        return SystemPlanDecision(
            recommendation=rules_based_recommendation(debt.outstanding_principal, fee_config, start_date),
            source="rules",
        )

    async def validate(
        self,
        debt: DebtSnapshot,
        schedule: List[InstallmentPreview],
        fee_config: FeeConfiguration,
    ) -> ScheduleValidationResult:
        """Validate through the collaborator when it answers, locally otherwise"""
        if self.optimizer is not None:
            try:
                return await self.optimizer.validate_proposed_schedule(debt, schedule, fee_config)
            except Exception as e:
                logger.warning(
                    f"Scoring service validation failed, validating locally: {e}",
                    extra={"debt_id": str(debt.debt_id), "step": "scoring_validation_failed"},
                )

        return validate_custom_schedule(debt, schedule, fee_config)
