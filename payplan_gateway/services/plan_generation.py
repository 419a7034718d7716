"""Payment plan option generation and plan creation"""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List, Optional, Protocol

from payplan_gateway.domain.exceptions import ScheduleValidationError
from payplan_gateway.domain.installments import FIRST_INSTALLMENT_LEAD_DAYS
from payplan_gateway.domain.materializer import materialize_custom_schedule, materialize_from_option
from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    PaymentPlan,
    PaymentPlanOption,
    ScheduleValidationResult,
)
from payplan_gateway.domain.options import (
    custom_template_option,
    full_settlement_option,
    system_generated_option,
    system_plan_discount,
)
from payplan_gateway.infrastructure.observability.metrics import (
    options_generated_counter,
    plans_materialized_counter,
    record_validation,
)
from payplan_gateway.services.scoring_adapter import ScheduleOptimizer, ScoringAdapter

logger = logging.getLogger(__name__)


class FeeConfigurationProvider(Protocol):
    """Lookup of per-organization fee configuration; raises OrganizationNotFoundError"""

    async def get_fee_configuration(self, organization_id: uuid.UUID) -> FeeConfiguration: ...


class PaymentPlanGenerationService:
    """
    Service for offering and creating payment plans.

    This service orchestrates:
    1. Fetching the organization's fee configuration
    2. Building the full settlement, system-generated and custom template options
    3. Validating debtor-proposed custom schedules
    4. Turning a chosen option or custom schedule into a payment plan
    """

    def __init__(
        self,
        fee_provider: FeeConfigurationProvider,
        optimizer: Optional[ScheduleOptimizer] = None,
    ):
        """
        Args:
            fee_provider: Source of organization fee configurations
            optimizer: Scoring collaborator; None behaves like a zero-confidence answer
        """
        self.fee_provider = fee_provider
        self.scoring = ScoringAdapter(optimizer)

    async def generate_options(self, debt: DebtSnapshot, today: date | None = None) -> List[PaymentPlanOption]:
        """
        Build exactly three options: full settlement, system generated, custom template.

        Raises:
            OrganizationNotFoundError: No fee configuration for the debt's organization
        """
        fee_config = await self.fee_provider.get_fee_configuration(debt.organization_id)

        # The scoring service schedules the amount left after the system plan discount
        _, amount_after_discount = system_plan_discount(debt, fee_config)
        discounted_debt = replace(debt, outstanding_principal=amount_after_discount)
        start_date = None if today is None else today + timedelta(days=FIRST_INSTALLMENT_LEAD_DAYS)
        decision = await self.scoring.recommend(discounted_debt, fee_config, start_date=start_date)

        options = [
            full_settlement_option(debt, fee_config, today),
            system_generated_option(debt, fee_config, decision.recommendation, decision.source),
            custom_template_option(debt, fee_config, today),
        ]

        options_generated_counter.labels(system_plan_source=decision.source).inc()
        logger.info(
            "Generated payment plan options",
            extra={
                "debt_id": str(debt.debt_id),
                "step": "options_generated",
                "system_plan_source": decision.source,
                "option_count": len(options),
            },
        )
        return options

    async def validate_custom_schedule(
        self,
        debt: DebtSnapshot,
        schedule: List[InstallmentPreview],
    ) -> ScheduleValidationResult:
        """
        Raises:
            OrganizationNotFoundError: No fee configuration for the debt's organization
        """
        fee_config = await self.fee_provider.get_fee_configuration(debt.organization_id)
        result = await self.scoring.validate(debt, schedule, fee_config)
        record_validation(result.is_valid, result.requires_manual_review)
        return result

    async def materialize_from_option(
        self,
        debt: DebtSnapshot,
        option: PaymentPlanOption,
        actor_id: str,
        now: datetime | None = None,
    ) -> PaymentPlan:
        plan = materialize_from_option(debt, option, actor_id, now=now)
        self._record_plan(debt, plan)
        return plan

    async def materialize_from_custom_schedule(
        self,
        debt: DebtSnapshot,
        schedule: List[InstallmentPreview],
        actor_id: str,
        now: datetime | None = None,
    ) -> PaymentPlan:
        """
        Validate a debtor-proposed schedule and create a custom plan with admin fees.

        Raises:
            OrganizationNotFoundError: No fee configuration for the debt's organization
            ScheduleValidationError: Schedule has errors; carries the full validation result
        """
        fee_config = await self.fee_provider.get_fee_configuration(debt.organization_id)
        result = await self.scoring.validate(debt, schedule, fee_config)
        record_validation(result.is_valid, result.requires_manual_review)

        if not result.is_valid:
            raise ScheduleValidationError(result)

        plan = materialize_custom_schedule(debt, schedule, fee_config, actor_id, now=now)
        self._record_plan(debt, plan)
        return plan

    def _record_plan(self, debt: DebtSnapshot, plan: PaymentPlan) -> None:
        plans_materialized_counter.labels(plan_type=plan.type.value).inc()
        logger.info(
            "Payment plan created",
            extra={
                "debt_id": str(debt.debt_id),
                "step": "plan_created",
                "reference": plan.reference,
                "plan_type": plan.type.value,
                "requires_manual_review": plan.requires_manual_review,
            },
        )

