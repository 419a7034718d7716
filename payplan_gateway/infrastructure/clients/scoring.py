"""Scoring service HTTP client for schedule optimization and validation"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

import httpx

from payplan_gateway.config import settings
from payplan_gateway.domain.exceptions import ScoringServiceError
from payplan_gateway.domain.models import (
    DebtSnapshot,
    FeeConfiguration,
    InstallmentPreview,
    PaymentFrequency,
    ScheduleRecommendation,
    ScheduleValidationResult,
)


def _debt_payload(debt: DebtSnapshot) -> Dict[str, Any]:
    return {
        "debt_id": str(debt.debt_id),
        "organization_id": str(debt.organization_id),
        "outstanding_principal": str(debt.outstanding_principal),
        "currency": debt.currency,
    }


def _fee_config_payload(fee_config: FeeConfiguration) -> Dict[str, Any]:
    return {
        "custom_plan_admin_fee_flat": str(fee_config.custom_plan_admin_fee_flat),
        "custom_plan_admin_fee_percentage": str(fee_config.custom_plan_admin_fee_percentage),
        "minimum_installment_amount": str(fee_config.minimum_installment_amount),
        "maximum_installment_count": fee_config.maximum_installment_count,
    }


def _schedule_payload(schedule: List[InstallmentPreview]) -> List[Dict[str, Any]]:
    return [
        {
            "sequence": i.sequence,
            "due_date": i.due_date.isoformat(),
            "amount": str(i.amount),
            "description": i.description,
        }
        for i in schedule
    ]


def _parse_schedule(items: List[Dict[str, Any]]) -> List[InstallmentPreview]:
    return [
        InstallmentPreview(
            sequence=int(item["sequence"]),
            due_date=date.fromisoformat(item["due_date"]),
            amount=Decimal(str(item["amount"])),
            description=item.get("description", ""),
        )
        for item in items
    ]


class ScoringClient:
    """
    Client for the external scoring service.

    One attempt per call, no retries: callers fall back to the rules engine instead.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.scoring_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def optimize_schedule(
        self,
        debt: DebtSnapshot,
        target_weeks: int,
        minimum_installment: Decimal,
        start_date: date | None = None,
    ) -> ScheduleRecommendation:
        """
        Ask the scoring service for an optimized installment schedule.

        Raises:
            ScoringServiceError: On timeout, HTTP errors, or invalid response
        """
        data = await self._post(
            "/schedules/optimize",
            {
                "debt": _debt_payload(debt),
                "target_weeks": target_weeks,
                "minimum_installment": str(minimum_installment),
                "start_date": start_date.isoformat() if start_date else None,
            },
        )
        try:
            return ScheduleRecommendation(
                recommended_frequency=PaymentFrequency(data["recommended_frequency"]),
                installment_count=int(data["installment_count"]),
                installment_amount=Decimal(str(data["installment_amount"])),
                schedule=_parse_schedule(data["schedule"]),
                rationale=data.get("rationale", ""),
                confidence_score=Decimal(str(data["confidence_score"])),
            )
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise ScoringServiceError(f"Invalid recommendation from scoring service: {e}") from e

    async def validate_proposed_schedule(
        self,
        debt: DebtSnapshot,
        schedule: List[InstallmentPreview],
        fee_config: FeeConfiguration,
    ) -> ScheduleValidationResult:
        """
        Ask the scoring service to validate a custom schedule.

        Raises:
            ScoringServiceError: On timeout, HTTP errors, or invalid response
        """
        data = await self._post(
            "/schedules/validate",
            {
                "debt": _debt_payload(debt),
                "schedule": _schedule_payload(schedule),
                "fee_configuration": _fee_config_payload(fee_config),
            },
        )
        try:
            return ScheduleValidationResult(
                is_valid=bool(data["is_valid"]),
                requires_manual_review=bool(data["requires_manual_review"]),
                warnings=list(data.get("warnings", [])),
                errors=list(data.get("errors", [])),
                recommendation=data.get("recommendation", ""),
            )
        except (KeyError, TypeError) as e:
            raise ScoringServiceError(f"Invalid validation result from scoring service: {e}") from e

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(f"{self.base_url}{path}", json=payload)
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise ScoringServiceError(f"Scoring API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ScoringServiceError(f"Scoring API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ScoringServiceError(f"Scoring API unreachable: {e}") from e
            except ValueError as e:
                raise ScoringServiceError(f"Invalid JSON from scoring service: {e}") from e
