"""Debt and organization lookup HTTP client"""

import uuid
from decimal import Decimal

import httpx

from payplan_gateway.config import settings
from payplan_gateway.domain.exceptions import (
    DebtNotFoundError,
    LookupServiceError,
    OrganizationNotFoundError,
)
from payplan_gateway.domain.models import DebtSnapshot, FeeConfiguration


class LookupClient:
    """Client for the external debt/organization lookup API"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.lookup_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def get_debt(self, debt_id: uuid.UUID) -> DebtSnapshot:
        """
        Fetch the current snapshot of a debt.

        Raises:
            DebtNotFoundError: Lookup service does not know the debt
            LookupServiceError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get(f"/debts/{debt_id}", not_found=DebtNotFoundError(debt_id))
        try:
            return DebtSnapshot(
                debt_id=uuid.UUID(data["debt_id"]),
                organization_id=uuid.UUID(data["organization_id"]),
                outstanding_principal=Decimal(str(data["outstanding_principal"])),
                currency=data.get("currency", "AUD"),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise LookupServiceError(f"Invalid debt data from lookup service: {e}") from e

    async def get_fee_configuration(self, organization_id: uuid.UUID) -> FeeConfiguration:
        """
        Fetch the organization's fee configuration.

        Raises:
            OrganizationNotFoundError: Organization or its configuration is missing
            LookupServiceError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get(
            f"/organizations/{organization_id}/fee-configuration",
            not_found=OrganizationNotFoundError(organization_id),
        )
        try:
            return FeeConfiguration(
                full_payment_discount_percentage=Decimal(str(data["full_payment_discount_percentage"])),
                system_plan_discount_percentage=Decimal(str(data["system_plan_discount_percentage"])),
                custom_plan_admin_fee_flat=Decimal(str(data["custom_plan_admin_fee_flat"])),
                custom_plan_admin_fee_percentage=Decimal(str(data["custom_plan_admin_fee_percentage"])),
                minimum_installment_amount=Decimal(str(data["minimum_installment_amount"])),
                default_installment_period_weeks=int(data["default_installment_period_weeks"]),
                maximum_installment_count=int(data["maximum_installment_count"]),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise LookupServiceError(f"Invalid fee configuration from lookup service: {e}") from e

    async def _get(self, path: str, not_found: Exception) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}{path}")
                if response.status_code == 404:
                    raise not_found
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise LookupServiceError(f"Lookup API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise LookupServiceError(f"Lookup API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise LookupServiceError(f"Lookup API unreachable: {e}") from e
            except ValueError as e:
                raise LookupServiceError(f"Invalid JSON from lookup service: {e}") from e
