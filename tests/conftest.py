"""Pytest fixtures for testing"""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from payplan_gateway.api.dependencies import get_lookup_client, get_optimizer
from payplan_gateway.api.main import create_app
from payplan_gateway.domain.exceptions import DebtNotFoundError, OrganizationNotFoundError
from payplan_gateway.domain.models import DebtSnapshot, FeeConfiguration, InstallmentPreview


class InMemoryLookup:
    """Stand-in for the lookup service backed by dicts"""

    def __init__(self, debts=None, fee_configs=None):
        self.debts = {d.debt_id: d for d in (debts or [])}
        self.fee_configs = dict(fee_configs or {})

    async def get_debt(self, debt_id: uuid.UUID) -> DebtSnapshot:
        if debt_id not in self.debts:
            raise DebtNotFoundError(debt_id)
        return self.debts[debt_id]

    async def get_fee_configuration(self, organization_id: uuid.UUID) -> FeeConfiguration:
        if organization_id not in self.fee_configs:
            raise OrganizationNotFoundError(organization_id)
        return self.fee_configs[organization_id]


def _proposed_schedule(amounts, start: date, interval_days: int = 7) -> list[InstallmentPreview]:
    return [
        InstallmentPreview(
            sequence=i + 1,
            due_date=start + timedelta(days=i * interval_days),
            amount=Decimal(str(amount)),
        )
        for i, amount in enumerate(amounts)
    ]


@pytest.fixture
def make_schedule():
    """Build a proposed schedule: one installment per amount, interval_days apart"""
    return _proposed_schedule


@pytest.fixture
def today() -> date:
    return date(2026, 3, 2)


@pytest.fixture
def fee_config() -> FeeConfiguration:
    """Organization defaults: 10% / 5% discounts, $25 + 2% admin fee, $50 minimum, 12 weeks, 52 max"""
    return FeeConfiguration()


@pytest.fixture
def organization_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def debt(organization_id: uuid.UUID) -> DebtSnapshot:
    """$5000 debt"""
    return DebtSnapshot(
        debt_id=uuid.uuid4(),
        organization_id=organization_id,
        outstanding_principal=Decimal("5000.00"),
        currency="AUD",
    )


@pytest.fixture
def small_debt(organization_id: uuid.UUID) -> DebtSnapshot:
    """$1000 debt"""
    return DebtSnapshot(
        debt_id=uuid.uuid4(),
        organization_id=organization_id,
        outstanding_principal=Decimal("1000.00"),
        currency="AUD",
    )


@pytest.fixture
def lookup(debt, small_debt, organization_id, fee_config) -> InMemoryLookup:
    return InMemoryLookup(debts=[debt, small_debt], fee_configs={organization_id: fee_config})


@pytest.fixture
def client(lookup: InMemoryLookup) -> TestClient:
    """FastAPI test client wired to the in-memory lookup and no scoring service"""
    app = create_app()
    app.dependency_overrides[get_lookup_client] = lambda: lookup
    app.dependency_overrides[get_optimizer] = lambda: None
    return TestClient(app)
