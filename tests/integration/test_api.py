"""Integration tests for API endpoints"""

import uuid
import pytest
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from payplan_gateway.api.dependencies import get_lookup_client, get_optimizer
from payplan_gateway.domain.exceptions import LookupServiceError, ScoringServiceError
from payplan_gateway.infrastructure.clients.scoring import ScoringClient

pytestmark = pytest.mark.integration


def _schedule_json(amounts, start="2026-03-09"):
    first = date.fromisoformat(start)
    return [
        {"sequence": i + 1, "due_date": (first + timedelta(weeks=i)).isoformat(), "amount": str(a)}
        for i, a in enumerate(amounts)
    ]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "payplan_http_request_duration_seconds" in response.text


def test_request_id_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_get_options(client: TestClient, debt):
    """Test GET /v1/payment-plans/options/{debt_id} for a $5000 debt"""
    response = client.get(f"/v1/payment-plans/options/{debt.debt_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["debt_id"] == str(debt.debt_id)
    assert [o["type"] for o in data["options"]] == ["full_settlement", "system_generated", "custom"]

    full, system, custom = data["options"]
    assert Decimal(full["total_amount"]) == Decimal("4500")
    assert Decimal(system["total_amount"]) == Decimal("4750")
    assert sum(Decimal(i["amount"]) for i in system["installment_schedule"]) == Decimal("4750")
    assert custom["installment_count"] == 0
    assert custom["requires_approval"] is True


def test_get_options_unknown_debt(client: TestClient):
    response = client.get(f"/v1/payment-plans/options/{uuid.uuid4()}")
    assert response.status_code == 404


def test_get_options_lookup_unavailable(client: TestClient):
    failing = AsyncMock()
    failing.get_debt.side_effect = LookupServiceError("down")
    client.app.dependency_overrides[get_lookup_client] = lambda: failing

    response = client.get(f"/v1/payment-plans/options/{uuid.uuid4()}")

    assert response.status_code == 503


@patch("payplan_gateway.infrastructure.clients.scoring.ScoringClient.optimize_schedule")
def test_get_options_scoring_failure_falls_back(mock_optimize: AsyncMock, client: TestClient, debt):
    """Test the options still come back when the scoring service errors"""
    mock_optimize.side_effect = ScoringServiceError("scoring down")
    client.app.dependency_overrides[get_optimizer] = lambda: ScoringClient(base_url="http://scoring")

    response = client.get(f"/v1/payment-plans/options/{debt.debt_id}")

    assert response.status_code == 200
    system = response.json()["options"][1]
    assert system["title"] == "Weekly Payment Plan"
    mock_optimize.assert_awaited_once()


def test_validate_custom_schedule(client: TestClient, small_debt):
    response = client.post(
        "/v1/payment-plans/validate-custom",
        json={"debt_id": str(small_debt.debt_id), "schedule": _schedule_json([250] * 4)},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is True
    assert data["requires_manual_review"] is False


def test_validate_custom_schedule_shortfall(client: TestClient, small_debt):
    response = client.post(
        "/v1/payment-plans/validate-custom",
        json={"debt_id": str(small_debt.debt_id), "schedule": _schedule_json([200] * 4)},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert len(data["errors"]) == 1


def test_validate_custom_schedule_rejects_empty(client: TestClient, small_debt):
    response = client.post(
        "/v1/payment-plans/validate-custom",
        json={"debt_id": str(small_debt.debt_id), "schedule": []},
    )
    assert response.status_code == 422


def test_accept_full_settlement(client: TestClient, debt):
    options = client.get(f"/v1/payment-plans/options/{debt.debt_id}").json()["options"]

    response = client.post(
        "/v1/payment-plans/accept",
        json={"debt_id": str(debt.debt_id), "selected_option": options[0], "user_id": "debtor-1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["reference"].startswith(f"PP-{debt.debt_id.hex}-")
    assert data["type"] == "full_settlement"
    assert Decimal(data["total_payable"]) == Decimal("4500")
    assert data["requires_manual_review"] is False
    assert data["created_by"] == "debtor-1"


def test_accept_custom_schedule(client: TestClient, small_debt):
    options = client.get(f"/v1/payment-plans/options/{small_debt.debt_id}").json()["options"]

    response = client.post(
        "/v1/payment-plans/accept",
        json={
            "debt_id": str(small_debt.debt_id),
            "selected_option": options[2],
            "custom_schedule": _schedule_json([250] * 4),
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["reference"].startswith("PP-CUSTOM-")
    assert data["requires_manual_review"] is True
    assert data["created_by"] == "anonymous-user"
    assert [Decimal(i["amount_due"]) for i in data["installments"]] == [Decimal("265")] * 4


def test_accept_invalid_custom_schedule(client: TestClient, small_debt):
    options = client.get(f"/v1/payment-plans/options/{small_debt.debt_id}").json()["options"]

    response = client.post(
        "/v1/payment-plans/accept",
        json={
            "debt_id": str(small_debt.debt_id),
            "selected_option": options[2],
            "custom_schedule": _schedule_json([200] * 4),
        },
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["message"] == "Invalid custom schedule"
    assert detail["validation"]["is_valid"] is False
    assert len(detail["validation"]["errors"]) == 1


def test_health_reports_scoring_mode(client: TestClient):
    response = client.get("/health")
    assert response.json()["scoring"] in {"remote", "local", "none"}


def test_validate_custom_schedule_unexpected_error(client: TestClient, small_debt):
    """Test an unexpected failure is reported as a 500, not a crash"""
    broken = AsyncMock()
    broken.get_debt.side_effect = RuntimeError("corrupted snapshot")
    client.app.dependency_overrides[get_lookup_client] = lambda: broken

    response = client.post(
        "/v1/payment-plans/validate-custom",
        json={"debt_id": str(small_debt.debt_id), "schedule": _schedule_json([250] * 4)},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to validate custom schedule"
