"""Unit tests for custom schedule validation"""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from payplan_gateway.domain.models import DebtSnapshot
from payplan_gateway.domain.validation import detect_unusual_pattern, validate_custom_schedule

START = date(2026, 3, 9)


def test_reasonable_schedule_passes(small_debt, fee_config, make_schedule):
    """Test 4 equal weekly payments covering $1000"""
    result = validate_custom_schedule(small_debt, make_schedule([250] * 4, START), fee_config)

    assert result.is_valid is True
    assert result.requires_manual_review is False
    assert result.errors == []
    assert result.warnings == []
    assert result.recommendation == (
        "Your custom schedule of 4 payments averaging AUD 250 looks reasonable and will be submitted for approval."
    )


def test_single_payment_passes(small_debt, fee_config, make_schedule):
    result = validate_custom_schedule(small_debt, make_schedule([1000], START), fee_config)

    assert result.is_valid is True
    assert result.requires_manual_review is False


def test_shortfall_is_an_error(small_debt, fee_config, make_schedule):
    """Test schedule covering 80% of the debt"""
    result = validate_custom_schedule(small_debt, make_schedule([200] * 4, START), fee_config)

    assert result.is_valid is False
    assert len(result.errors) == 1
    assert "Shortfall: AUD 200.00" in result.errors[0]
    assert result.recommendation == "Please address the errors before submitting this payment plan."


def test_shortfall_within_tolerance(small_debt, fee_config, make_schedule):
    result = validate_custom_schedule(small_debt, make_schedule([250, 250, 250, "249.99"], START), fee_config)

    assert result.is_valid is True
    assert result.errors == []


def test_overpayment_is_a_warning(small_debt, fee_config, make_schedule):
    result = validate_custom_schedule(small_debt, make_schedule([260] * 4, START), fee_config)

    assert result.is_valid is True
    assert result.requires_manual_review is True
    assert any("Overpayment: AUD 40.00" in w for w in result.warnings)
    assert result.recommendation.startswith("This schedule will be reviewed by an administrator.")


def test_empty_schedule_is_invalid(small_debt, fee_config):
    result = validate_custom_schedule(small_debt, [], fee_config)

    assert result.is_valid is False
    assert len(result.errors) == 1


def test_uneven_amounts_flagged(small_debt, fee_config, make_schedule):
    result = validate_custom_schedule(small_debt, make_schedule([100, 100, 100, 700], START), fee_config)

    assert result.is_valid is True
    assert result.requires_manual_review is True
    assert any("vary significantly" in w for w in result.warnings)


def test_tiny_installments_flagged(organization_id, fee_config, make_schedule):
    debt = DebtSnapshot(uuid.uuid4(), organization_id, Decimal("100"))
    result = validate_custom_schedule(debt, make_schedule([20] * 5, START), fee_config)

    assert result.is_valid is True
    assert result.requires_manual_review is True
    assert "5 installment(s) are very small (< AUD 25). Consider consolidating for efficiency." in result.warnings
    assert "5 installment(s) are below the recommended minimum of AUD 25.00." in result.warnings


def test_frequent_payments_flagged(small_debt, fee_config, make_schedule):
    result = validate_custom_schedule(small_debt, make_schedule([250] * 4, START, interval_days=3), fee_config)

    assert result.warnings == ["Payments are very frequent. This may be difficult to maintain."]
    assert result.requires_manual_review is True


def test_irregular_intervals_flagged(small_debt, fee_config, make_schedule):
    """Test gaps of 7, 7 and 40 days"""
    schedule = make_schedule([250] * 4, START)
    schedule[3].due_date = schedule[2].due_date + timedelta(days=40)

    result = validate_custom_schedule(small_debt, schedule, fee_config)

    assert "Payment intervals vary significantly. Regular intervals improve payment discipline." in result.warnings


def test_too_many_installments_is_an_error(organization_id, fee_config, make_schedule):
    debt = DebtSnapshot(uuid.uuid4(), organization_id, Decimal("5300"))
    result = validate_custom_schedule(debt, make_schedule([100] * 53, START), fee_config)

    assert result.is_valid is False
    assert result.errors == [
        "Payment plan exceeds 52 installments (1 year). Please reduce the number of payments."
    ]
    assert any("organization's maximum of 52" in w for w in result.warnings)


def test_long_plan_flagged(organization_id, fee_config, make_schedule):
    debt = DebtSnapshot(uuid.uuid4(), organization_id, Decimal("3000"))
    result = validate_custom_schedule(debt, make_schedule([1000] * 3, START, interval_days=200), fee_config)

    assert result.is_valid is True
    assert "Payment plan spans 13 months. Longer plans increase the risk of non-completion." in result.warnings


def test_checks_do_not_short_circuit(small_debt, fee_config, make_schedule):
    """Test a short, uneven, too-frequent schedule reports every problem"""
    result = validate_custom_schedule(small_debt, make_schedule([50, 350], START, interval_days=2), fee_config)

    assert result.is_valid is False
    assert len(result.errors) == 1
    assert any("vary significantly" in w for w in result.warnings)
    assert any("very frequent" in w for w in result.warnings)


@pytest.mark.parametrize(
    "amounts,expected",
    [
        ([100, 100, 100, 700], True),
        ([100, 100, 301], True),
        ([100, 100, 300], False),
        ([500, 500, 10], False),
        ([100, 200, 300], False),
        ([100, 100, 700, 700], False),
        ([100, 700], False),
        ([250, 250, 250], False),
    ],
)
def test_detect_unusual_pattern(amounts, expected, make_schedule):
    assert detect_unusual_pattern(make_schedule(amounts, START)) is expected
