"""Unit tests for the rules-based schedule optimizer"""

import pytest
from datetime import date
from decimal import Decimal

from payplan_gateway.domain.models import FeeConfiguration, PaymentFrequency
from payplan_gateway.domain.optimizer import (
    RulesBasedOptimizer,
    calculate_confidence_score,
    calculate_optimal_installments,
    determine_frequency,
    rules_based_recommendation,
)


@pytest.mark.parametrize(
    "debt_size,expected",
    [
        ("250", PaymentFrequency.MONTHLY),
        ("999.99", PaymentFrequency.MONTHLY),
        ("1000", PaymentFrequency.FORTNIGHTLY),
        ("4999.99", PaymentFrequency.FORTNIGHTLY),
        ("5000", PaymentFrequency.WEEKLY),
    ],
)
def test_determine_frequency(debt_size, expected):
    assert determine_frequency(Decimal(debt_size)) == expected


@pytest.mark.parametrize(
    "total,weeks,frequency,expected_count,expected_amount",
    [
        ("2000", 12, PaymentFrequency.FORTNIGHTLY, 6, "350"),
        ("600", 12, PaymentFrequency.MONTHLY, 3, "200"),
        ("5000", 12, PaymentFrequency.WEEKLY, 12, "425"),
        ("4750", 12, PaymentFrequency.FORTNIGHTLY, 6, "800"),
        ("600", 2, PaymentFrequency.MONTHLY, 1, "600"),
    ],
)
def test_optimal_installments_price_points(total, weeks, frequency, expected_count, expected_amount):
    count, amount = calculate_optimal_installments(Decimal(total), Decimal("50"), weeks, frequency)

    assert count == expected_count
    assert amount == Decimal(expected_amount)


def test_optimal_installments_floor_at_minimum():
    """Test $100 weekly would be $10 payments, raised to the $50 minimum"""
    count, amount = calculate_optimal_installments(Decimal("100"), Decimal("50"), 12, PaymentFrequency.WEEKLY)

    assert count == 2
    assert amount == Decimal("50")


@pytest.mark.parametrize(
    "count,amount,expected",
    [
        (12, "425", "1.0"),
        (3, "200", "0.90"),
        (12, "421.50", "0.95"),
        (30, "33.33", "0.85"),
    ],
)
def test_confidence_score(count, amount, expected):
    assert calculate_confidence_score(count, Decimal(amount)) == Decimal(expected)


def test_rules_based_recommendation_weekly_schedule(fee_config):
    start = date(2026, 3, 9)
    recommendation = rules_based_recommendation(Decimal("4750.00"), fee_config, start)

    assert recommendation.recommended_frequency == PaymentFrequency.WEEKLY
    assert recommendation.installment_count == 12
    assert recommendation.installment_amount == Decimal("400")
    assert recommendation.schedule[0].due_date == start
    assert recommendation.schedule[-1].amount == Decimal("350.00")
    assert sum(i.amount for i in recommendation.schedule) == Decimal("4750.00")
    assert recommendation.rationale == "Automated weekly installments with partial discount"


def test_optimizer_recommend(debt):
    optimizer = RulesBasedOptimizer()
    start = date(2026, 3, 9)

    recommendation = optimizer.recommend(debt, 12, Decimal("50"), start_date=start)

    assert recommendation.recommended_frequency == PaymentFrequency.WEEKLY
    assert recommendation.installment_count == 12
    assert recommendation.installment_amount == Decimal("425")
    assert recommendation.confidence_score == Decimal("1.0")
    assert sum(i.amount for i in recommendation.schedule) == debt.outstanding_principal
    assert recommendation.schedule[0].description == "Weekly payment 1 of 12"
    assert "AUD 5,000 debt" in recommendation.rationale


async def test_optimizer_contract(small_debt, make_schedule):
    """Test the in-process optimizer answers the scoring service contract"""
    optimizer = RulesBasedOptimizer()

    recommendation = await optimizer.optimize_schedule(small_debt, 12, Decimal("50"))
    assert recommendation.recommended_frequency == PaymentFrequency.FORTNIGHTLY
    assert sum(i.amount for i in recommendation.schedule) == small_debt.outstanding_principal

    result = await optimizer.validate_proposed_schedule(
        small_debt, make_schedule([250] * 4, date(2026, 3, 9)), FeeConfiguration()
    )
    assert result.is_valid is True
