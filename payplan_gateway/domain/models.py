"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from payplan_gateway.domain.exceptions import InvariantViolation

CENT = Decimal("0.01")


class PaymentPlanType(str, Enum):
    FULL_SETTLEMENT = "full_settlement"
    SYSTEM_GENERATED = "system_generated"
    CUSTOM = "custom"


class PaymentFrequency(str, Enum):
    ONE_OFF = "one_off"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"

    @property
    def days_between_payments(self) -> int:
        return {
            PaymentFrequency.WEEKLY: 7,
            PaymentFrequency.FORTNIGHTLY: 14,
            PaymentFrequency.MONTHLY: 30,
        }.get(self, 7)

    @property
    def weeks_per_payment(self) -> int:
        return {
            PaymentFrequency.WEEKLY: 1,
            PaymentFrequency.FORTNIGHTLY: 2,
            PaymentFrequency.MONTHLY: 4,
        }.get(self, 1)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class DebtSnapshot:
    """Read-only view of a debt at generation time"""

    debt_id: uuid.UUID
    organization_id: uuid.UUID
    outstanding_principal: Decimal
    currency: str = "AUD"

    def __post_init__(self):
        if self.outstanding_principal <= 0:
            raise InvariantViolation("Outstanding principal must be positive")


@dataclass(frozen=True)
class FeeConfiguration:
    """Per-organization discount, fee and installment policy"""

    full_payment_discount_percentage: Decimal = Decimal("10.0")
    system_plan_discount_percentage: Decimal = Decimal("5.0")
    custom_plan_admin_fee_flat: Decimal = Decimal("25.0")
    custom_plan_admin_fee_percentage: Decimal = Decimal("2.0")
    minimum_installment_amount: Decimal = Decimal("50.0")
    default_installment_period_weeks: int = 12
    maximum_installment_count: int = 52

    def __post_init__(self):
        for name in (
            "full_payment_discount_percentage",
            "system_plan_discount_percentage",
            "custom_plan_admin_fee_percentage",
        ):
            value = getattr(self, name)
            if value < 0 or value > 100:
                raise InvariantViolation(f"{name} must be between 0 and 100 percent")
        if self.custom_plan_admin_fee_flat < 0:
            raise InvariantViolation("Admin fee cannot be negative")
        if self.minimum_installment_amount <= 0:
            raise InvariantViolation("Minimum installment amount must be positive")
        if self.default_installment_period_weeks <= 0:
            raise InvariantViolation("Installment period must be positive")
        if self.maximum_installment_count <= 0:
            raise InvariantViolation("Maximum installment count must be positive")


@dataclass
class InstallmentPreview:
    """Single proposed payment in an option or debtor-submitted schedule"""

    sequence: int
    due_date: date
    amount: Decimal
    description: str = ""


@dataclass
class PaymentPlanOption:
    """One of the three repayment options offered to a debtor"""

    type: PaymentPlanType
    title: str
    description: str
    original_amount: Decimal
    total_amount: Decimal
    frequency: PaymentFrequency
    installment_count: int
    installment_amount: Decimal
    start_date: date
    end_date: Optional[date] = None
    discount_amount: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None
    admin_fee: Optional[Decimal] = None
    installment_schedule: List[InstallmentPreview] = field(default_factory=list)
    benefits: List[str] = field(default_factory=list)
    is_recommended: bool = False
    requires_approval: bool = False
    down_payment_amount: Optional[Decimal] = None
    down_payment_due_date: Optional[date] = None


@dataclass
class ScheduleRecommendation:
    """Output of the scoring collaborator or the rules-based optimizer"""

    recommended_frequency: PaymentFrequency
    installment_count: int
    installment_amount: Decimal
    schedule: List[InstallmentPreview]
    rationale: str
    confidence_score: Decimal


@dataclass
class ScheduleValidationResult:
    """Verdict on a debtor-proposed schedule"""

    is_valid: bool = True
    requires_manual_review: bool = False
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    recommendation: str = ""


@dataclass
class PaymentInstallment:
    """Concrete installment of a materialized plan"""

    sequence: int
    due_date: date
    amount_due: Decimal
    status: str = "scheduled"

    def __post_init__(self):
        if self.amount_due <= 0:
            raise InvariantViolation("Installment amount must be positive")


class PaymentPlan:
    """Committed repayment plan; totals are derived from its installments"""

    def __init__(
        self,
        debt_id: uuid.UUID,
        reference: str,
        type: PaymentPlanType,
        frequency: PaymentFrequency,
        start_date: date,
        installment_amount: Decimal,
        installment_count: int,
    ):
        if installment_amount < 0:
            raise InvariantViolation("Installment amount cannot be negative")
        if installment_count < 0:
            raise InvariantViolation("Installment count cannot be negative")

        self.id = uuid.uuid4()
        self.debt_id = debt_id
        self.reference = reference
        self.type = type
        self.status = "draft"
        self.frequency = frequency
        self.start_date = start_date
        self.end_date: Optional[date] = None
        self.installment_amount = installment_amount
        self.installment_count = installment_count
        self.total_payable = installment_amount * installment_count
        self.discount_amount: Optional[Decimal] = None
        self.down_payment_amount: Optional[Decimal] = None
        self.down_payment_due_date: Optional[date] = None
        self.requires_manual_review = False
        self.created_by: Optional[str] = None
        self.notes = ""
        self.installments: List[PaymentInstallment] = []

    def set_created_by(self, user_id: str) -> None:
        self.created_by = user_id

    def require_manual_review(self) -> None:
        self.requires_manual_review = True

    def apply_discount(self, discount_amount: Optional[Decimal]) -> None:
        """Non-positive discounts clear the discount"""
        if discount_amount is not None and discount_amount <= 0:
            discount_amount = None
        self.discount_amount = discount_amount
        self._recalculate_totals()

    def set_down_payment(self, amount: Optional[Decimal], due_date: Optional[date]) -> None:
        if amount is not None and amount <= 0:
            amount = None
        self.down_payment_amount = amount
        self.down_payment_due_date = due_date if amount is not None else None
        self._recalculate_totals()

    def schedule_installment(self, sequence: int, due_date: date, amount_due: Decimal) -> PaymentInstallment:
        installment = PaymentInstallment(sequence=sequence, due_date=due_date, amount_due=amount_due)
        self.installments.append(installment)
        self._recalculate_totals()
        return installment

    def append_note(self, note: Optional[str]) -> None:
        if not note or not note.strip():
            return
        self.notes = note.strip() if not self.notes.strip() else f"{self.notes}\n{note.strip()}"

    def _recalculate_totals(self) -> None:
        # Installment amounts are already net of any discount
        down_payment = self.down_payment_amount or Decimal("0")

        if not self.installments:
            self.total_payable = down_payment
            self.installment_count = 0
            self.end_date = None
            return

        amounts = [i.amount_due for i in self.installments]
        self.installment_count = len(amounts)
        self.installment_amount = (sum(amounts) / len(amounts)).quantize(CENT, rounding=ROUND_HALF_UP)
        self.total_payable = sum(amounts) + down_payment
        self.end_date = max(i.due_date for i in self.installments)
