"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from payplan_gateway.domain.models import (
    InstallmentPreview,
    PaymentFrequency,
    PaymentPlan,
    PaymentPlanOption,
    PaymentPlanType,
)


class InstallmentSchema(BaseModel):
    """Single installment in an option or proposed schedule"""

    model_config = ConfigDict(from_attributes=True)

    sequence: int = Field(..., ge=1)
    due_date: date
    amount: Decimal = Field(..., gt=0)
    description: str = ""

    def to_domain(self) -> InstallmentPreview:
        return InstallmentPreview(
            sequence=self.sequence,
            due_date=self.due_date,
            amount=self.amount,
            description=self.description,
        )


class PaymentPlanOptionSchema(BaseModel):
    """One payment plan option as shown to the debtor"""

    model_config = ConfigDict(from_attributes=True)

    type: PaymentPlanType
    title: str
    description: str
    original_amount: Decimal
    total_amount: Decimal
    discount_amount: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None
    admin_fee: Optional[Decimal] = None
    frequency: PaymentFrequency
    installment_count: int = Field(..., ge=0)
    installment_amount: Decimal = Field(..., ge=0)
    start_date: date
    end_date: Optional[date] = None
    installment_schedule: List[InstallmentSchema] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    is_recommended: bool = False
    requires_approval: bool = False
    down_payment_amount: Optional[Decimal] = None
    down_payment_due_date: Optional[date] = None

    def to_domain(self) -> PaymentPlanOption:
        return PaymentPlanOption(
            type=self.type,
            title=self.title,
            description=self.description,
            original_amount=self.original_amount,
            total_amount=self.total_amount,
            discount_amount=self.discount_amount,
            discount_percentage=self.discount_percentage,
            admin_fee=self.admin_fee,
            frequency=self.frequency,
            installment_count=self.installment_count,
            installment_amount=self.installment_amount,
            start_date=self.start_date,
            end_date=self.end_date,
            installment_schedule=[i.to_domain() for i in self.installment_schedule],
            benefits=list(self.benefits),
            is_recommended=self.is_recommended,
            requires_approval=self.requires_approval,
            down_payment_amount=self.down_payment_amount,
            down_payment_due_date=self.down_payment_due_date,
        )


class OptionsResponse(BaseModel):
    """Response for GET /v1/payment-plans/options/{debt_id}"""

    debt_id: str
    options: List[PaymentPlanOptionSchema]


class ValidateCustomScheduleRequest(BaseModel):
    """Request body for POST /v1/payment-plans/validate-custom"""

    debt_id: uuid.UUID
    schedule: List[InstallmentSchema] = Field(..., min_length=1)


class ScheduleValidationSchema(BaseModel):
    """Verdict on a custom schedule"""

    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    requires_manual_review: bool
    warnings: List[str]
    errors: List[str]
    recommendation: str


class AcceptPaymentPlanRequest(BaseModel):
    """Request body for POST /v1/payment-plans/accept"""

    debt_id: uuid.UUID
    selected_option: PaymentPlanOptionSchema
    custom_schedule: Optional[List[InstallmentSchema]] = None
    user_id: Optional[str] = None


class PlanInstallmentSchema(BaseModel):
    """Installment of a created plan"""

    sequence: int
    due_date: date
    amount_due: Decimal
    status: str


class PaymentPlanResponse(BaseModel):
    """Response for POST /v1/payment-plans/accept"""

    plan_id: str
    reference: str
    debt_id: str
    type: PaymentPlanType
    frequency: PaymentFrequency
    status: str
    start_date: date
    end_date: Optional[date] = None
    installment_amount: Decimal
    installment_count: int
    total_payable: Decimal
    discount_amount: Optional[Decimal] = None
    down_payment_amount: Optional[Decimal] = None
    down_payment_due_date: Optional[date] = None
    requires_manual_review: bool
    created_by: Optional[str] = None
    notes: str
    installments: List[PlanInstallmentSchema]

    @classmethod
    def from_plan(cls, plan: PaymentPlan) -> "PaymentPlanResponse":
        return cls(
            plan_id=str(plan.id),
            reference=plan.reference,
            debt_id=str(plan.debt_id),
            type=plan.type,
            frequency=plan.frequency,
            status=plan.status,
            start_date=plan.start_date,
            end_date=plan.end_date,
            installment_amount=plan.installment_amount,
            installment_count=plan.installment_count,
            total_payable=plan.total_payable,
            discount_amount=plan.discount_amount,
            down_payment_amount=plan.down_payment_amount,
            down_payment_due_date=plan.down_payment_due_date,
            requires_manual_review=plan.requires_manual_review,
            created_by=plan.created_by,
            notes=plan.notes,
            installments=[
                PlanInstallmentSchema(
                    sequence=i.sequence,
                    due_date=i.due_date,
                    amount_due=i.amount_due,
                    status=i.status,
                )
                for i in plan.installments
            ],
        )
