"""Payment plan endpoints - options, custom schedule validation, plan acceptance"""

import logging
import time
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request

from payplan_gateway.api.dependencies import get_lookup_client, get_plan_service, get_request_id
from payplan_gateway.api.v1.schemas import (
    AcceptPaymentPlanRequest,
    OptionsResponse,
    PaymentPlanOptionSchema,
    PaymentPlanResponse,
    ScheduleValidationSchema,
    ValidateCustomScheduleRequest,
)
from payplan_gateway.domain.exceptions import (
    DebtNotFoundError,
    LookupServiceError,
    OrganizationNotFoundError,
    ScheduleValidationError,
)
from payplan_gateway.domain.models import PaymentPlanType
from payplan_gateway.infrastructure.clients.lookup import LookupClient
from payplan_gateway.infrastructure.observability.logging import log_options_request, log_plan_accepted
from payplan_gateway.services.plan_generation import PaymentPlanGenerationService

router = APIRouter()


@router.get("/payment-plans/options/{debt_id}", response_model=OptionsResponse)
async def get_payment_plan_options(
    debt_id: uuid.UUID,
    request: Request,
    lookup_client: LookupClient = Depends(get_lookup_client),
    service: PaymentPlanGenerationService = Depends(get_plan_service),
):
    """
    Offer the three payment plan options for a debt.

    Returns:
        Full settlement, system-generated and custom template options, in that order
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        debt = await lookup_client.get_debt(debt_id)
        options = await service.generate_options(debt)

    except (DebtNotFoundError, OrganizationNotFoundError) as e:
        logging.warning(f"Lookup miss: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except LookupServiceError as e:
        logging.error(f"Lookup service error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Lookup service unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to generate payment plan options")

    duration_ms = (time.time() - start_time) * 1000
    log_options_request(request_id, str(debt_id), len(options), duration_ms)

    return OptionsResponse(
        debt_id=str(debt_id),
        options=[PaymentPlanOptionSchema.model_validate(o) for o in options],
    )


@router.post("/payment-plans/validate-custom", response_model=ScheduleValidationSchema)
async def validate_custom_schedule(
    request_body: ValidateCustomScheduleRequest,
    request: Request,
    lookup_client: LookupClient = Depends(get_lookup_client),
    service: PaymentPlanGenerationService = Depends(get_plan_service),
):
    """
    Check a debtor-proposed schedule before it is submitted.

    Returns:
        Validation verdict with errors, warnings and a recommendation
    """
    request_id = get_request_id(request)

    try:
        debt = await lookup_client.get_debt(request_body.debt_id)
        result = await service.validate_custom_schedule(debt, [i.to_domain() for i in request_body.schedule])

    except (DebtNotFoundError, OrganizationNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    except LookupServiceError as e:
        logging.error(f"Lookup service error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Lookup service unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to validate custom schedule")

    return ScheduleValidationSchema.model_validate(result)


@router.post("/payment-plans/accept", response_model=PaymentPlanResponse)
async def accept_payment_plan(
    request_body: AcceptPaymentPlanRequest,
    request: Request,
    lookup_client: LookupClient = Depends(get_lookup_client),
    service: PaymentPlanGenerationService = Depends(get_plan_service),
):
    """
    Turn the selected option into a payment plan.

    A custom option with a debtor schedule goes through validation and admin fees;
    anything else is created straight from the option. Persisting the plan is up to the caller.
    """
    request_id = get_request_id(request)
    actor_id = request_body.user_id or "anonymous-user"
    option = request_body.selected_option

    try:
        debt = await lookup_client.get_debt(request_body.debt_id)

        if option.type == PaymentPlanType.CUSTOM and request_body.custom_schedule:
            plan = await service.materialize_from_custom_schedule(
                debt,
                [i.to_domain() for i in request_body.custom_schedule],
                actor_id,
            )
        else:
            plan = await service.materialize_from_option(debt, option.to_domain(), actor_id)

    except ScheduleValidationError as e:
        logging.warning(f"Custom schedule rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Invalid custom schedule",
                "validation": ScheduleValidationSchema.model_validate(e.result).model_dump(),
            },
        )

    except (DebtNotFoundError, OrganizationNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    except LookupServiceError as e:
        logging.error(f"Lookup service error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Lookup service unavailable")

    except ValueError as e:
        logging.warning(f"Rejected plan request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to create payment plan")

    log_plan_accepted(
        request_id,
        str(request_body.debt_id),
        plan.reference,
        plan.type.value,
        plan.requires_manual_review,
    )
    return PaymentPlanResponse.from_plan(plan)
