"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Request

from payplan_gateway.config import settings
from payplan_gateway.domain.optimizer import RulesBasedOptimizer
from payplan_gateway.infrastructure.clients.lookup import LookupClient
from payplan_gateway.infrastructure.clients.scoring import ScoringClient
from payplan_gateway.services.plan_generation import PaymentPlanGenerationService
from payplan_gateway.services.scoring_adapter import ScheduleOptimizer


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_lookup_client() -> LookupClient:
    """Provide debt/organization lookup client instance"""
    return LookupClient()


def scoring_mode() -> str:
    """remote | local | none, from configuration"""
    if settings.scoring_api_base:
        return "remote"
    if settings.scoring_use_local_optimizer:
        return "local"
    return "none"


def get_optimizer() -> Optional[ScheduleOptimizer]:
    """Remote scoring service if configured, else the in-process optimizer (or none)"""
    mode = scoring_mode()
    if mode == "remote":
        return ScoringClient()
    if mode == "local":
        return RulesBasedOptimizer()
    return None


def get_plan_service(
    lookup_client: LookupClient = Depends(get_lookup_client),
    optimizer: Optional[ScheduleOptimizer] = Depends(get_optimizer),
) -> PaymentPlanGenerationService:
    """Provide plan generation service wired to the configured collaborators"""
    return PaymentPlanGenerationService(lookup_client, optimizer)
