"""Payment plan gateway application"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payplan_gateway.api.dependencies import scoring_mode
from payplan_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payplan_gateway.api.v1 import payment_plans
from payplan_gateway.config import settings
from payplan_gateway.infrastructure.observability.logging import setup_logging

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Build the app: payment plan routes under /v1, plus health and metrics"""
    app = FastAPI(
        title="Payment Plan Gateway",
        description="Offers repayment options on a debt and reviews debtor-proposed schedules",
        version="0.1.0",
    )

    # Request IDs are assigned before latency is measured
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(payment_plans.router, prefix="/v1", tags=["payment-plans"])

    @app.get("/health")
    def health_check():
        # Scoring mode tells operators whether system plans can come from the scoring service
        return {
            "status": "ok",
            "service": settings.service_name,
            "scoring": scoring_mode(),
        }

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
