"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from payplan_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_options_request(
    request_id: str,
    debt_id: str,
    option_count: int,
    duration_ms: float,
) -> None:
    """Log structured option request outcome for latency analysis"""
    logging.info(
        "Options request completed",
        extra={
            "request_id": request_id,
            "debt_id": debt_id,
            "step": "options_request_complete",
            "option_count": option_count,
            "duration_ms": duration_ms,
        },
    )


def log_plan_accepted(
    request_id: str,
    debt_id: str,
    reference: str,
    plan_type: str,
    requires_manual_review: bool,
) -> None:
    """Log the accepted plan so the review queue can be traced back to requests"""
    logging.info(
        "Payment plan accepted",
        extra={
            "request_id": request_id,
            "debt_id": debt_id,
            "step": "plan_accepted",
            "reference": reference,
            "plan_type": plan_type,
            "review_outcome": "manual_review" if requires_manual_review else "auto",
        },
    )
