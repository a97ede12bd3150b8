"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from dropdebt.config import settings


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


def log_priority_calculated(
    request_id: str,
    user_id: str,
    bill_count: int,
    top_score: float,
    duration_ms: float,
) -> None:
    """Log structured scoring outcome for analysis"""
    logging.info(
        "Priority calculation completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "priority_complete",
            "bill_count": bill_count,
            "top_score": top_score,
            "duration_ms": duration_ms,
        },
    )


def log_triage_completed(
    request_id: str,
    user_id: str,
    is_crisis: bool,
    usable_amount: float,
    total_allocated: float,
    duration_ms: float,
) -> None:
    """Log structured triage outcome for analysis"""
    logging.info(
        "Triage completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "triage_complete",
            "outcome": "crisis" if is_crisis else "stable",
            "usable_amount": usable_amount,
            "total_allocated": total_allocated,
            "duration_ms": duration_ms,
        },
    )


def log_alerts_detected(request_id: str, user_id: str, alert_types: list, emergency_count: int) -> None:
    """Log which crisis alerts fired for a user"""
    logging.info(
        "Crisis alerts detected",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "alerts_complete",
            "alert_types": alert_types,
            "emergency_count": emergency_count,
        },
    )
