"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from license_ledger.config import settings


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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report(
    request_id: str,
    report: str,
    agreement_count: int,
    duration_ms: float,
) -> None:
    """Log structured report generation for analysis"""
    logging.info(
        "Report generated",
        extra={
            "request_id": request_id,
            "step": "report_complete",
            "report": report,
            "agreement_count": agreement_count,
            "duration_ms": duration_ms,
        },
    )


def log_agreement_billed(
    request_id: str,
    agreement_id: int,
    previous_date: str,
    next_date: str,
    user_email: str,
) -> None:
    """Log billing-cycle advance for audit"""
    logging.info(
        "Agreement marked as billed",
        extra={
            "request_id": request_id,
            "step": "agreement_billed",
            "agreement_id": agreement_id,
            "previous_billing_date": previous_date,
            "next_billing_date": next_date,
            "user_email": user_email,
        },
    )
