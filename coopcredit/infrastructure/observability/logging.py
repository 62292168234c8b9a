"""Structured JSON logging for credit decisions"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from coopcredit.config import settings

# Libraries that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """JSON records stamped with UTC time, level and service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Send every record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ServiceJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_evaluation(
    application_id: Optional[int],
    approved: bool,
    score: int,
    risk_level: str,
    source: str,
    duration_ms: float,
    request_id: str | None = None,
) -> None:
    """One record per decided application, for approval-rate analysis"""
    logging.getLogger("coopcredit.evaluation").info(
        "Evaluation completed",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "step": "evaluation_complete",
            "approval_outcome": "approved" if approved else "rejected",
            "risk_score": score,
            "risk_level": risk_level,
            "risk_source": source,
            "duration_ms": round(duration_ms, 2),
        },
    )
