"""Structured JSON logging"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from bnpl_tracker.config import settings


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
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_mutation(request_id: str, entity: str, action: str, entity_id: Optional[str] = None, **fields: Any) -> None:
    """Log one state change (create/update/delete) of a tracker entity"""
    logging.info(
        f"{entity} {action}",
        extra={
            "request_id": request_id,
            "entity": entity,
            "action": action,
            "entity_id": entity_id,
            **fields,
        },
    )


def log_import(request_id: str, borrowers: int, transactions: int, payments: Optional[int], duration_ms: float) -> None:
    """Log a completed full-replace import"""
    logging.info(
        "Import completed",
        extra={
            "request_id": request_id,
            "step": "import_complete",
            "borrower_count": borrowers,
            "transaction_count": transactions,
            "payment_count": payments,
            "duration_ms": duration_ms,
        },
    )
