"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from ledger_service.config import settings


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


def log_transfer(
    request_id: str,
    from_account_id: int,
    to_account_id: int,
    amount: Any,
    outcome: str,
    receipt: Optional[str] = None,
    reason: Optional[str] = None,
) -> None:
    """Log structured transfer outcome (applied | replayed | rejected | failed)"""
    level = logging.INFO if outcome in ("applied", "replayed") else logging.WARNING
    logging.getLogger("ledger_service.transfers").log(
        level,
        f"Transfer {outcome}",
        extra={
            "transfer_request_id": request_id,
            "from_account_id": from_account_id,
            "to_account_id": to_account_id,
            "amount": str(amount),
            "outcome": outcome,
            "receipt": receipt,
            "reason": reason,
        },
    )
