"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from rental_settlement.config import settings
from rental_settlement.domain.models import CollectionAction, SettlementResult


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = settings.log_level) -> None:
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


def log_settlement(contract_id: str, result: SettlementResult, duration_ms: float) -> None:
    """Log structured settlement outcome for the contract audit trail"""
    logging.info(
        "Settlement completed",
        extra={
            "contract_id": contract_id,
            "step": "settlement_complete",
            "late_fee_amount": str(result.late_fee_amount),
            "fuel_charge_amount": str(result.fuel_charge_amount),
            "mileage_charge_amount": str(result.mileage_charge_amount),
            "total_charges": str(result.total_charges),
            "deposit_refund": str(result.deposit_refund),
            "duration_ms": duration_ms,
        },
    )


def log_collection_plan(
    customer_id: str,
    outstanding_balance: Decimal,
    overdue_days: int,
    actions: List[CollectionAction],
) -> None:
    """Log the collection plan decided for a customer in arrears"""
    logging.info(
        "Collection plan built",
        extra={
            "customer_id": customer_id,
            "step": "collection_plan",
            "outstanding_balance": str(outstanding_balance),
            "overdue_days": overdue_days,
            "actions": [a.action.value for a in actions],
            "top_priority": actions[0].priority.value if actions else None,
        },
    )
