"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from billing_gateway.config import settings


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


def log_invoice_generation(contract_id: str, contract_type: str, invoice_ids: List[str]) -> None:
    """Log one record per generated invoice set"""
    logging.info(
        "Invoices generated",
        extra={
            "step": "invoice_generation",
            "contract_id": contract_id,
            "contract_type": contract_type,
            "invoice_count": len(invoice_ids),
            "invoice_ids": invoice_ids,
        },
    )


def log_cascade_delete(entity: str, entity_id: str, contracts: int, invoices: int) -> None:
    """Log what a delete removed, dependents included"""
    logging.info(
        "Cascade delete completed",
        extra={
            "step": "cascade_delete",
            "entity": entity,
            "entity_id": entity_id,
            "contracts_removed": contracts,
            "invoices_removed": invoices,
        },
    )
