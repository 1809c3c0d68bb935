"""Structured JSON logging for Kredika services."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


SERVICE_NAME = 'kredika'


class KredikaJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name to each record."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['service'] = SERVICE_NAME
