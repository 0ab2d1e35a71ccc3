# storefront/logging_config.py
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextvars import ContextVar

# Correlation ID of the request being served, if any
correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service_name", "unknown"),
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        cid = correlation_id.get() or getattr(record, "correlation_id", None)
        if cid:
            log_data["correlation_id"] = cid

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # logger.info("...", extra={"extra_fields": {...}})
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class _ServiceFilter(logging.Filter):
    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        record.correlation_id = correlation_id.get()
        return True


def setup_logging(service_name: str, log_level: str = "INFO") -> logging.Logger:
    """Configure the service's root logger to emit one JSON object per line.

    Module loggers (``logging.getLogger(__name__)``) inside the package
    propagate up to this logger and share its handler.
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(_ServiceFilter(service_name))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def set_correlation_id(cid: Optional[str] = None) -> str:
    if cid is None:
        cid = str(uuid.uuid4())
    correlation_id.set(cid)
    return cid
