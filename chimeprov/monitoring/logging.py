"""
Structured logging for provisioning runs

JSON log formatting with the invocation's correlation IDs (request ID,
stack ID, logical resource ID, request type) propagated through a
ContextVar, so every log line of one lifecycle event can be grouped.
"""

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

request_context: ContextVar[dict[str, Any]] = ContextVar("request_context", default={})

_CONTEXT_FIELDS = ("request_id", "stack_id", "logical_resource_id", "request_type")


class ProvisionerJsonFormatter(logging.Formatter):
    """
    JSON formatter for provisioner logs with structured fields
    """

    _EXTRA_FIELDS = (
        "step_name",
        "resource_id",
        "outcome",
        "duration_ms",
        "attempts",
        "error_type",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_entry = self._build_base_entry(record)
        self._add_request_context(log_entry)
        self._add_record_extras(log_entry, record)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)

    def _build_base_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

    def _add_request_context(self, log_entry: dict[str, Any]) -> None:
        context = request_context.get({})
        for key in _CONTEXT_FIELDS:
            if context.get(key) is not None:
                log_entry[key] = context[key]

    def _add_record_extras(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self._EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)


class RequestContextFilter(logging.Filter):
    """Logging filter that copies the request context onto log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        context = request_context.get({})
        for key in _CONTEXT_FIELDS:
            setattr(record, key, context.get(key) or "-")
        return True


def set_request_context(
    request_id: str | None,
    stack_id: str | None = None,
    logical_resource_id: str | None = None,
    request_type: str | None = None,
) -> None:
    """Set correlation IDs for the current invocation"""
    request_context.set(
        {
            "request_id": request_id,
            "stack_id": stack_id,
            "logical_resource_id": logical_resource_id,
            "request_type": request_type,
        }
    )


def clear_request_context() -> None:
    request_context.set({})


class ProvisioningLogger:
    """
    Step-aware logger for the create and delete sequences
    """

    def __init__(self, name: str = "chimeprov"):
        self.logger = logging.getLogger(name)

    def step_started(self, step_name: str) -> None:
        self.logger.info(f"Step started: {step_name}", extra={"step_name": step_name})

    def step_completed(
        self, step_name: str, resource_id: str | None = None, duration_ms: float | None = None
    ) -> None:
        self.logger.info(
            f"Step completed: {step_name}" + (f" ({resource_id})" if resource_id else ""),
            extra={
                "step_name": step_name,
                "resource_id": resource_id,
                "outcome": "completed",
                "duration_ms": duration_ms,
            },
        )

    def step_skipped(self, step_name: str, reason: str) -> None:
        self.logger.warning(
            f"Step skipped: {step_name} - {reason}",
            extra={"step_name": step_name, "outcome": "skipped"},
        )

    def step_failed(self, step_name: str, error: BaseException) -> None:
        self.logger.error(
            f"Step failed: {step_name} - {error!s}",
            extra={
                "step_name": step_name,
                "outcome": "failed",
                "error_type": type(error).__name__,
            },
            exc_info=error,
        )


def setup_logging(log_level: str = "INFO", json_format: bool = True) -> ProvisioningLogger:
    """
    Set up structured logging for the provisioner

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON formatting for structured logs

    Returns:
        Configured ProvisioningLogger instance
    """
    root_logger = logging.getLogger("chimeprov")
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.propagate = False

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    if json_format:
        console_handler.setFormatter(ProvisionerJsonFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s"
            )
        )
    console_handler.addFilter(RequestContextFilter())
    root_logger.addHandler(console_handler)

    return ProvisioningLogger("chimeprov")
