"""Structured JSON logging with workflow context."""
import logging
import sys
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from workflow_core.config import get_settings

CONTEXT_FIELDS = ("workflow_name", "node_id", "node_type", "node_version")


class WorkflowContextFilter(logging.Filter):
    """Add workflow context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default workflow context fields if not present."""
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with standardized field names."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        # Drop empty context so records stay compact
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is None:
                log_record.pop(name, None)
            else:
                log_record[name] = value


def setup_logging() -> None:
    """Configure logging for applications embedding the workflow core."""
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)

    if settings.log_json:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(workflow_name)s %(node_id)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    handler.setFormatter(formatter)
    handler.addFilter(WorkflowContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges per-call extra into the adapter defaults."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> logging.LoggerAdapter:
    """
    Get a logger with workflow context support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        LoggerAdapter that can accept workflow context in extra dict
    """
    logger = logging.getLogger(name)
    return ContextLoggerAdapter(logger, extra={})


def with_workflow_context(
    workflow_name: str | None = None,
    node_id: str | None = None,
    node_type: str | None = None,
    node_version: int | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create an extra dict with workflow context for logging.

    Args:
        workflow_name: Workflow name
        node_id: Node ID
        node_type: Node type
        node_version: Node type version
        **kwargs: Additional context fields

    Returns:
        Dict to pass as extra parameter to logger methods
    """
    extra = kwargs.copy()
    if workflow_name:
        extra["workflow_name"] = workflow_name
    if node_id:
        extra["node_id"] = node_id
    if node_type:
        extra["node_type"] = node_type
    if node_version is not None:
        extra["node_version"] = node_version
    return extra
