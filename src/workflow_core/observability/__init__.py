"""Observability package."""
from workflow_core.observability.logging import (
    get_logger,
    setup_logging,
    with_workflow_context,
)

__all__ = ["get_logger", "setup_logging", "with_workflow_context"]
