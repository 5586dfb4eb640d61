"""
Workflow Runtime - Executes workflow definitions.

This package provides:
- WorkflowExecutor: Drives a definition's iterator, running each node's contract
- ExecutionResult: Outcome of a run
- NodeExecutionEvent: Per-node lifecycle events (started/completed/failed)
"""

from .executor import (
    ExecutionResult,
    ExecutionStatus,
    NodeEventType,
    NodeExecutionEvent,
    NodeOutputError,
    StepLimitExceededError,
    WorkflowExecutor,
)

__all__ = [
    "WorkflowExecutor",
    "ExecutionResult",
    "ExecutionStatus",
    "NodeExecutionEvent",
    "NodeEventType",
    "NodeOutputError",
    "StepLimitExceededError",
]
