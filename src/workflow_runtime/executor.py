"""
Workflow Executor - Drives a WorkflowIterator to completion.

Runs the stepping protocol against a validated WorkflowDefinition:
get_next_step -> execute -> record_output, until the iterator is exhausted.

Node ``execute`` callables may be sync or async. The first failure ends the
run with a FAILED result; nothing is retried.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from workflow_core.config import get_settings
from workflow_core.contracts import NodeRegistryLookup
from workflow_core.definition import WorkflowDefinition
from workflow_core.errors import WorkflowError
from workflow_core.iterator import ExecutionStep
from workflow_core.observability import get_logger, with_workflow_context


logger = get_logger(__name__)


class ExecutionStatus(str, Enum):
    """Overall workflow execution status."""
    COMPLETED = "completed"
    FAILED = "failed"


class NodeEventType(str, Enum):
    """Node lifecycle events."""
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class StepLimitExceededError(WorkflowError):
    """Run took more steps than the configured limit."""
    pass


class NodeOutputError(WorkflowError):
    """Node returned something other than an output mapping."""
    pass


@dataclass
class NodeExecutionEvent:
    """
    Lifecycle event for a single node.
    """
    type: NodeEventType
    node_id: str
    timestamp: str
    data: Optional[Any] = None
    error: Optional[BaseException] = None


@dataclass
class ExecutionResult:
    """
    Result of workflow execution.
    """
    workflow_name: str
    status: ExecutionStatus
    outputs: Optional[Dict[str, Any]] = None
    node_outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    executed_node_ids: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None
    duration_ms: float = 0

    @property
    def is_success(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED

    @property
    def is_error(self) -> bool:
        return self.status == ExecutionStatus.FAILED

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


EventCallback = Callable[[NodeExecutionEvent], None]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WorkflowExecutor:
    """
    Executes workflow definitions through their iterator.

    Usage:
        executor = WorkflowExecutor(registry)
        result = executor.run(definition)            # sync
        result = await executor.execute(definition)  # async
    """

    def __init__(
        self,
        registry: Optional[NodeRegistryLookup] = None,
        max_steps: Optional[int] = None,
        on_event: Optional[EventCallback] = None,
    ):
        """
        Initialize executor.

        Args:
            registry: Registry used to resolve node contracts; defaults to the
                registry each definition was built with
            max_steps: Safety limit for steps per run (setting ``max_steps``)
            on_event: Callback receiving node lifecycle events
        """
        self._registry = registry
        self._max_steps = max_steps if max_steps is not None else get_settings().max_steps
        self._listeners: List[EventCallback] = [on_event] if on_event else []

    def add_listener(self, callback: EventCallback) -> None:
        """Subscribe to node lifecycle events."""
        self._listeners.append(callback)

    def run(self, definition: WorkflowDefinition) -> ExecutionResult:
        """Execute from synchronous code."""
        return asyncio.run(self.execute(definition))

    async def execute(self, definition: WorkflowDefinition) -> ExecutionResult:
        """
        Execute a workflow.

        Args:
            definition: Validated workflow definition

        Returns:
            ExecutionResult with the outcome; ``outputs`` holds the last
            executed node's outputs
        """
        start_time = time.perf_counter()
        workflow_name = definition.metadata.name
        result = ExecutionResult(workflow_name=workflow_name, status=ExecutionStatus.COMPLETED)

        logger.info("Workflow execution started", extra=with_workflow_context(workflow_name=workflow_name))

        try:
            iterator = definition.create_iterator(self._registry)

            steps = 0
            step = iterator.get_next_step()
            while step is not None:
                steps += 1
                if steps > self._max_steps:
                    raise StepLimitExceededError(
                        f"Workflow exceeded step limit of {self._max_steps}",
                        {"max_steps": self._max_steps},
                    )

                outputs = await self._execute_step(workflow_name, step)
                iterator.record_output(step.node_id, outputs)

                result.executed_node_ids.append(step.node_id)
                result.node_outputs[step.node_id] = outputs
                result.outputs = outputs

                step = iterator.get_next_step()

        except Exception as e:
            result.status = ExecutionStatus.FAILED
            result.error = e
            logger.error(
                f"Workflow execution failed: {e}",
                extra=with_workflow_context(workflow_name=workflow_name),
            )

        result.duration_ms = (time.perf_counter() - start_time) * 1000
        if result.is_success:
            logger.info(
                f"Workflow execution completed: {len(result.executed_node_ids)} nodes",
                extra=with_workflow_context(workflow_name=workflow_name),
            )
        return result

    async def _execute_step(self, workflow_name: str, step: ExecutionStep) -> Dict[str, Any]:
        """Run a single node, emitting lifecycle events."""
        extra = with_workflow_context(
            workflow_name=workflow_name,
            node_id=step.node_id,
            node_type=step.node_type,
            node_version=step.node_version,
        )
        logger.debug("Executing node", extra=extra)
        self._emit(NodeEventType.STARTED, step.node_id, data=step.inputs)

        try:
            outputs = step.execute(dict(step.inputs))
            if inspect.isawaitable(outputs):
                outputs = await outputs
            if outputs is None:
                outputs = {}
            if not isinstance(outputs, dict):
                raise NodeOutputError(
                    f"Node {step.node_id} returned {type(outputs).__name__}, expected a mapping",
                    {"node_id": step.node_id},
                )
        except Exception as e:
            logger.error(f"Node failed: {e}", extra=extra)
            self._emit(NodeEventType.FAILED, step.node_id, error=e)
            raise

        self._emit(NodeEventType.COMPLETED, step.node_id, data=outputs)
        return outputs

    def _emit(
        self,
        event_type: NodeEventType,
        node_id: str,
        data: Optional[Any] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        event = NodeExecutionEvent(
            type=event_type,
            node_id=node_id,
            timestamp=_now(),
            data=data,
            error=error,
        )
        for listener in self._listeners:
            listener(event)


__all__ = [
    "WorkflowExecutor",
    "ExecutionResult",
    "ExecutionStatus",
    "NodeExecutionEvent",
    "NodeEventType",
    "StepLimitExceededError",
    "NodeOutputError",
]
