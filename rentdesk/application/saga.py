"""Compensating sequence of named forward/backward steps."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from rentdesk.application.exceptions import ApplicationError, ProvisioningError
from rentdesk.domain.exceptions import DomainError
from rentdesk.security.exceptions import SecurityError

logger = logging.getLogger(__name__)

SagaContext = Dict[str, Any]


@dataclass(frozen=True)
class SagaStep:
    """forward stores what backward needs in the shared context."""

    name: str
    forward: Callable[[SagaContext], Awaitable[Any]]
    backward: Optional[Callable[[SagaContext], Awaitable[None]]] = None


class Saga:
    """
    Runs steps in order. When a step fails, already completed steps are
    compensated in reverse order (best effort) and the original error is re-raised.
    Errors that are not application, domain or security errors surface as ProvisioningError.
    """

    def __init__(self, name: str, steps: List[SagaStep]) -> None:
        self.name = name
        self.steps = steps

    async def run(self, context: Optional[SagaContext] = None) -> SagaContext:
        context = {} if context is None else context
        completed: List[SagaStep] = []
        for step in self.steps:
            try:
                context[step.name] = await step.forward(context)
            except Exception as e:
                logger.warning(
                    "saga_step_failed",
                    extra={"saga": self.name, "step": step.name, "error": str(e)},
                )
                await self._compensate(completed, context)
                if isinstance(e, (ApplicationError, DomainError, SecurityError)):
                    raise
                raise ProvisioningError(f"{self.name} failed at step '{step.name}'") from e
            completed.append(step)
        logger.info("saga_completed", extra={"saga": self.name, "steps": [s.name for s in completed]})
        return context

    async def _compensate(self, completed: List[SagaStep], context: SagaContext) -> None:
        for step in reversed(completed):
            if step.backward is None:
                continue
            try:
                await step.backward(context)
                logger.info("saga_step_compensated", extra={"saga": self.name, "step": step.name})
            except Exception as e:
                logger.error(
                    "saga_compensation_failed",
                    extra={"saga": self.name, "step": step.name, "error": str(e)},
                )
