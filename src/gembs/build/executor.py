"""
Step execution.

Steps run strictly in declared order. Each step is broadcast to every bound
plugin that provides it ("compile-debug" dispatches as "compile", i.e. the
``stepCompile`` handler); a step nobody handles is a no-op.

Under StepCompletionPolicy.WAIT the executor waits for every child process
still running after a step's handlers return, so external effects of step N
are complete before step N+1 starts. DETACHED skips the wait.
"""

import logging
from typing import List

from ..config.build_description import BuildDescription
from ..config.options import StepCompletionPolicy
from ..errors import StepFailedError
from ..plugins import base_step_name, step_handler_name
from ..subprocess_utils import wait_for_child_processes
from .build_context import PipelineContext

logger = logging.getLogger(__name__)


def run_step(step: str, args: List[str], context: PipelineContext) -> int:
    """Dispatch one step to every plugin that provides it.

    Returns:
        Number of plugins that handled the step
    """
    base = base_step_name(step)
    handled = 0
    for plugin in context.loaded_plugins:
        if plugin.provides_step(base):
            logger.debug(f"{plugin.key}.{step_handler_name(step)}({args})")
            plugin.run_step(step, args)
            handled += 1

    if handled == 0:
        logger.debug(f"No plugin handles step '{step}' ({step_handler_name(step)})")
    return handled


def await_step(step: str, context: PipelineContext) -> None:
    """Apply the step completion policy after a step.

    Raises:
        StepFailedError: Under WAIT, if processes outlive the step timeout
    """
    if context.options.step_completion is not StepCompletionPolicy.WAIT:
        return
    alive = wait_for_child_processes(timeout=context.options.step_timeout)
    if alive:
        pids = ", ".join(str(proc.pid) for proc in alive)
        raise StepFailedError(step, f"processes still running after {context.options.step_timeout}s: {pids}")


def execute_steps(description: BuildDescription, context: PipelineContext) -> List[str]:
    """Run every resolved build step in declared order.

    Returns:
        Names of the steps that at least one plugin handled
    """
    executed: List[str] = []
    for step, args in description.build.items():
        logger.info(f"Running step '{step}'")
        if run_step(step, args, context):
            executed.append(step)
        await_step(step, context)
    return executed
