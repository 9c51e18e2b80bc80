from typing import Awaitable, Callable, Union
import inspect
import time

import structlog

from smartagent.errors import ExecutorError

logger = structlog.get_logger(__name__)

# Takes the composed prompt, returns the generated text
Executor = Callable[[str], Union[str, Awaitable[str]]]


async def run_executor(executor: Executor, prompt: str) -> str:
    """Call an injected executor, sync or async; any failure comes back as ExecutorError"""

    start_time = time.time()
    try:
        output = executor(prompt)
        if inspect.isawaitable(output):
            output = await output
    except Exception as e:
        logger.warning("Executor failed", error=str(e), error_type=type(e).__name__)
        raise ExecutorError(e) from e

    if not isinstance(output, str):
        raise ExecutorError(TypeError(f"Executor returned {type(output).__name__}, expected str"))

    logger.debug("Executor finished", duration_ms=round((time.time() - start_time) * 1000, 2), chars=len(output))
    return output
