"""Asynchronous operation utilities"""

import asyncio
import logging
import threading
from typing import Any, Callable, Coroutine, Optional, TypeVar

from ..api.exceptions import NetworkOperationError
from ..constants import MSG_RETRY
from ..models.config import RetryPolicy

T = TypeVar('T')

logger = logging.getLogger(__name__)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in sync context

    Args:
        coro: Coroutine to run

    Returns:
        Coroutine result
    """
    loop = None
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop
        pass

    if loop and loop.is_running():
        # Already in async context, run on a fresh loop in a worker thread
        result = None
        exception = None

        def run_in_thread():
            nonlocal result, exception
            new_loop = asyncio.new_event_loop()
            try:
                asyncio.set_event_loop(new_loop)
                result = new_loop.run_until_complete(coro)
            except BaseException as e:
                exception = e
            finally:
                new_loop.close()

        thread = threading.Thread(target=run_in_thread)
        thread.start()
        thread.join()

        if exception:
            raise exception
        return result
    else:
        return asyncio.run(coro)


async def retry_async(coro_func: Callable[..., Coroutine[Any, Any, T]],
                      *args,
                      policy: Optional[RetryPolicy] = None,
                      step: str = "operation",
                      exceptions: tuple = (Exception,),
                      **kwargs) -> T:
    """
    Run an async operation under a retry policy

    Args:
        coro_func: Coroutine function
        *args: Function arguments
        policy: Retry policy (3 attempts, 5s fixed delay by default)
        step: Human readable name of the operation, used in logs and errors
        exceptions: Exceptions that trigger a retry
        **kwargs: Function keyword arguments

    Returns:
        Function result

    Raises:
        NetworkOperationError: If every attempt fails
    """
    policy = policy or RetryPolicy()
    last_exception = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await coro_func(*args, **kwargs)
        except exceptions as e:
            last_exception = e
            if attempt < policy.max_attempts:
                delay = policy.get_retry_delay(attempt)
                logger.warning(MSG_RETRY.format(
                    step=step,
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    delay=delay
                ))
                logger.debug(f"{step} error: {e}")
                await asyncio.sleep(delay)

    raise NetworkOperationError(step, policy.max_attempts, last_exception) from last_exception
