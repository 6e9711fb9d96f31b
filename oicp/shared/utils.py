import inspect
import logging
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)


async def notify(callbacks: Iterable[Callable[[Any], Any]], argument: Any):
    """
    Calls each callback with 'argument', awaiting the coroutine ones. A
    failing callback is logged and does not keep the others from running.
    """
    for callback in list(callbacks):
        try:
            outcome = callback(argument)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            logger.exception(f"Callback {callback!r} failed: {exc}")
