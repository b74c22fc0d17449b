# =============================================================================
# File: tradebot/core/gating.py
# Description: Session gate for capability methods + callback delivery
# =============================================================================

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable, Optional

from tradebot.config.logging_config import get_logger
from tradebot.core.deferred_queue import LOGIN_QUEUE

log = get_logger("tradebot.core.gating")

CALLBACK_PARAMETER = "callback"


def requires_session(queue_name: str = LOGIN_QUEUE):
    """
    Defer an async capability method until the session is established.

    The owning object must expose ``_session`` (a SessionManager). While
    unauthenticated the call - the method itself plus its full argument list,
    callback included - is pushed onto ``queue_name`` and ``None`` is returned
    without running the body or touching the callback. On replay the call
    passes through this gate again and runs.

    Usage:
        class Profile:
            @requires_session("login")
            async def change_name(self, new_name, name_prefix=None, callback=None):
                ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"@requires_session expects an async method, got {func.__qualname__}")

        signature = inspect.signature(func)

        @wraps(func)
        async def gated(self, *args, **kwargs):
            session = self._session
            if session.is_authenticated():
                return await func(self, *args, **kwargs)

            session.queue.enqueue(
                queue_name,
                getattr(self, func.__name__),
                args,
                kwargs,
                callback=_find_callback(signature, self, args, kwargs),
            )
            log.debug(f"Not logged in - {func.__qualname__} deferred to queue '{queue_name}'")
            return None

        gated.__gated_queue__ = queue_name
        return gated

    return decorator


def _find_callback(signature: inspect.Signature, owner: Any, args: tuple, kwargs: dict) -> Optional[Callable]:
    if CALLBACK_PARAMETER not in signature.parameters:
        return None
    try:
        bound = signature.bind(owner, *args, **kwargs)
    except TypeError:
        return None
    callback = bound.arguments.get(CALLBACK_PARAMETER)
    return callback if callable(callback) else None


async def deliver(callback: Optional[Callable[..., Any]], error: Optional[BaseException], *results: Any) -> None:
    """Invoke a completion callback (sync or async) with ``error`` and results."""
    if callback is None:
        if error is not None:
            log.warning(f"Operation failed with no callback to notify: {error}")
        return
    try:
        outcome = callback(error, *results)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception as e:
        log.error(f"Completion callback raised: {e}", exc_info=True)
