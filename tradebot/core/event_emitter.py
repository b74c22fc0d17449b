# =============================================================================
# File: tradebot/core/event_emitter.py
# Description: In-process publish/subscribe held by composition
# =============================================================================

"""
EventEmitter

Observer lists keyed by event name. Components own an emitter and expose
``on``/``off``/``emit`` as part of their own interface instead of inheriting
from a shared base.

Dispatch rules:
    - Handlers run synchronously, in registration order
    - The handler list is snapshotted before dispatch, so handlers added or
      removed during an emit take effect from the next emit
    - A failing handler is logged; later handlers still run
    - A handler returning an awaitable is scheduled on the running loop
"""

from __future__ import annotations

import asyncio
import inspect
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Set

from tradebot.config.logging_config import get_logger

log = get_logger("tradebot.core.event_emitter")

Handler = Callable[..., Any]


class EventEmitter:
    """Named-event observer registry"""

    def __init__(self, name: str = "emitter"):
        self.name = name
        self._listeners: Dict[str, List[Handler]] = OrderedDict()
        self._pending_tasks: Set[asyncio.Task] = set()

    def on(self, event: str, handler: Handler) -> Handler:
        """Register a handler; returns it so it can be used as a decorator."""
        if not callable(handler):
            raise TypeError(f"Handler for '{event}' must be callable")
        self._listeners.setdefault(event, []).append(handler)
        return handler

    add_listener = on

    def once(self, event: str, handler: Handler) -> Handler:
        """Register a handler that is removed before its first invocation."""
        wrapper = _OnceWrapper(self, event, handler)
        self.on(event, wrapper)
        return wrapper

    def off(self, event: str, handler: Handler) -> bool:
        """Remove the most recent registration of ``handler`` for ``event``."""
        handlers = self._listeners.get(event)
        if not handlers:
            return False
        for index in range(len(handlers) - 1, -1, -1):
            registered = handlers[index]
            # Bound methods are new objects on every attribute access
            if registered == handler or (isinstance(registered, _OnceWrapper) and registered.handler == handler):
                del handlers[index]
                if not handlers:
                    del self._listeners[event]
                return True
        return False

    remove_listener = off

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def listeners(self, event: str) -> List[Handler]:
        return list(self._listeners.get(event, ()))

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def event_names(self) -> List[str]:
        return list(self._listeners.keys())

    def emit(self, event: str, *args: Any) -> bool:
        """
        Dispatch ``event`` to its handlers.

        Returns:
            True if at least one handler was registered
        """
        handlers = self.listeners(event)
        if not handlers:
            return False

        for handler in handlers:
            try:
                result = handler(*args)
            except Exception as e:
                log.error(f"[{self.name}] Handler for '{event}' failed: {e}", exc_info=True)
                continue

            if inspect.isawaitable(result):
                self._schedule(event, result)

        return True

    def _schedule(self, event: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: nothing can drive the coroutine
            log.warning(f"[{self.name}] Async handler for '{event}' dropped: no running event loop")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending_tasks.add(task)
        task.add_done_callback(lambda t: self._on_task_done(event, t))

    def _on_task_done(self, event: str, task: asyncio.Task) -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log.error(f"[{self.name}] Async handler for '{event}' failed: {error}", exc_info=error)

    async def wait_for_handlers(self) -> None:
        """Wait for scheduled async handlers (shutdown and tests)."""
        while self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)


class _OnceWrapper:
    """Removes itself from the emitter before delegating"""

    def __init__(self, emitter: EventEmitter, event: str, handler: Handler):
        self.emitter = emitter
        self.event = event
        self.handler = handler

    def __call__(self, *args: Any) -> Any:
        self.emitter.off(self.event, self)
        return self.handler(*args)
