# =============================================================================
# File: tradebot/core/deferred_queue.py
# Description: Named FIFO queues of operations deferred until login
# =============================================================================

"""
Deferred Operation Queue

Operations requested before the session is established are captured with
the exact arguments they were called with and replayed once, in order,
after login.

    queue = DeferredOperationQueue()
    queue.enqueue("login", bot.change_name, ("Alice", ""), callback=cb)
    ...
    await queue.drain("login")

Semantics:
    - Queues are created on first enqueue
    - Replay is strictly FIFO; awaitable results are awaited before the next
      entry runs
    - Each entry is removed before it is invoked, so it is consumed exactly
      once and a nested drain of the same queue sees nothing to do
    - A failing entry is isolated: the error goes to that entry's callback
      and the drain continues
    - Discarding a queue while it drains stops that drain after the entry in
      flight; entries enqueued afterwards wait for the next drain
"""

from __future__ import annotations

import inspect
import time
from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Tuple

from tradebot.config.logging_config import get_logger

log = get_logger("tradebot.core.deferred_queue")

LOGIN_QUEUE = "login"

Callback = Callable[..., Any]


@dataclass(frozen=True)
class DeferredOperation:
    """A suspended call: operation plus the arguments captured at call time"""
    operation: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    callback: Optional[Callback] = None
    queue_name: str = LOGIN_QUEUE
    enqueued_at: float = field(default_factory=time.time)

    @property
    def name(self) -> str:
        return getattr(self.operation, "__qualname__", repr(self.operation))

    async def invoke(self) -> Any:
        result = self.operation(*self.args, **self.kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def fail(self, error: BaseException) -> None:
        """Deliver ``error`` to the captured callback, if there is one."""
        if self.callback is None:
            log.warning(f"Deferred {self.name} failed with no callback to notify: {error}")
            return
        try:
            result = self.callback(error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            log.error(f"Callback of deferred {self.name} raised: {e}", exc_info=True)


class DeferredOperationQueue:
    """Mapping of queue name to an ordered deque of deferred operations"""

    def __init__(self):
        self._queues: Dict[str, Deque[DeferredOperation]] = {}
        self._draining: Dict[str, Deque[DeferredOperation]] = {}

    def enqueue(
        self,
        queue_name: str,
        operation: Callable[..., Any],
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> DeferredOperation:
        """Capture ``operation`` with its arguments at the back of ``queue_name``."""
        entry = DeferredOperation(
            operation=operation,
            args=tuple(args),
            kwargs=MappingProxyType(dict(kwargs or {})),
            callback=callback,
            queue_name=queue_name,
        )
        self._queues.setdefault(queue_name, deque()).append(entry)
        log.debug(f"Deferred {entry.name} on queue '{queue_name}' (pending={len(self._queues[queue_name])})")
        return entry

    async def drain(self, queue_name: str, callback: Optional[Callback] = None) -> int:
        """
        Replay every entry of ``queue_name`` in FIFO order.

        Never raises. ``callback(None)`` is invoked once the queue is empty.

        Returns:
            Number of entries replayed
        """
        entries = self._queues.get(queue_name)
        if entries is not None and self._draining.get(queue_name) is entries:
            log.debug(f"Queue '{queue_name}' is already draining - nested drain skipped")
            return 0

        replayed = 0
        if entries is not None:
            self._draining[queue_name] = entries
        try:
            # Stop once the queue was discarded and possibly replaced mid-drain
            while entries and self._queues.get(queue_name) is entries:
                entry = entries.popleft()
                replayed += 1
                try:
                    await entry.invoke()
                except Exception as e:
                    log.error(f"Replay of {entry.name} from queue '{queue_name}' failed: {e}", exc_info=True)
                    await entry.fail(e)
            if entries is not None and not entries and self._queues.get(queue_name) is entries:
                del self._queues[queue_name]
        finally:
            if entries is not None and self._draining.get(queue_name) is entries:
                del self._draining[queue_name]

        if replayed:
            log.info(f"Replayed {replayed} deferred operation(s) from queue '{queue_name}'")

        if callback is not None:
            try:
                result = callback(None)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                log.error(f"Drain completion callback for '{queue_name}' raised: {e}", exc_info=True)

        return replayed

    def has(self, queue_name: str) -> bool:
        """True if ``queue_name`` has pending entries."""
        return bool(self._queues.get(queue_name))

    def pending(self, queue_name: str) -> int:
        return len(self._queues.get(queue_name, ()))

    def queue_names(self) -> List[str]:
        return [name for name, entries in self._queues.items() if entries]

    def is_draining(self, queue_name: str) -> bool:
        return queue_name in self._draining

    async def discard(
        self,
        queue_name: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> List[DeferredOperation]:
        """
        Remove pending entries from one queue (or all queues).

        When ``error`` is given each removed entry's callback receives it.
        """
        names = [queue_name] if queue_name is not None else list(self._queues)
        removed: List[DeferredOperation] = []
        for name in names:
            entries = self._queues.pop(name, None)
            if entries:
                removed.extend(entries)
                entries.clear()

        if removed:
            log.info(f"Discarded {len(removed)} deferred operation(s)")

        if error is not None:
            for entry in removed:
                await entry.fail(error)

        return removed
