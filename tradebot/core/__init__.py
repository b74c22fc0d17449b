# =============================================================================
# File: tradebot/core/__init__.py
# Description: Session orchestration core
# =============================================================================

"""
Core

Components:
- EventEmitter: named-event observers, held by composition
- SessionState: status flag plus cookies / session id
- DeferredOperationQueue: named FIFO queues replayed after login
- requires_session: gate that defers capability calls until login
- EventBridge: re-publishes client events on the bot's surface
- SessionManager: login / logout transitions
"""

from tradebot.core.deferred_queue import LOGIN_QUEUE, DeferredOperation, DeferredOperationQueue
from tradebot.core.event_bridge import EventBridge, EventRoute
from tradebot.core.event_emitter import EventEmitter
from tradebot.core.gating import deliver, requires_session
from tradebot.core.session_manager import SessionManager
from tradebot.core.session_state import ApiAccess, SessionState, SessionStatus

__all__ = [
    "LOGIN_QUEUE",
    "DeferredOperation",
    "DeferredOperationQueue",
    "EventBridge",
    "EventRoute",
    "EventEmitter",
    "deliver",
    "requires_session",
    "SessionManager",
    "ApiAccess",
    "SessionState",
    "SessionStatus",
]
