# =============================================================================
# File: tradebot/core/session_manager.py
# Description: Session lifecycle - login transition, logout, API probe
# =============================================================================

"""
SessionManager

Owns the session state, the deferred operation queue, the event bridge and
the current bundle of platform client handles. It is the only writer of
SessionState.

Login transition (begin_session):
    1. Identical artifacts on an authenticated session -> no-op
    2. Store artifacts, mark AUTHENTICATED, start web chat, push cookies to
       the clients, start the Web API probe in the background
    3. Attach the event bridge to the current handles (idempotent)
    4. Drain the "login" queue (FIFO, each entry awaited)
    5. Emit "loggedIn", unless the session ended during the replay

A transition that fails before the replay leaves the session UNAUTHENTICATED.

Logout (end_session):
    detach bridge -> fail pending deferred entries -> clear artifacts ->
    rebuild handles -> UNAUTHENTICATED
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Dict, Optional

from tradebot.common.exceptions.exceptions import SessionEndedError, SessionStateError
from tradebot.config.bot_config import BotSettings
from tradebot.config.logging_config import get_logger
from tradebot.core.deferred_queue import LOGIN_QUEUE, DeferredOperationQueue
from tradebot.core.event_bridge import EventBridge, EventMap
from tradebot.core.event_emitter import EventEmitter
from tradebot.core.session_state import ApiAccess, SessionState, SessionStatus
from tradebot.infra.platform.handles import HandleFactory, PlatformHandles, build_handles

log = get_logger("tradebot.core.session_manager")


def _log_session_expired(error: Any = None) -> Any:
    log.debug(f"Login session expired due to {error}")
    return error


COMMUNITY_EVENTS: Dict[str, Any] = {
    "chatTyping": None,
    "chatLoggedOn": None,
    "chatLogOnFailed": None,
    "chatMessage": None,
    "sessionExpired": _log_session_expired,
}

TRADE_OFFER_EVENTS: Dict[str, Any] = {
    "sentOfferChanged": ["offerChanged", "sentOfferChanged"],
    "receivedOfferChanged": None,
    "offerList": None,
    "newOffer": None,
    "realTimeTradeConfirmationRequired": None,
    "realTimeTradeCompleted": None,
    "sentOfferCanceled": None,
}


class SessionManager:
    """Session state transitions for one account"""

    def __init__(
        self,
        settings: BotSettings,
        handle_factory: HandleFactory,
        events: Optional[EventEmitter] = None,
        owner: Any = None,
        account_name: str = "",
    ):
        self.settings = settings
        self.events = events or EventEmitter(name="session")
        self.state = SessionState()
        self.queue = DeferredOperationQueue()
        self.bridge = EventBridge(self.events)
        self.event_maps: Dict[str, EventMap] = {
            "community": copy.copy(COMMUNITY_EVENTS),
            "trade_manager": copy.copy(TRADE_OFFER_EVENTS),
        }
        self.probe_task: Optional[asyncio.Task] = None

        self._handle_factory = handle_factory
        self._owner = owner if owner is not None else self
        self._account_name = account_name
        self.handles: PlatformHandles = build_handles(handle_factory, settings)

    # =========================================================================
    # State
    # =========================================================================

    def is_authenticated(self) -> bool:
        return self.state.authenticated

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def api_access(self) -> ApiAccess:
        return self.state.api_access

    def mark_authenticating(self) -> None:
        self.state.mark_authenticating()

    def mark_failed(self) -> None:
        self.state.mark_failed()

    # =========================================================================
    # Login transition
    # =========================================================================

    async def begin_session(self, cookies: Any, session_id: str) -> bool:
        """
        Establish the session with the given artifacts.

        Raises:
            SessionStateError: cookies or session_id missing; nothing is touched

        Any other failure during the transition returns the session to
        UNAUTHENTICATED before the error propagates.

        Returns:
            False if the session was already established with these artifacts,
            or was ended while the login queue was replaying
        """
        if self.state.authenticated and self.state.matches(cookies, session_id):
            log.debug(f"Session for {self._account_name!r} already established - ignoring duplicate login")
            return False
        if cookies is None or session_id is None:
            raise SessionStateError("Cannot authenticate without cookies and session_id")

        handles = self.handles
        try:
            if handles.friends is not None:
                handles.friends.login(self.settings.friends_poll_interval, "web")

            log.debug(f"Logged into {self._account_name!r}")
            if not self.state.store(cookies, session_id):
                log.debug("Session artifacts unchanged - keeping stored values")
            self.state.mark_authenticated()

            self._propagate_cookies(handles, cookies)
            self.probe_task = asyncio.create_task(self._probe_api_access(handles, cookies))

            self.bridge.attach(handles.community, self.event_maps["community"])
            self.bridge.attach(handles.trade_manager, self.event_maps["trade_manager"])
        except Exception:
            self._abort_transition(handles)
            raise

        await self.queue.drain(LOGIN_QUEUE)

        if handles is not self.handles or not self.state.authenticated:
            log.info(f"Session for {self._account_name!r} ended during login replay - loggedIn not emitted")
            return False

        self.events.emit("loggedIn", self._owner)
        return True

    def _abort_transition(self, handles: PlatformHandles) -> None:
        if self.probe_task is not None and not self.probe_task.done():
            self.probe_task.cancel()
        self.probe_task = None
        self.bridge.detach(handles.community)
        self.bridge.detach(handles.trade_manager)
        self.state.reset()
        log.warning(f"Login transition for {self._account_name!r} failed - session reset")

    def _propagate_cookies(self, handles: PlatformHandles, cookies: Any) -> None:
        for name, handle in handles.cookie_consumers():
            handle.set_cookies(cookies)
            log.debug(f"Cookies propagated to {name}")

    async def _probe_api_access(self, handles: PlatformHandles, cookies: Any) -> ApiAccess:
        """Hand cookies to the trade manager, which fetches the Web API key."""
        try:
            await handles.trade_manager.set_cookies(cookies)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            access = ApiAccess.UNAVAILABLE
            log.debug(
                f"Failed to get API key - trade overflow checking and offer listing disabled "
                f"for {self._account_name!r}: {e}"
            )
        else:
            access = ApiAccess.AVAILABLE

        if handles is not self.handles or not self.state.authenticated:
            log.debug("API probe finished after the session changed - result ignored")
            return access

        self.state.api_access = access
        handles.trade_manager.set_api_access(access is ApiAccess.AVAILABLE)
        return access

    # =========================================================================
    # Logout
    # =========================================================================

    async def end_session(self) -> None:
        """
        Tear the session down and start over with fresh client handles.

        Safe to call when never authenticated. Deferred operations still
        pending are dropped and their callbacks receive SessionEndedError.
        """
        handles = self.handles
        if handles.friends is not None:
            handles.friends.logout()

        if self.probe_task is not None and not self.probe_task.done():
            self.probe_task.cancel()
        self.probe_task = None

        detached = self.bridge.detach_all()

        await self.queue.discard(error=SessionEndedError())

        was_authenticated = self.state.authenticated
        self.state.reset()
        self.handles = build_handles(self._handle_factory, self.settings)

        if was_authenticated:
            log.info(f"Logged out {self._account_name!r} ({detached} event source(s) detached)")
