# =============================================================================
# File: tradebot/bot.py
# Description: Bot - public orchestrator for one trading account
# =============================================================================

"""
Bot

Public surface for one account. Composes the outward EventEmitter, the
SessionManager (state, deferred queue, event bridge, client handles), the
community capability facade and the manual request client.

Capability calls made before login are deferred and replayed in call order
once the session is established:

    bot = Bot("alice", "secret", handle_factory=make_handles, auth=auth_adapter)
    bot.on("loggedIn", on_ready)
    await bot.change_name("Alice", "[TAG]", callback=on_renamed)  # deferred
    await bot.login()                                            # replays, then loggedIn
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Union

import httpx

from tradebot.common.exceptions.exceptions import AuthenticationError, CredentialsError
from tradebot.common.steam_id import SteamID
from tradebot.config.bot_config import BotSettings
from tradebot.config.logging_config import get_console, get_logger, log_error_box
from tradebot.core.deferred_queue import DeferredOperation
from tradebot.core.event_bridge import EventBridge
from tradebot.core.event_emitter import EventEmitter, Handler
from tradebot.core.gating import deliver, requires_session
from tradebot.core.session_manager import SessionManager
from tradebot.core.session_state import ApiAccess, SessionState
from tradebot.infra.platform.community_actions import CommunityActions
from tradebot.infra.platform.handles import HandleFactory
from tradebot.infra.platform.ports import AuthenticationPort
from tradebot.infra.platform.request_client import RequestClient
from tradebot.infra.platform.results import OperationResult

log = get_logger("tradebot.bot")

AUTH_EVENTS = {"updatedAccountDetails": None}


def _has_two_factor_material(details: Mapping[str, Any]) -> bool:
    oauth_token = details.get("oauth_token", details.get("oAuthToken"))
    return bool(details.get("steamguard")) and bool(oauth_token)


class Bot:
    """One trading account: session lifecycle, deferred capabilities, events"""

    def __init__(
        self,
        username: Any,
        password: Any,
        details: Optional[Mapping[str, Any]] = None,
        settings: Union[BotSettings, Mapping[str, Any], None] = None,
        *,
        handle_factory: HandleFactory,
        auth: Optional[AuthenticationPort] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        details = dict(details or {})
        if not isinstance(username, str) or not isinstance(password, str):
            if not _has_two_factor_material(details):
                raise CredentialsError("Invalid username/password or missing oAuthToken/Steamguard code")

        self.username = username
        self.password = password
        self.details = details
        self.display_name: Optional[str] = details.get("displayName", details.get("display_name"))
        self.settings = settings if isinstance(settings, BotSettings) else BotSettings.from_mapping(settings)

        self._rate_limited = True
        self._chatting: Any = None

        self._events = EventEmitter(name=f"bot:{username}")
        self._session = SessionManager(
            self.settings,
            handle_factory,
            events=self._events,
            owner=self,
            account_name=self.get_account_name(),
        )
        self._session.event_maps["community"]["chatMessage"] = self._echo_chat_message

        self._auth = auth
        self._auth_bridge = EventBridge(self._events)
        if auth is not None:
            self._auth_bridge.attach(auth, AUTH_EVENTS)

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.settings.http_timeout)
        self.community = CommunityActions(self._session, self._http, account_name=self.get_account_name())
        self.request = RequestClient(self.settings, self._http)

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, event: str, handler: Handler) -> Handler:
        return self._events.on(event, handler)

    def once(self, event: str, handler: Handler) -> Handler:
        return self._events.once(event, handler)

    def off(self, event: str, handler: Handler) -> bool:
        return self._events.off(event, handler)

    def emit(self, event: str, *args: Any) -> bool:
        return self._events.emit(event, *args)

    @property
    def events(self) -> EventEmitter:
        return self._events

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_account_name(self) -> Any:
        return self.username

    def get_display_name(self) -> Optional[str]:
        return self.display_name or None

    @property
    def rate_limited(self) -> bool:
        """Whether the account is rate limited by the Web API"""
        return self._rate_limited

    @rate_limited.setter
    def rate_limited(self, value: bool) -> None:
        self._rate_limited = bool(value)

    def set_chatting(self, chatting_user_info: Any) -> None:
        """Set the user we are chatting with (``{"username": ..., "sid": ...}``)."""
        self._chatting = chatting_user_info

    def get_user(self, steam_id: Any) -> SteamID:
        """Parse a SteamID2, SteamID3 or SteamID64 into a SteamID."""
        return SteamID.parse(steam_id)

    def is_logged_in(self) -> bool:
        return self._session.is_authenticated()

    @property
    def session(self) -> SessionState:
        return self._session.state

    @property
    def session_manager(self) -> SessionManager:
        return self._session

    @property
    def api_access(self) -> ApiAccess:
        return self._session.api_access

    # =========================================================================
    # Deferred queue
    # =========================================================================

    def add_to_queue(self, queue_name: str, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> DeferredOperation:
        """Defer ``operation(*args, **kwargs)`` until ``queue_name`` is processed."""
        return self._session.queue.enqueue(queue_name, operation, args, kwargs)

    async def process_queue(self, queue_name: str, callback: Optional[Callable[..., Any]] = None) -> int:
        return await self._session.queue.drain(queue_name, callback)

    # =========================================================================
    # Profile
    # =========================================================================

    @requires_session("login")
    async def change_name(self, new_name: str, name_prefix: Optional[str] = None, callback=None) -> OperationResult:
        """Change the profile name to ``name_prefix + new_name``."""
        try:
            await self._session.handles.community.edit_profile({"name": (name_prefix or "") + new_name})
        except Exception as e:
            log.debug(f"Failed to change name of {self.get_account_name()!r}: {e}")
            await deliver(callback, e)
            return OperationResult.failed(e)

        self.display_name = new_name
        self.emit("updatedAccountDetails")
        await deliver(callback, None)
        return OperationResult.ok({"display_name": new_name})

    async def setup_profile(self, callback=None) -> Optional[OperationResult]:
        return await self.community.setup_profile(callback=callback)

    # =========================================================================
    # Inventory
    # =========================================================================

    @requires_session("login")
    async def get_inventory(self, app_id: int, context_id: int, tradable_only: bool = True,
                            callback=None) -> OperationResult:
        """Load this account's inventory; ``callback(error, inventory, currencies)``."""
        try:
            inventory, currencies = await self._session.handles.trade_manager.load_inventory(
                app_id, context_id, tradable_only
            )
        except Exception as e:
            await deliver(callback, e, None, None)
            return OperationResult.failed(e)

        await deliver(callback, None, inventory, currencies)
        return OperationResult.ok({"inventory": inventory, "currencies": currencies})

    @requires_session("login")
    async def get_user_inventory(self, steam_id: Any, app_id: int, context_id: int, tradable_only: bool = True,
                                 callback=None) -> OperationResult:
        """Load another user's inventory; ``callback(error, inventory, currencies)``."""
        try:
            inventory, currencies = await self._session.handles.trade_manager.load_user_inventory(
                steam_id, app_id, context_id, tradable_only
            )
        except Exception as e:
            await deliver(callback, e, None, None)
            return OperationResult.failed(e)

        await deliver(callback, None, inventory, currencies)
        return OperationResult.ok({"inventory": inventory, "currencies": currencies})

    # =========================================================================
    # Phone
    # =========================================================================

    @requires_session("login")
    async def add_phone_number(self, phone_number: str, callback=None) -> OperationResult:
        try:
            await self._session.handles.store.add_phone_number(phone_number, True)
        except Exception as e:
            await deliver(callback, e)
            return OperationResult.failed(e)

        await deliver(callback, None)
        return OperationResult.ok()

    @requires_session("login")
    async def verify_phone_number(self, code: str, callback=None) -> OperationResult:
        try:
            await self._session.handles.store.verify_phone_number(code)
        except Exception as e:
            await deliver(callback, e)
            return OperationResult.failed(e)

        await deliver(callback, None)
        return OperationResult.ok()

    @requires_session("login")
    async def has_phone(self, callback=None) -> OperationResult:
        """``callback(error, has_phone, last_digits)``"""
        try:
            has_phone, last_digits = await self._session.handles.store.has_phone()
        except Exception as e:
            await deliver(callback, e, None, None)
            return OperationResult.failed(e)

        await deliver(callback, None, has_phone, last_digits)
        return OperationResult.ok({"has_phone": has_phone, "last_digits": last_digits})

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def _credentials(self, auth_code: Optional[str]) -> Dict[str, Any]:
        credentials = {
            "account_name": self.username,
            "password": self.password,
            "steamguard": self.details.get("steamguard"),
            "oauth_token": self.details.get("oauth_token", self.details.get("oAuthToken")),
        }
        if auth_code is not None:
            credentials["auth_code"] = auth_code
        return {key: value for key, value in credentials.items() if value is not None}

    async def login(self, auth_code: Optional[str] = None, callback=None) -> bool:
        """
        Authenticate through the auth adapter, then establish the session.

        Failures go to ``callback`` only; the session returns to
        UNAUTHENTICATED and nothing queued is replayed.
        """
        self._session.mark_authenticating()
        try:
            if self._auth is None:
                raise AuthenticationError("No authentication adapter configured")
            cookies, session_id = await self._auth.login(self._credentials(auth_code))
        except Exception as e:
            self._session.mark_failed()
            log.error(f"Login failed for {self.get_account_name()!r}: {e}")
            await deliver(callback, e)
            return False

        return await self.logged_in_account(cookies, session_id, callback)

    async def logged_in_account(self, cookies: Any, session_id: str, callback=None) -> bool:
        """Establish the session from artifacts obtained elsewhere."""
        try:
            await self._session.begin_session(cookies, session_id)
        except Exception as e:
            self._session.mark_failed()
            log_error_box(log, f"Failed to establish session for {self.get_account_name()!r}: {e}", "SessionError")
            await deliver(callback, e)
            return False

        await deliver(callback, None)
        return True

    async def logout_account(self) -> None:
        await self._session.end_session()

    async def close(self) -> None:
        """Log out and close the HTTP client if this bot created it."""
        await self.logout_account()
        if self._auth is not None:
            self._auth_bridge.detach(self._auth)
        if self._owns_http:
            await self._http.aclose()

    # =========================================================================
    # Settings
    # =========================================================================

    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get_setting(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        self.settings.set_setting(key, value)

    def delete_setting(self, key: str) -> bool:
        return self.settings.delete_setting(key)

    # =========================================================================
    # Chat
    # =========================================================================

    def _echo_chat_message(self, sender_id: Any, message: Any = None):
        chatting = self._chatting
        if chatting is not None:
            sid = chatting.get("sid") if isinstance(chatting, Mapping) else getattr(chatting, "sid", None)
            if sid is not None and str(sender_id) == str(sid):
                name = chatting.get("username") if isinstance(chatting, Mapping) else getattr(chatting, "username", "")
                get_console().print(f"\n{name}: {message}", style="chat", markup=False, highlight=False)
        return sender_id, message

    def __repr__(self) -> str:
        return f"Bot(account={self.get_account_name()!r}, status={self._session.status.value})"
