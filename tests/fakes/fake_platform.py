# =============================================================================
# File: tests/fakes/fake_platform.py
# Description: Fake platform clients (community, trade manager, store, friends, auth)
# Pattern: Ports & Adapters - Fake/Stub adapter
# =============================================================================

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from tradebot.core.event_emitter import EventEmitter
from tradebot.infra.platform.handles import PlatformHandles


@dataclass
class CallRecord:
    """Record of a method call for verification."""
    method: str
    args: tuple
    kwargs: Dict[str, Any]
    result: Any = None


class FakeClient:
    """
    Call tracking, configurable failures and an event surface shared by all fakes.

    Usage:
        community = FakeCommunity()
        community.configure_failure("edit_profile", "Profile is private")
        ...
        assert community.was_called("set_cookies")
        community.emit("chatMessage", sender_id, "hi")
    """

    def __init__(self, name: str = "fake"):
        self._calls: List[CallRecord] = []
        self._should_fail: Dict[str, BaseException] = {}
        self._events = EventEmitter(name=name)

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, event: str, handler) -> Any:
        return self._events.on(event, handler)

    def off(self, event: str, handler) -> bool:
        return self._events.off(event, handler)

    def emit(self, event: str, *args: Any) -> bool:
        return self._events.emit(event, *args)

    def listener_count(self, event: str) -> int:
        return self._events.listener_count(event)

    # =========================================================================
    # Test Setup Methods
    # =========================================================================

    def configure_failure(self, method: str, error: Any) -> None:
        """Configure a method to fail (message string or exception instance)."""
        self._should_fail[method] = error if isinstance(error, BaseException) else Exception(error)

    def clear(self) -> None:
        self._calls.clear()
        self._should_fail.clear()

    # =========================================================================
    # Test Verification Methods
    # =========================================================================

    def was_called(self, method: str) -> bool:
        return any(c.method == method for c in self._calls)

    def get_call_count(self, method: str) -> int:
        return sum(1 for c in self._calls if c.method == method)

    def get_calls(self, method: str) -> List[CallRecord]:
        return [c for c in self._calls if c.method == method]

    def get_last_call(self, method: str) -> Optional[CallRecord]:
        calls = self.get_calls(method)
        return calls[-1] if calls else None

    def get_all_calls(self) -> List[CallRecord]:
        return self._calls.copy()

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _record_call(self, method: str, *args, **kwargs) -> None:
        self._calls.append(CallRecord(method=method, args=args, kwargs=kwargs))

    def _check_failure(self, method: str) -> None:
        if method in self._should_fail:
            raise self._should_fail[method]


class FakeGroup:
    """Fake community group handle."""

    def __init__(self, group_id: Any, journal: List[Tuple[str, Any]]):
        self.group_id = group_id
        self._journal = journal

    async def join(self) -> None:
        self._journal.append(("join", self.group_id))

    async def leave(self) -> None:
        self._journal.append(("leave", self.group_id))

    async def kick(self, steam_id: Any) -> None:
        self._journal.append(("kick", steam_id))


class FakeCommunity(FakeClient):
    """Fake CommunityPort."""

    def __init__(self, journal: Optional[List[str]] = None):
        super().__init__(name="fake-community")
        self.cookies: Any = None
        self.profile: Dict[str, Any] = {}
        self.group_actions: List[Tuple[str, Any]] = []
        self.api_key = "FAKE-WEB-API-KEY"
        self._journal = journal if journal is not None else []

    def set_cookies(self, cookies: Any) -> None:
        self._record_call("set_cookies", cookies)
        self._check_failure("set_cookies")
        self.cookies = cookies

    async def edit_profile(self, settings: Dict[str, Any]) -> None:
        self._record_call("edit_profile", settings)
        self._journal.append(f"edit_profile:{settings.get('name')}")
        self._check_failure("edit_profile")
        self.profile.update(settings)

    async def get_group(self, group_id: Any) -> FakeGroup:
        self._record_call("get_group", group_id)
        self._check_failure("get_group")
        return FakeGroup(group_id, self.group_actions)

    async def setup_profile(self) -> None:
        self._record_call("setup_profile")
        self._check_failure("setup_profile")

    async def get_web_api_key(self, domain: str) -> str:
        self._record_call("get_web_api_key", domain)
        self._check_failure("get_web_api_key")
        return self.api_key


class FakeTradeManager(FakeClient):
    """
    Fake TradeOfferManagerPort.

    ``set_cookies`` is the API probe; block it with ``hold_probe()`` to
    control when the probe result lands.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None, journal: Optional[List[str]] = None):
        super().__init__(name="fake-trade-manager")
        self.options = dict(options or {})
        self.cookies: Any = None
        self.api_access: Optional[bool] = None
        self.inventory: List[Any] = []
        self.currencies: List[Any] = []
        self._journal = journal if journal is not None else []
        self._probe_gate: Optional[asyncio.Event] = None

    def hold_probe(self) -> asyncio.Event:
        self._probe_gate = asyncio.Event()
        return self._probe_gate

    async def set_cookies(self, cookies: Any) -> None:
        self._record_call("set_cookies", cookies)
        if self._probe_gate is not None:
            await self._probe_gate.wait()
        self._check_failure("set_cookies")
        self.cookies = cookies

    def set_api_access(self, available: bool) -> None:
        self._record_call("set_api_access", available)
        self.api_access = available

    async def load_inventory(self, app_id: int, context_id: int, tradable_only: bool):
        self._record_call("load_inventory", app_id, context_id, tradable_only)
        self._journal.append(f"load_inventory:{app_id}/{context_id}")
        self._check_failure("load_inventory")
        return list(self.inventory), list(self.currencies)

    async def load_user_inventory(self, steam_id: Any, app_id: int, context_id: int, tradable_only: bool):
        self._record_call("load_user_inventory", steam_id, app_id, context_id, tradable_only)
        self._check_failure("load_user_inventory")
        return list(self.inventory), list(self.currencies)


class FakeStore(FakeClient):
    """Fake StorePort."""

    def __init__(self):
        super().__init__(name="fake-store")
        self.cookies: Any = None
        self.phone_number: Optional[str] = None
        self.verified = False

    def set_cookies(self, cookies: Any) -> None:
        self._record_call("set_cookies", cookies)
        self.cookies = cookies

    async def add_phone_number(self, phone_number: str, bypass_confirmation: bool = True) -> None:
        self._record_call("add_phone_number", phone_number, bypass_confirmation)
        self._check_failure("add_phone_number")
        self.phone_number = phone_number

    async def verify_phone_number(self, code: str) -> None:
        self._record_call("verify_phone_number", code)
        self._check_failure("verify_phone_number")
        self.verified = True

    async def has_phone(self) -> Tuple[bool, Optional[str]]:
        self._record_call("has_phone")
        self._check_failure("has_phone")
        if self.phone_number is None:
            return False, None
        return True, self.phone_number[-4:]


class FakeFriends(FakeClient):
    """Fake FriendsPort."""

    def __init__(self):
        super().__init__(name="fake-friends")
        self.online = False

    def login(self, poll_interval: int, mode: str = "web") -> None:
        self._record_call("login", poll_interval, mode)
        self.online = True

    def logout(self) -> None:
        self._record_call("logout")
        self.online = False


class FakeAuth(FakeClient):
    """Fake AuthenticationPort returning fixed artifacts."""

    def __init__(self, cookies: Any = None, session_id: str = "sess-1"):
        super().__init__(name="fake-auth")
        self.cookies = cookies if cookies is not None else ["sessionid=sess-1", "steamLogin=abc"]
        self.session_id = session_id

    async def login(self, credentials: Dict[str, Any]):
        self._record_call("login", credentials)
        self._check_failure("login")
        return self.cookies, self.session_id


@dataclass
class FakeHandleFactory:
    """
    HandleFactory that builds a fresh bundle of fakes on every call.

    ``built`` keeps every bundle in creation order; ``current`` is the latest.
    All community/trade fakes share ``journal`` for cross-client ordering checks.
    """
    journal: List[str] = field(default_factory=list)
    built: List[PlatformHandles] = field(default_factory=list)
    options: List[Dict[str, Any]] = field(default_factory=list)

    def __call__(self, settings: Any, trade_manager_options: Dict[str, Any]) -> PlatformHandles:
        self.options.append(trade_manager_options)
        handles = PlatformHandles(
            community=FakeCommunity(journal=self.journal),
            trade_manager=FakeTradeManager(trade_manager_options, journal=self.journal),
            store=FakeStore(),
            friends=FakeFriends(),
        )
        self.built.append(handles)
        return handles

    @property
    def current(self) -> PlatformHandles:
        return self.built[-1]
