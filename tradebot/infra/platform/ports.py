# =============================================================================
# File: tradebot/infra/platform/ports.py
# Description: Port interfaces for the external platform clients
# Pattern: Hexagonal Architecture / Ports & Adapters
# =============================================================================

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class EventSource(Protocol):
    """Anything the EventBridge can subscribe to"""

    def on(self, event: str, handler: Callable[..., Any]) -> Any:
        ...

    def off(self, event: str, handler: Callable[..., Any]) -> Any:
        ...


@runtime_checkable
class AuthenticationPort(EventSource, Protocol):
    """
    Port: credential / two-factor exchange

    Implemented outside this package. ``login`` raises on failure.

    Events:
        updatedAccountDetails - account details refreshed
    """

    async def login(self, credentials: Dict[str, Any]) -> Tuple[Any, str]:
        """Exchange credentials for (cookies, session_id)."""
        ...


@runtime_checkable
class GroupPort(Protocol):
    """A community group handle"""

    async def join(self) -> None:
        ...

    async def leave(self) -> None:
        ...

    async def kick(self, steam_id: Any) -> None:
        ...


@runtime_checkable
class CommunityPort(EventSource, Protocol):
    """
    Port: community web client

    Events:
        chatMessage(sender_id, message), chatTyping(sender_id), chatLoggedOn(),
        chatLogOnFailed(error, fatal), sessionExpired(error)
    """

    def set_cookies(self, cookies: Any) -> None:
        ...

    async def edit_profile(self, settings: Dict[str, Any]) -> None:
        ...

    async def get_group(self, group_id: Any) -> GroupPort:
        ...

    async def setup_profile(self) -> None:
        ...

    async def get_web_api_key(self, domain: str) -> str:
        ...


@runtime_checkable
class TradeOfferManagerPort(EventSource, Protocol):
    """
    Port: trade offer manager

    ``set_cookies`` doubles as the Web API capability probe: it raises when
    the API key cannot be obtained.

    Events:
        newOffer(offer), sentOfferChanged(offer, old_state),
        receivedOfferChanged(offer, old_state), sentOfferCanceled(offer),
        realTimeTradeConfirmationRequired(offer), realTimeTradeCompleted(offer),
        offerList(filter, sent, received)
    """

    async def set_cookies(self, cookies: Any) -> None:
        ...

    def set_api_access(self, available: bool) -> None:
        ...

    async def load_inventory(
        self, app_id: int, context_id: int, tradable_only: bool
    ) -> Tuple[List[Any], List[Any]]:
        ...

    async def load_user_inventory(
        self, steam_id: Any, app_id: int, context_id: int, tradable_only: bool
    ) -> Tuple[List[Any], List[Any]]:
        ...


@runtime_checkable
class StorePort(Protocol):
    """Port: store client (phone number management)"""

    def set_cookies(self, cookies: Any) -> None:
        ...

    async def add_phone_number(self, phone_number: str, bypass_confirmation: bool = True) -> None:
        ...

    async def verify_phone_number(self, code: str) -> None:
        ...

    async def has_phone(self) -> Tuple[bool, Optional[str]]:
        """(has_phone, last_digits)"""
        ...


@runtime_checkable
class FriendsPort(Protocol):
    """Port: friends / web chat client"""

    def login(self, poll_interval: int, mode: str = "web") -> None:
        ...

    def logout(self) -> None:
        ...
