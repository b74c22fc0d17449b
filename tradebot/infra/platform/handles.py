# =============================================================================
# File: tradebot/infra/platform/handles.py
# Description: Replaceable bundle of external client instances
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from tradebot.config.bot_config import BotSettings
from tradebot.infra.platform.ports import CommunityPort, FriendsPort, StorePort, TradeOfferManagerPort


@dataclass
class PlatformHandles:
    """
    Client instances owned by one session cycle.

    Logout discards the whole bundle and builds a new one through the
    HandleFactory; nothing from the old bundle is reused.
    """
    community: CommunityPort
    trade_manager: TradeOfferManagerPort
    store: StorePort
    friends: Optional[FriendsPort] = None

    def cookie_consumers(self) -> Iterator[Tuple[str, Any]]:
        """Handles whose ``set_cookies`` is synchronous."""
        yield "community", self.community
        yield "store", self.store


# (settings, trade_manager_options) -> PlatformHandles
HandleFactory = Callable[[BotSettings, Dict[str, Any]], PlatformHandles]


def trade_manager_options(settings: BotSettings) -> Dict[str, Any]:
    """Options handed to the trade offer manager when a bundle is built."""
    return {
        "cancel_time": settings.trade_cancel_time,
        "pending_cancel_time": settings.trade_pending_cancel_time,
        "cancel_offer_count": settings.trade_cancel_offer_count if settings.cancel_trade_on_overflow else None,
        "cancel_offer_count_min_age": settings.trade_cancel_offer_count_min_age,
        "language": settings.language,
        "poll_interval": settings.trade_poll_interval,
        "api_key": settings.api_key.get_secret_value() or None,
    }


def build_handles(factory: HandleFactory, settings: BotSettings) -> PlatformHandles:
    return factory(settings, trade_manager_options(settings))
