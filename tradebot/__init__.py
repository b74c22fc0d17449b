# =============================================================================
# File: tradebot/__init__.py
# Description: tradebot - account session orchestration
# =============================================================================

"""
tradebot

Modules:
- bot: Bot, the public per-account orchestrator
- core: event emitter, session state, deferred queue, event bridge, session manager
- infra.platform: ports for the external clients, community actions, manual requests
- config: settings (pydantic-settings) and logging (rich)
"""

from tradebot.bot import Bot
from tradebot.core.session_state import ApiAccess, SessionStatus
from tradebot.infra.platform.handles import PlatformHandles

__version__ = "0.1.0"

__all__ = [
    "Bot",
    "ApiAccess",
    "SessionStatus",
    "PlatformHandles",
]
