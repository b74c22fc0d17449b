# =============================================================================
# File: tradebot/config/__init__.py
# Description: Configuration and logging
# =============================================================================

from tradebot.config.bot_config import BotSettings, get_bot_settings, reset_bot_settings
from tradebot.config.logging_config import get_logger, setup_logging

__all__ = [
    "BotSettings",
    "get_bot_settings",
    "reset_bot_settings",
    "get_logger",
    "setup_logging",
]
