# =============================================================================
# File: tradebot/config/bot_config.py
# Description: Bot-wide settings (trade manager tuning, HTTP endpoints)
# =============================================================================

from typing import Any, Dict, Mapping, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import SettingsConfigDict

from tradebot.common.base.base_config import BaseConfig
from tradebot.config.logging_config import get_logger

log = get_logger("tradebot.config.bot")

ENV_PREFIX = "TRADEBOT_"

# Field name -> legacy camelCase key accepted in settings mappings
LEGACY_KEYS: Dict[str, str] = {
    "trade_cancel_time": "tradeCancelTime",
    "trade_pending_cancel_time": "tradePendingCancelTime",
    "trade_poll_interval": "tradePollInterval",
    "trade_cancel_offer_count": "tradeCancelOfferCount",
    "trade_cancel_offer_count_min_age": "tradeCancelOfferCountMinAge",
    "cancel_trade_on_overflow": "cancelTradeOnOverflow",
    "friends_poll_interval": "friendsPollInterval",
}


def _aliases(field_name: str) -> AliasChoices:
    choices = [f"{ENV_PREFIX.lower()}{field_name}"]
    if field_name in LEGACY_KEYS:
        choices.insert(0, LEGACY_KEYS[field_name])
    return AliasChoices(*choices)


class BotSettings(BaseConfig):
    """
    Bot settings with a fixed schema.

    Values affect the external collaborators (trade offer manager, HTTP
    clients), not the session core. Keys outside the schema live in
    ``extensions`` and never change the shape of the model.

    Environment variables use the TRADEBOT_ prefix, e.g. TRADEBOT_LANGUAGE.
    """

    # env_file / case handling are inherited from BaseConfig
    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        populate_by_name=True,
        validate_assignment=True,
    )

    # =========================================================================
    # Web API
    # =========================================================================

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=_aliases("api_key"),
        description="Web API key (probed after login when empty)"
    )

    language: str = Field(
        default="en",
        validation_alias=_aliases("language"),
        description="Language for item descriptions"
    )

    # =========================================================================
    # Trade Offer Manager
    # =========================================================================

    trade_cancel_time: int = Field(
        default=60 * 60 * 24,
        validation_alias=_aliases("trade_cancel_time"),
        description="Seconds before an unanswered sent offer is cancelled"
    )

    trade_pending_cancel_time: int = Field(
        default=60 * 60 * 24,
        validation_alias=_aliases("trade_pending_cancel_time"),
        description="Seconds before an offer pending confirmation is cancelled"
    )

    trade_poll_interval: int = Field(
        default=5000,
        validation_alias=_aliases("trade_poll_interval"),
        description="Offer polling interval in milliseconds"
    )

    trade_cancel_offer_count: int = Field(
        default=30,
        validation_alias=_aliases("trade_cancel_offer_count"),
        description="Active sent offers allowed before the oldest is cancelled"
    )

    trade_cancel_offer_count_min_age: int = Field(
        default=60 * 60,
        validation_alias=_aliases("trade_cancel_offer_count_min_age"),
        description="Minimum offer age (seconds) for overflow cancellation"
    )

    cancel_trade_on_overflow: bool = Field(
        default=True,
        validation_alias=_aliases("cancel_trade_on_overflow"),
        description="Cancel oldest offers on overflow (needs API access)"
    )

    # =========================================================================
    # Friends / chat
    # =========================================================================

    friends_poll_interval: int = Field(
        default=500,
        validation_alias=_aliases("friends_poll_interval"),
        description="Web chat polling interval in milliseconds"
    )

    # =========================================================================
    # HTTP
    # =========================================================================

    community_base_url: str = Field(
        default="https://steamcommunity.com",
        validation_alias=_aliases("community_base_url"),
    )

    api_base_url: str = Field(
        default="http://api.steampowered.com",
        validation_alias=_aliases("api_base_url"),
    )

    http_timeout: float = Field(
        default=30.0,
        validation_alias=_aliases("http_timeout"),
        description="HTTP timeout in seconds"
    )

    # =========================================================================
    # Ad hoc keys
    # =========================================================================

    extensions: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=_aliases("extensions"),
        description="Ad hoc settings outside the fixed schema"
    )

    @field_validator('language', mode='before')
    @classmethod
    def parse_language(cls, v):
        """Empty language falls back to English."""
        return v or "en"

    # =========================================================================
    # Construction helpers
    # =========================================================================

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> 'BotSettings':
        """Build settings from a plain mapping, routing unknown keys to ``extensions``."""
        known: Dict[str, Any] = {}
        extensions: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            field_name = cls.resolve_field(key)
            if field_name is None:
                extensions[key] = value
            else:
                known[field_name] = value
        if extensions:
            known["extensions"] = {**known.get("extensions", {}), **extensions}
        return cls(**known)

    @classmethod
    def resolve_field(cls, key: str) -> Optional[str]:
        """Map a field name or legacy key to the schema field name."""
        if key in cls.model_fields and key != "extensions":
            return key
        for field_name, legacy in LEGACY_KEYS.items():
            if legacy == key:
                return field_name
        return None

    # =========================================================================
    # Runtime access
    # =========================================================================

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a schema value (by field or legacy name) or an ad hoc value."""
        field_name = self.resolve_field(key)
        if field_name is not None:
            value = getattr(self, field_name)
            return value.get_secret_value() if isinstance(value, SecretStr) else value
        return self.extensions.get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        """Set a schema value (validated) or an ad hoc value."""
        field_name = self.resolve_field(key)
        if field_name is not None:
            setattr(self, field_name, value)
        else:
            log.debug(f"Storing ad hoc setting '{key}' in extensions")
            self.extensions[key] = value

    def delete_setting(self, key: str) -> bool:
        """Remove an ad hoc value, or reset a schema value to its default."""
        field_name = self.resolve_field(key)
        if field_name is not None:
            field_info = type(self).model_fields[field_name]
            setattr(self, field_name, field_info.get_default(call_default_factory=True))
            return True
        return self.extensions.pop(key, None) is not None


# =============================================================================
# Singleton
# =============================================================================

_bot_settings: Optional[BotSettings] = None


def get_bot_settings() -> BotSettings:
    """Get bot settings singleton."""
    global _bot_settings
    if _bot_settings is None:
        _bot_settings = BotSettings()
    return _bot_settings


def reset_bot_settings() -> None:
    """Reset settings singleton (for testing)."""
    global _bot_settings
    _bot_settings = None
