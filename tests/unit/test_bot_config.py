"""
Unit tests for BotSettings.
"""

import pytest
from pydantic import ValidationError

from tradebot.config.bot_config import BotSettings, get_bot_settings, reset_bot_settings
from tradebot.infra.platform.handles import trade_manager_options


class TestDefaults:

    def test_defaults(self, settings: BotSettings) -> None:
        assert settings.trade_cancel_time == 86400
        assert settings.trade_pending_cancel_time == 86400
        assert settings.language == "en"
        assert settings.trade_poll_interval == 5000
        assert settings.trade_cancel_offer_count == 30
        assert settings.trade_cancel_offer_count_min_age == 3600
        assert settings.cancel_trade_on_overflow is True
        assert settings.extensions == {}

    def test_environment_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("TRADEBOT_LANGUAGE", "de")
        monkeypatch.setenv("TRADEBOT_TRADE_POLL_INTERVAL", "2500")

        settings = BotSettings()

        assert settings.language == "de"
        assert settings.trade_poll_interval == 2500

    def test_secret_is_masked_in_repr(self) -> None:
        settings = BotSettings.from_mapping({"api_key": "SECRET"})
        assert "SECRET" not in repr(settings)
        assert settings.to_dict(mask_secrets=False)["api_key"] == "SECRET"


class TestMapping:

    def test_legacy_and_unknown_keys(self) -> None:
        settings = BotSettings.from_mapping({
            "tradeCancelTime": 60,
            "cancelTradeOnOverflow": False,
            "botOwner": "carol",
        })

        assert settings.trade_cancel_time == 60
        assert settings.cancel_trade_on_overflow is False
        assert settings.extensions == {"botOwner": "carol"}

    def test_empty_language_falls_back(self) -> None:
        assert BotSettings.from_mapping({"language": ""}).language == "en"

    def test_assignment_is_validated(self, settings: BotSettings) -> None:
        with pytest.raises(ValidationError):
            settings.set_setting("trade_poll_interval", "not a number")


class TestRuntimeAccess:

    def test_get_set_delete_schema_field(self, settings: BotSettings) -> None:
        settings.set_setting("tradePollInterval", 1000)
        assert settings.get_setting("trade_poll_interval") == 1000

        assert settings.delete_setting("trade_poll_interval") is True
        assert settings.get_setting("tradePollInterval") == 5000

    def test_ad_hoc_keys(self, settings: BotSettings) -> None:
        assert settings.get_setting("missing", "fallback") == "fallback"

        settings.set_setting("owner", "dave")
        assert settings.get_setting("owner") == "dave"
        assert settings.delete_setting("owner") is True
        assert settings.delete_setting("owner") is False

    def test_api_key_unwrapped(self) -> None:
        assert BotSettings.from_mapping({"api_key": "K"}).get_setting("api_key") == "K"


class TestTradeManagerOptions:

    def test_options_follow_settings(self) -> None:
        options = trade_manager_options(BotSettings.from_mapping({"api_key": "K", "language": "fr"}))

        assert options == {
            "cancel_time": 86400,
            "pending_cancel_time": 86400,
            "cancel_offer_count": 30,
            "cancel_offer_count_min_age": 3600,
            "language": "fr",
            "poll_interval": 5000,
            "api_key": "K",
        }

    def test_overflow_cancellation_disabled(self) -> None:
        options = trade_manager_options(BotSettings.from_mapping({"cancelTradeOnOverflow": False}))
        assert options["cancel_offer_count"] is None
        assert options["api_key"] is None


class TestSingleton:

    def test_singleton_and_reset(self) -> None:
        first = get_bot_settings()
        assert get_bot_settings() is first

        reset_bot_settings()
        assert get_bot_settings() is not first
