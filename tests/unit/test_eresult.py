"""
Unit tests for platform result codes.
"""

from tradebot.common.enums.eresult import EResult, describe_result
from tradebot.common.exceptions.exceptions import PlatformError


class TestEResult:

    def test_reason_is_humanized(self) -> None:
        assert EResult.OK.reason == "OK"
        assert EResult.AccessDenied.reason == "Access denied"

    def test_from_code(self) -> None:
        assert EResult.from_code(2) is EResult.Fail
        assert EResult.from_code("15") is EResult.AccessDenied
        assert EResult.from_code(4) is None
        assert EResult.from_code(None) is None
        assert EResult.from_code("nope") is None

    def test_describe_unknown_code(self) -> None:
        assert describe_result(9999) == "Unknown result code 9999"
        assert describe_result(EResult.Fail) == "Fail"


class TestPlatformError:

    def test_message_defaults_to_reason(self) -> None:
        error = PlatformError(15, status_code=200)
        assert str(error) == "Access denied"
        assert error.result == EResult.AccessDenied
        assert error.status_code == 200

    def test_explicit_message(self) -> None:
        assert str(PlatformError(EResult.Fail, "custom")) == "custom"
