# tradebot/common/exceptions/exceptions.py
# =============================================================================
# Custom exceptions for tradebot
# =============================================================================

from typing import Optional, Union

from tradebot.common.enums.eresult import EResult, describe_result


class TradeBotException(Exception):
    """Base exception for tradebot"""
    pass


class AuthenticationError(TradeBotException):
    """Raised when the authentication exchange fails"""
    pass


class CredentialsError(AuthenticationError):
    """Raised at construction when credentials or two-factor material are missing"""
    pass


class SessionError(TradeBotException):
    """Base class for session lifecycle errors"""
    pass


class SessionStateError(SessionError):
    """Raised when session artifacts would violate the state invariants"""
    pass


class SessionEndedError(SessionError):
    """Delivered to deferred operations discarded by a logout"""

    def __init__(self, message: str = "Session ended before the operation could run",
                 queue_name: Optional[str] = None):
        super().__init__(message)
        self.queue_name = queue_name


class PlatformError(TradeBotException):
    """Per-call platform failure carrying a structured result code"""

    def __init__(self, result: Union[EResult, int, None], message: Optional[str] = None,
                 status_code: Optional[int] = None):
        self.result = result
        self.status_code = status_code
        super().__init__(message or describe_result(result))


class ApiAccessError(TradeBotException):
    """Raised by the capability probe when Web API access is denied"""
    pass


class InvalidSteamIDError(TradeBotException, ValueError):
    """Raised when an account identifier cannot be parsed"""
    pass


class ValidationError(TradeBotException):
    """Raised when validation fails"""
    pass
