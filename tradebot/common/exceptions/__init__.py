from tradebot.common.exceptions.exceptions import (
    ApiAccessError,
    AuthenticationError,
    CredentialsError,
    InvalidSteamIDError,
    PlatformError,
    SessionEndedError,
    SessionError,
    SessionStateError,
    TradeBotException,
    ValidationError,
)

__all__ = [
    "TradeBotException",
    "AuthenticationError",
    "CredentialsError",
    "SessionError",
    "SessionStateError",
    "SessionEndedError",
    "PlatformError",
    "ApiAccessError",
    "InvalidSteamIDError",
    "ValidationError",
]
