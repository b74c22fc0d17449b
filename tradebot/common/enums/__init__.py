from tradebot.common.enums.eresult import EResult, describe_result

__all__ = ["EResult", "describe_result"]
