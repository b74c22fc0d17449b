# =============================================================================
# File: tradebot/infra/platform/results.py
# Description: Result envelope for capability operations
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class OperationResult:
    """Generic result for platform operations"""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, data: Optional[Dict[str, Any]] = None) -> 'OperationResult':
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: BaseException) -> 'OperationResult':
        return cls(success=False, error=error)
