# =============================================================================
# File: tradebot/core/session_state.py
# Description: Authenticated/unauthenticated flag plus session artifacts
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from tradebot.common.exceptions.exceptions import SessionStateError


class SessionStatus(str, Enum):
    """Session lifecycle states"""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"  # Credential exchange in flight
    AUTHENTICATED = "authenticated"


class ApiAccess(str, Enum):
    """Web API capability as reported by the post-login probe"""
    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass
class SessionState:
    """
    Session artifacts.

    Invariants:
        - cookies and session_id are set together or both absent
        - AUTHENTICATED implies both are present

    Mutated only by SessionManager; everything else reads it.
    """
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    cookies: Optional[Any] = None
    session_id: Optional[str] = None
    api_access: ApiAccess = ApiAccess.UNKNOWN

    @property
    def authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def has_artifacts(self) -> bool:
        return self.cookies is not None and self.session_id is not None

    def matches(self, cookies: Any, session_id: Optional[str]) -> bool:
        """True if the stored artifacts equal the given ones."""
        return self.session_id == session_id and self.cookies == cookies

    def store(self, cookies: Any, session_id: Optional[str]) -> bool:
        """
        Store new artifacts.

        Returns:
            True if the stored values changed
        """
        if (cookies is None) != (session_id is None):
            raise SessionStateError("cookies and session_id must be set together")
        if self.matches(cookies, session_id):
            return False
        self.cookies = cookies
        self.session_id = session_id
        return True

    def mark_authenticating(self) -> None:
        if self.status is SessionStatus.UNAUTHENTICATED:
            self.status = SessionStatus.AUTHENTICATING

    def mark_authenticated(self) -> None:
        if not self.has_artifacts:
            raise SessionStateError("Cannot authenticate without cookies and session_id")
        self.status = SessionStatus.AUTHENTICATED

    def mark_failed(self) -> None:
        """Authentication exchange failed; artifacts stay as they were."""
        if self.status is SessionStatus.AUTHENTICATING:
            self.status = SessionStatus.UNAUTHENTICATED

    def reset(self) -> None:
        self.status = SessionStatus.UNAUTHENTICATED
        self.cookies = None
        self.session_id = None
        self.api_access = ApiAccess.UNKNOWN
