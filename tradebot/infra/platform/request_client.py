# =============================================================================
# File: tradebot/infra/platform/request_client.py
# Description: Manual HTTP requests and Web API calls
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from tradebot.config.bot_config import BotSettings
from tradebot.config.logging_config import get_logger
from tradebot.core.gating import deliver

log = get_logger("tradebot.infra.platform.request")


class RequestClient:
    """
    Thin wrapper over a shared httpx.AsyncClient.

    Not session-gated. Callbacks receive ``(error, body, response)``; the body
    is decoded JSON when the response carries JSON, text otherwise.
    """

    def __init__(self, settings: BotSettings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._http = http_client

    async def get_request(self, url: str, callback=None) -> Any:
        return await self._send("GET", url, callback)

    async def post_request(self, url: str, data: Optional[Dict[str, Any]] = None, callback=None) -> Any:
        """POST ``data`` as a JSON body."""
        return await self._send("POST", url, callback, json=data)

    async def get_request_api(
        self,
        interface: str,
        version: str,
        method: str,
        options: Optional[Dict[str, Any]] = None,
        callback=None,
    ) -> Any:
        """
        Call a Web API method.

        Example:
            await client.get_request_api("ISteamUser", "v0002", "GetPlayerSummaries",
                                         {"key": api_key, "steamids": ids})
        """
        return await self._send("GET", self.api_url(interface, version, method, options), callback)

    def api_url(self, interface: str, version: str, method: str, options: Optional[Dict[str, Any]] = None) -> str:
        base = self._settings.api_base_url.rstrip("/")
        return f"{base}/{interface}/{method}/{version}/?{urlencode(options or {})}"

    async def _send(self, method: str, url: str, callback, **kwargs) -> Any:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log.debug(f"{method} {url} failed: {e}")
            await deliver(callback, e, None, None)
            return None

        body = _decode(response)
        await deliver(callback, None, body, response)
        return body


def _decode(response: httpx.Response) -> Any:
    if "json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            pass
    return response.text
