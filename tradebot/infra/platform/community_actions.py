# =============================================================================
# File: tradebot/infra/platform/community_actions.py
# Description: Community capability facade (shared files, follows, groups)
# =============================================================================

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from tradebot.common.enums.eresult import EResult
from tradebot.common.exceptions.exceptions import InvalidSteamIDError, PlatformError
from tradebot.common.steam_id import SteamID
from tradebot.config.logging_config import get_logger
from tradebot.core.gating import deliver, requires_session
from tradebot.core.session_manager import SessionManager
from tradebot.infra.platform.results import OperationResult

log = get_logger("tradebot.infra.platform.community")

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def cookie_header(cookies: Any) -> Optional[str]:
    """Render session cookies ("k=v" strings or a mapping) as a Cookie header."""
    if not cookies:
        return None
    if isinstance(cookies, Mapping):
        return "; ".join(f"{name}={value}" for name, value in cookies.items())
    if isinstance(cookies, str):
        return cookies
    return "; ".join(str(cookie).split(";", 1)[0] for cookie in cookies)


class CommunityActions:
    """
    Community web actions performed as the logged-in account.

    Every action is gated on the "login" queue. When executed it returns an
    OperationResult and calls ``callback(error)`` (error is None on success).
    Platform failures carry the EResult from the response body.
    """

    def __init__(self, session: SessionManager, http_client: httpx.AsyncClient, account_name: str = ""):
        self._session = session
        self._http = http_client
        self._account_name = account_name

    @property
    def base_url(self) -> str:
        return self._session.settings.community_base_url.rstrip("/")

    @property
    def session_id(self) -> Optional[str]:
        return self._session.state.session_id

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _make_request(
        self,
        url: str,
        method: str = "POST",
        form: Optional[Dict[str, Any]] = None,
        parse_json: bool = True,
    ) -> Tuple[httpx.Response, Optional[Dict[str, Any]]]:
        headers = dict(FORM_HEADERS)
        cookie = cookie_header(self._session.state.cookies)
        if cookie:
            headers["Cookie"] = cookie

        response = await self._http.request(method, url, data=form, headers=headers)
        body = response.json() if parse_json and response.content else None
        return response, body

    async def _post_action(self, url: str, form: Dict[str, Any], callback=None) -> OperationResult:
        """POST a form; success iff HTTP 200 and body.success == 1."""
        try:
            response, body = await self._make_request(url, form=form)
            error = _platform_error(response, body)
        except (httpx.HTTPError, ValueError) as e:
            error = e

        return await _finish(callback, error)

    # =========================================================================
    # Shared files
    # =========================================================================

    @requires_session("login")
    async def upvote_shared_file(self, shared_file_id, callback=None):
        """Upvote a shared file."""
        return await self._post_action(
            f"{self.base_url}/sharedfiles/voteup",
            {"sessionid": self.session_id, "id": shared_file_id},
            callback,
        )

    @requires_session("login")
    async def downvote_shared_file(self, shared_file_id, callback=None):
        """Downvote a shared file."""
        return await self._post_action(
            f"{self.base_url}/sharedfiles/votedown",
            {"sessionid": self.session_id, "id": shared_file_id},
            callback,
        )

    @requires_session("login")
    async def preview_shared_file(self, shared_file_id, callback=None):
        """Open a shared file's details page (counts as a unique view)."""
        try:
            response, _ = await self._make_request(
                f"{self.base_url}/sharedfiles/filedetails/?id={shared_file_id}",
                method="GET",
                parse_json=False,
            )
            error = None if response.status_code == 200 else PlatformError(
                EResult.Fail, "Failed to preview shared file", status_code=response.status_code
            )
        except httpx.HTTPError as e:
            error = e

        return await _finish(callback, error)

    @requires_session("login")
    async def favourite_shared_file(self, shared_file_id, shared_file_app_id, callback=None):
        return await self._post_action(
            f"{self.base_url}/sharedfiles/favorite",
            {"sessionid": self.session_id, "id": shared_file_id, "appid": shared_file_app_id},
            callback,
        )

    @requires_session("login")
    async def unfavourite_shared_file(self, shared_file_id, shared_file_app_id, callback=None):
        return await self._post_action(
            f"{self.base_url}/sharedfiles/unfavorite",
            {"sessionid": self.session_id, "id": shared_file_id, "appid": shared_file_app_id},
            callback,
        )

    @requires_session("login")
    async def subscribe_shared_file(self, shared_file_id, shared_file_app_id, callback=None):
        return await self._post_action(
            f"{self.base_url}/sharedfiles/subscribe",
            {"sessionid": self.session_id, "id": shared_file_id, "appid": shared_file_app_id},
            callback,
        )

    @requires_session("login")
    async def unsubscribe_shared_file(self, shared_file_id, shared_file_app_id, callback=None):
        return await self._post_action(
            f"{self.base_url}/sharedfiles/unsubscribe",
            {"sessionid": self.session_id, "id": shared_file_id, "appid": shared_file_app_id},
            callback,
        )

    @requires_session("login")
    async def comment_shared_file(self, comment, shared_file_id, file_id_owner, callback=None):
        """Post a comment on a shared file owned by ``file_id_owner``."""
        return await self._post_action(
            f"{self.base_url}/comment/PublishedFile_Public/post/{file_id_owner}/{shared_file_id}/",
            {"sessionid": self.session_id, "comment": comment},
            callback,
        )

    @requires_session("login")
    async def delete_comment_shared_file(self, comment_id, shared_file_id, file_id_owner, callback=None):
        return await self._post_action(
            f"{self.base_url}/comment/PublishedFile_Public/delete/{file_id_owner}/{shared_file_id}/",
            {"sessionid": self.session_id, "gidcomment": comment_id},
            callback,
        )

    # =========================================================================
    # Users
    # =========================================================================

    @requires_session("login")
    async def follow_publisher(self, steam_id, callback=None):
        """Follow a user given a SteamID (any format) or a vanity profile name."""
        return await self._post_action(
            f"{self.base_url}/{profile_path(steam_id)}/followuser/",
            {"sessionid": self.session_id},
            callback,
        )

    @requires_session("login")
    async def unfollow_publisher(self, steam_id, callback=None):
        return await self._post_action(
            f"{self.base_url}/{profile_path(steam_id)}/unfollowuser/",
            {"sessionid": self.session_id},
            callback,
        )

    # =========================================================================
    # Groups
    # =========================================================================

    @requires_session("login")
    async def invite_to_group(self, group_id, invitee: Union[Any, Sequence[Any]], callback=None):
        """
        Invite one user, or a list of users, to a group.

        A list is sent as ``invitee_list`` (JSON); anything else as ``invitee``.
        """
        form: Dict[str, Any] = {
            "json": 1,
            "type": "groupInvite",
            "group": group_id,
            "sessionID": self.session_id,
        }
        if isinstance(invitee, (list, tuple)):
            form["invitee_list"] = json.dumps([str(i) for i in invitee])
        else:
            form["invitee"] = str(invitee)

        try:
            response, body = await self._make_request(f"{self.base_url}/actions/GroupInvite", form=form)
            body = body or {}
            if response.status_code == 200 and body.get("success") == 1:
                error = None
            elif response.status_code == 200 and body.get("duplicate"):
                error = PlatformError(
                    body.get("success"),
                    "Failed to send one or more invites due to a user being already invited "
                    f"or in the group by {self._account_name}",
                    status_code=200,
                )
            elif response.status_code == 403:
                error = PlatformError(
                    EResult.AccessDenied,
                    f"{self._account_name} is not part of the group, therefore unable to invite users.",
                    status_code=403,
                )
            else:
                error = PlatformError(body.get("success"), status_code=response.status_code)
        except (httpx.HTTPError, ValueError) as e:
            error = e

        return await _finish(callback, error)

    @requires_session("login")
    async def join_group(self, group_id, callback=None):
        return await self._group_action(group_id, "join", callback)

    @requires_session("login")
    async def leave_group(self, group_id, callback=None):
        return await self._group_action(group_id, "leave", callback)

    @requires_session("login")
    async def kick_from_group(self, group_id, steam_id, callback=None):
        return await self._group_action(group_id, "kick", callback, steam_id)

    async def _group_action(self, group_id, action: str, callback, *args) -> OperationResult:
        try:
            group = await self._session.handles.community.get_group(group_id)
            await getattr(group, action)(*args)
            error = None
        except Exception as e:
            log.debug(f"Group {action} on {group_id} failed: {e}")
            error = e
        return await _finish(callback, error)

    @requires_session("login")
    async def get_group(self, group_id, callback=None):
        """Fetch a group handle; ``callback(error, group)``."""
        try:
            group = await self._session.handles.community.get_group(group_id)
        except Exception as e:
            await deliver(callback, e, None)
            return OperationResult.failed(e)

        await deliver(callback, None, group)
        return OperationResult.ok({"group": group})

    # =========================================================================
    # Profile / API key
    # =========================================================================

    @requires_session("login")
    async def setup_profile(self, callback=None):
        """Set up the profile of a new account."""
        try:
            await self._session.handles.community.setup_profile()
            error = None
        except Exception as e:
            error = e
        return await _finish(callback, error)

    @requires_session("login")
    async def get_web_api_key(self, domain: str = "localhost", callback=None):
        """Fetch (registering if needed) the Web API key; ``callback(error, api_key)``."""
        try:
            api_key = await self._session.handles.community.get_web_api_key(domain)
        except Exception as e:
            await deliver(callback, e, None)
            return OperationResult.failed(e)

        await deliver(callback, None, api_key)
        return OperationResult.ok({"api_key": api_key})


def profile_path(steam_id: Any) -> str:
    """``profiles/<steamid64>`` for parseable ids, ``id/<vanity>`` otherwise."""
    try:
        return f"profiles/{SteamID.parse(steam_id).steam_id64}"
    except InvalidSteamIDError:
        return f"id/{steam_id}"


def _platform_error(response: httpx.Response, body: Optional[Dict[str, Any]]) -> Optional[PlatformError]:
    result = (body or {}).get("success")
    if response.status_code == 200 and result == 1:
        return None
    if result in (None, 1):
        return PlatformError(
            EResult.Fail, f"Request failed with HTTP {response.status_code}", status_code=response.status_code
        )
    return PlatformError(result, status_code=response.status_code)


async def _finish(callback, error: Optional[BaseException]) -> OperationResult:
    await deliver(callback, error)
    if error is not None:
        return OperationResult.failed(error)
    return OperationResult.ok()
