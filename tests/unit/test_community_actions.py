"""
Unit tests for CommunityActions against a mocked community endpoint.
"""

import json
from typing import List
from urllib.parse import parse_qs

import httpx
import pytest

from tradebot.common.enums.eresult import EResult
from tradebot.common.exceptions.exceptions import PlatformError
from tradebot.core.session_manager import SessionManager
from tradebot.infra.platform.community_actions import CommunityActions, cookie_header, profile_path

COOKIES = ["sessionid=sess-1", "steamLoginSecure=xyz"]


class Endpoint:
    """Mock transport handler returning a fixed response and recording requests"""

    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self.body = {"success": 1} if body is None else body
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_form(self):
        return {k: v[0] for k, v in parse_qs(self.requests[-1].content.decode()).items()}


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint()


@pytest.fixture
def manager(settings, handle_factory) -> SessionManager:
    return SessionManager(settings, handle_factory, account_name="alice")


@pytest.fixture
def actions(manager: SessionManager, endpoint: Endpoint) -> CommunityActions:
    client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
    return CommunityActions(manager, client, account_name="alice")


async def login(manager: SessionManager) -> None:
    await manager.begin_session(COOKIES, "sess-1")
    await manager.probe_task


class TestGating:

    @pytest.mark.asyncio
    async def test_actions_wait_for_login(self, actions, manager, endpoint) -> None:
        results = []

        assert await actions.upvote_shared_file("123", callback=results.append) is None
        assert endpoint.requests == []

        await login(manager)

        assert len(endpoint.requests) == 1
        assert results == [None]


class TestSharedFiles:

    @pytest.mark.asyncio
    async def test_upvote_posts_form_with_session_id(self, actions, manager, endpoint) -> None:
        await login(manager)

        result = await actions.upvote_shared_file("123")

        request = endpoint.requests[-1]
        assert result.success is True
        assert request.method == "POST"
        assert request.url.path == "/sharedfiles/voteup"
        assert endpoint.last_form == {"sessionid": "sess-1", "id": "123"}
        assert request.headers["Cookie"] == "sessionid=sess-1; steamLoginSecure=xyz"

    @pytest.mark.asyncio
    async def test_favourite_includes_app_id(self, actions, manager, endpoint) -> None:
        await login(manager)

        await actions.favourite_shared_file("123", 440)

        assert endpoint.requests[-1].url.path == "/sharedfiles/favorite"
        assert endpoint.last_form["appid"] == "440"

    @pytest.mark.asyncio
    async def test_comment_url_contains_owner_and_file(self, actions, manager, endpoint) -> None:
        await login(manager)

        await actions.comment_shared_file("nice", "123", "76561197960287930")

        assert endpoint.requests[-1].url.path == "/comment/PublishedFile_Public/post/76561197960287930/123/"
        assert endpoint.last_form["comment"] == "nice"

    @pytest.mark.asyncio
    async def test_platform_failure_carries_result_code(self, actions, manager, endpoint) -> None:
        endpoint.body = {"success": 15}
        await login(manager)
        errors = []

        result = await actions.downvote_shared_file("123", callback=errors.append)

        assert result.success is False
        assert isinstance(errors[0], PlatformError)
        assert errors[0].result == EResult.AccessDenied
        assert str(errors[0]) == "Access denied"

    @pytest.mark.asyncio
    async def test_non_200_is_failure(self, actions, manager, endpoint) -> None:
        endpoint.status_code = 500
        await login(manager)

        result = await actions.subscribe_shared_file("123", 440)

        assert result.success is False
        assert result.error.status_code == 500

    @pytest.mark.asyncio
    async def test_preview_is_a_get(self, actions, manager, endpoint) -> None:
        await login(manager)

        result = await actions.preview_shared_file("123")

        assert result.success is True
        assert endpoint.requests[-1].method == "GET"
        assert endpoint.requests[-1].url.params["id"] == "123"


class TestFollow:

    def test_profile_path(self) -> None:
        assert profile_path("STEAM_0:0:11101") == "profiles/76561197960287930"
        assert profile_path("gabelogannewell") == "id/gabelogannewell"

    @pytest.mark.asyncio
    async def test_follow_by_vanity_name(self, actions, manager, endpoint) -> None:
        await login(manager)

        await actions.follow_publisher("somecurator")

        assert endpoint.requests[-1].url.path == "/id/somecurator/followuser/"

    @pytest.mark.asyncio
    async def test_unfollow_by_steam_id(self, actions, manager, endpoint) -> None:
        await login(manager)

        await actions.unfollow_publisher(76561197960287930)

        assert endpoint.requests[-1].url.path == "/profiles/76561197960287930/unfollowuser/"


class TestGroups:

    @pytest.mark.asyncio
    async def test_invite_list_is_sent_as_json(self, actions, manager, endpoint) -> None:
        await login(manager)

        result = await actions.invite_to_group("103582791429521408", ["1", "2"])

        form = endpoint.last_form
        assert result.success is True
        assert json.loads(form["invitee_list"]) == ["1", "2"]
        assert form["type"] == "groupInvite"
        assert form["sessionID"] == "sess-1"
        assert "invitee" not in form

    @pytest.mark.asyncio
    async def test_invite_single_user(self, actions, manager, endpoint) -> None:
        await login(manager)

        await actions.invite_to_group("103582791429521408", "76561197960287930")

        assert endpoint.last_form["invitee"] == "76561197960287930"

    @pytest.mark.asyncio
    async def test_invite_duplicate_message(self, actions, manager, endpoint) -> None:
        endpoint.body = {"success": 2, "duplicate": True}
        await login(manager)
        errors = []

        await actions.invite_to_group("1", "2", callback=errors.append)

        assert "already invited" in str(errors[0])

    @pytest.mark.asyncio
    async def test_invite_forbidden_message(self, actions, manager, endpoint) -> None:
        endpoint.status_code = 403
        await login(manager)

        result = await actions.invite_to_group("1", "2")

        assert str(result.error) == "alice is not part of the group, therefore unable to invite users."

    @pytest.mark.asyncio
    async def test_join_leave_kick_use_group_handle(self, actions, manager, handle_factory) -> None:
        await login(manager)

        await actions.join_group("g1")
        await actions.leave_group("g1")
        await actions.kick_from_group("g1", "76561197960287930")

        assert handle_factory.current.community.group_actions == [
            ("join", "g1"),
            ("leave", "g1"),
            ("kick", "76561197960287930"),
        ]

    @pytest.mark.asyncio
    async def test_get_group_passes_group_to_callback(self, actions, manager) -> None:
        await login(manager)
        results = []

        await actions.get_group("g1", callback=lambda error, group: results.append((error, group.group_id)))

        assert results == [(None, "g1")]

    @pytest.mark.asyncio
    async def test_group_failure_goes_to_callback(self, actions, manager, handle_factory) -> None:
        handle_factory.current.community.configure_failure("get_group", "No such group")
        await login(manager)
        errors = []

        result = await actions.join_group("missing", callback=errors.append)

        assert result.success is False
        assert str(errors[0]) == "No such group"


class TestProfile:

    @pytest.mark.asyncio
    async def test_web_api_key_default_domain(self, actions, manager, handle_factory) -> None:
        await login(manager)
        results = []

        await actions.get_web_api_key(callback=lambda error, key: results.append((error, key)))

        assert results == [(None, "FAKE-WEB-API-KEY")]
        assert handle_factory.current.community.get_last_call("get_web_api_key").args == ("localhost",)

    @pytest.mark.asyncio
    async def test_setup_profile(self, actions, manager, handle_factory) -> None:
        await login(manager)

        result = await actions.setup_profile()

        assert result.success is True
        assert handle_factory.current.community.was_called("setup_profile")


class TestCookieHeader:

    def test_formats(self) -> None:
        assert cookie_header(None) is None
        assert cookie_header({"a": "1", "b": "2"}) == "a=1; b=2"
        assert cookie_header(["a=1; Path=/", "b=2"]) == "a=1; b=2"
        assert cookie_header("a=1") == "a=1"
