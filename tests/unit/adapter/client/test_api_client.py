"""Unit tests for VoteApiClient."""

import json

import httpx
import pytest

from tally.adapter.client import VoteApiClient
from tally.adapter.error import VoteClientError
from tally.domain.value import VoteTransition, VoteType


def make_client(handler) -> VoteApiClient:
    transport = httpx.MockTransport(handler)
    return VoteApiClient(
        client=httpx.AsyncClient(transport=transport, base_url="http://test")
    )


class TestCastVote:
    """Tests for POST /vote."""

    @pytest.mark.asyncio
    async def test_returns_canonical_result(self):
        # Arrange
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "product_id": "p1",
                    "vote_type": "up",
                    "upvotes": 4,
                    "downvotes": 1,
                    "score": 3,
                    "has_voted": True,
                    "transition": "created",
                    "version": 7,
                    "remaining_votes": 9,
                },
            )

        client = make_client(handler)

        # Act
        result = await client.cast_vote("p1", "v1", "up")
        await client.aclose()

        # Assert
        assert seen["path"] == "/vote"
        assert seen["body"] == {"product_id": "p1", "voter_id": "v1", "vote_type": "up"}
        assert result.vote_type == VoteType.UP
        assert result.transition == VoteTransition.CREATED
        assert (result.upvotes, result.downvotes, result.version) == (4, 1, 7)

    @pytest.mark.asyncio
    async def test_error_body_becomes_client_error(self):
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                429,
                json={
                    "success": False,
                    "error": {
                        "kind": "quota_exceeded",
                        "message": "Vote limit reached. Sign in for unlimited voting.",
                    },
                    "revert": True,
                },
            )

        client = make_client(handler)

        # Act & Assert
        with pytest.raises(VoteClientError) as exc_info:
            await client.cast_vote("p1", "v1", "up")

        assert exc_info.value.kind == "quota_exceeded"
        assert exc_info.value.status_code == 429
        assert exc_info.value.revert is True
        assert "Sign in" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_network_failure_becomes_client_error(self):
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        # Act & Assert
        with pytest.raises(VoteClientError) as exc_info:
            await client.cast_vote("p1", "v1", "down")

        assert exc_info.value.kind == "network_error"
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_non_json_error_uses_retry_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad gateway")

        client = make_client(handler)

        with pytest.raises(VoteClientError) as exc_info:
            await client.cast_vote("p1", "v1", "up")

        assert exc_info.value.kind == "http_error"
        assert exc_info.value.message == "Couldn't register your vote, please retry."


class TestQueries:
    """Tests for status, quota and reset calls."""

    @pytest.mark.asyncio
    async def test_get_vote_status_sends_query(self):
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["product_id"] == "p1"
            assert request.url.params["voter_id"] == "v1"
            return httpx.Response(
                200,
                json={"product_id": "p1", "vote_type": None, "upvotes": 2, "downvotes": 0},
            )

        client = make_client(handler)

        # Act
        status = await client.get_vote_status("p1", "v1")

        # Assert
        assert status.vote_type is None
        assert status.upvotes == 2

    @pytest.mark.asyncio
    async def test_get_remaining_votes(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "remaining_votes": 3,
                    "max_votes": 10,
                    "unlimited": False,
                    "window_reset_at": "2024-05-02T00:00:00Z",
                },
            )

        client = make_client(handler)

        remaining = await client.get_remaining_votes("v1")

        assert remaining.remaining_votes == 3
        assert remaining.unlimited is False

    @pytest.mark.asyncio
    async def test_reset_votes(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/vote/reset"
            return httpx.Response(200, json={"success": True, "removed_votes": 2})

        client = make_client(handler)

        assert await client.reset_votes("v1") == 2
