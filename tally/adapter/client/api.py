"""HTTP client for the vote API."""

from datetime import datetime
from typing import Any

import httpx
import logfire
from pydantic import BaseModel

from tally.adapter.error import VoteClientError
from tally.domain.model import VoteResult, VoteStatus

RETRY_MESSAGE = "Couldn't register your vote, please retry."


class RemainingVotes(BaseModel):
    """Quota status as returned by the API."""

    remaining_votes: int | None
    max_votes: int | None
    unlimited: bool
    window_reset_at: datetime | None = None


class VoteApiClient:
    """Async client for the vote endpoints.

    Raises VoteClientError carrying the server's error ``kind`` for every
    failed call, including network failures.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize client.

        Args:
            base_url: API base URL
            client: Preconfigured httpx client (its base_url is used as-is)
            timeout: Request timeout in seconds
        """
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logfire.warn("Vote API request failed", path=path, error=str(e))
            raise VoteClientError("network_error", RETRY_MESSAGE) from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            error = body.get("error") or {}
            logfire.info(
                "Vote API returned an error",
                path=path,
                status_code=response.status_code,
                kind=error.get("kind"),
            )
            raise VoteClientError(
                kind=error.get("kind", "http_error"),
                message=error.get("message", RETRY_MESSAGE),
                status_code=response.status_code,
                revert=body.get("revert", True),
            )

        return response.json()

    async def cast_vote(
        self, product_id: str, voter_id: str, vote_type: str | int | None
    ) -> VoteResult:
        """Cast, change, toggle or clear a vote."""
        body = await self._request(
            "POST",
            "/vote",
            json={"product_id": product_id, "voter_id": voter_id, "vote_type": vote_type},
        )
        return VoteResult.model_validate(body)

    async def get_vote_status(self, product_id: str, voter_id: str) -> VoteStatus:
        """Get the voter's vote and the product's counts."""
        body = await self._request(
            "GET", "/vote", params={"product_id": product_id, "voter_id": voter_id}
        )
        return VoteStatus.model_validate(body)

    async def get_remaining_votes(self, voter_id: str) -> RemainingVotes:
        """Get the voter's remaining new votes in the current window."""
        body = await self._request(
            "GET", "/vote/remaining-votes", params={"voter_id": voter_id}
        )
        return RemainingVotes.model_validate(body)

    async def reset_votes(self, voter_id: str) -> int:
        """Clear every vote held by the voter."""
        body = await self._request("POST", "/vote/reset", json={"voter_id": voter_id})
        return body["removed_votes"]
