"""Optimistic vote state for one product on the client side."""

from typing import Any
from uuid import uuid4

import logfire

from tally.adapter.client.api import VoteApiClient
from tally.adapter.error import VoteClientError
from tally.domain.model import VotePlan, VoteResult, VoteStatus, VoteUpdate
from tally.domain.model.common import DomainModel
from tally.domain.value import VoteChoice, VoteType


class VoteSnapshot(DomainModel):
    """Counts and vote shown to the voter."""

    upvotes: int = 0
    downvotes: int = 0
    vote_type: VoteType | None = None
    version: int = 0
    pending: str | None = None

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


class OptimisticVote:
    """Vote widget state that updates before the server answers.

    A cast is applied immediately as a tagged pending transition. The
    server result then replaces the state wholesale, or on failure the
    exact pre-action snapshot is restored. One cast may be pending at a time.
    """

    def __init__(
        self,
        product_id: str,
        voter_id: str,
        state: VoteSnapshot | None = None,
        voter_tag: str | None = None,
    ) -> None:
        self.product_id = product_id
        self.voter_id = voter_id
        # Pseudonymous id the server stamps on this voter's broadcasts
        self.voter_tag = voter_tag
        self.state = state or VoteSnapshot()
        self._before: VoteSnapshot | None = None

    @classmethod
    def from_status(cls, voter_id: str, status: VoteStatus) -> "OptimisticVote":
        return cls(
            status.product_id,
            voter_id,
            VoteSnapshot(
                upvotes=status.upvotes,
                downvotes=status.downvotes,
                vote_type=status.vote_type,
            ),
            voter_tag=status.voter_tag,
        )

    def apply_pending(self, requested: Any) -> str:
        """Show the expected outcome of a cast right away.

        Returns:
            Tag identifying the pending transition

        Raises:
            VoteClientError: If another cast is still pending
        """
        if self.state.pending is not None:
            raise VoteClientError(
                "vote_pending", "A vote is already being registered", revert=False
            )

        plan = VotePlan.resolve(self.state.vote_type, VoteChoice.parse(requested))
        tag = uuid4().hex
        self._before = self.state
        self.state = self.state.model_copy(
            update={
                "upvotes": max(self.state.upvotes + plan.delta.upvotes, 0),
                "downvotes": max(self.state.downvotes + plan.delta.downvotes, 0),
                "vote_type": plan.vote_type,
                "pending": tag,
            }
        )
        return tag

    def confirm(self, tag: str, result: VoteResult) -> VoteSnapshot:
        """Replace the state with the server's canonical result."""
        if tag != self.state.pending:
            logfire.debug("Ignoring result for stale vote", product_id=self.product_id)
            return self.state

        self.state = VoteSnapshot(
            upvotes=result.upvotes,
            downvotes=result.downvotes,
            vote_type=result.vote_type,
            version=result.version,
        )
        self.voter_tag = result.voter_tag or self.voter_tag
        self._before = None
        return self.state

    def revert(self, tag: str) -> VoteSnapshot:
        """Restore the snapshot taken before the pending transition."""
        if tag != self.state.pending or self._before is None:
            return self.state

        self.state = self._before
        self._before = None
        return self.state

    def apply_broadcast(self, update: VoteUpdate) -> VoteSnapshot:
        """Fold in a real-time update.

        Stale versions are dropped. While a cast is pending only the pending
        result is trusted, so updates are ignored. The acting voter's own
        updates carry the authoritative vote type.
        """
        if update.product_id != self.product_id or self.state.pending is not None:
            return self.state
        if update.version < self.state.version:
            return self.state

        changes: dict[str, Any] = {
            "upvotes": update.upvotes,
            "downvotes": update.downvotes,
            "version": update.version,
        }
        if self.voter_tag is not None and update.voter_id == self.voter_tag:
            changes["vote_type"] = update.vote_type

        self.state = self.state.model_copy(update=changes)
        return self.state

    async def vote(self, client: VoteApiClient, requested: Any) -> VoteSnapshot:
        """Cast through the API with optimistic display.

        Raises:
            VoteClientError: If the API call failed (state already reverted)
        """
        tag = self.apply_pending(requested)
        try:
            result = await client.cast_vote(self.product_id, self.voter_id, requested)
        except VoteClientError:
            self.revert(tag)
            raise
        return self.confirm(tag, result)
