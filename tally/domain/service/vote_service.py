"""Vote domain service."""

import asyncio
from typing import Any

import logfire

from tally.config import AuthSettings, StorageSettings, VotingSettings
from tally.domain.error import (
    BroadcastError,
    NotFoundError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)
from tally.domain.model import (
    ProductAggregate,
    VotePlan,
    VoteRecord,
    VoteResult,
    Voter,
    VoteStatus,
    VoteUpdate,
)
from tally.domain.repository import StoreTransaction, VoteKey, VoteStore
from tally.domain.value import (
    ProductId,
    QuotaDecision,
    VoteChoice,
    VoterId,
    VoteTransition,
)
from tally.util.clock import utc_now

from .base import Service
from .broadcaster import Broadcaster
from .rate_limiter import RateLimiter

MAX_RANKING_PAGE = 100


class VoteService(Service):
    """Domain service for vote operations.

    Every cast runs in a single store transaction holding the
    (product, voter) lock: ledger write, quota reservation and aggregate
    delta commit together or not at all.
    """

    def __init__(
        self,
        store: VoteStore,
        rate_limiter: RateLimiter,
        broadcaster: Broadcaster,
        voting_settings: VotingSettings,
        storage_settings: StorageSettings,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize vote service.

        Args:
            store: Vote store (ledger, aggregates and quotas)
            rate_limiter: Anonymous voter quota service
            broadcaster: Real-time update fan-out
            voting_settings: Voting behaviour settings
            storage_settings: Storage retry settings
            auth_settings: Secret used to derive broadcast voter tags
        """
        self.store = store
        self.rate_limiter = rate_limiter
        self.broadcaster = broadcaster
        self.voting_settings = voting_settings
        self.storage_settings = storage_settings
        self.auth_settings = auth_settings

    def validate_product_id(self, product_id: Any) -> ProductId:
        if not isinstance(product_id, str) or not product_id.strip():
            raise ValidationError("Product ID is required")
        if len(product_id) > self.voting_settings.max_id_length:
            raise ValidationError(
                f"Product ID must be at most {self.voting_settings.max_id_length} characters"
            )
        return ProductId(product_id)

    def voter_tag(self, voter: Voter) -> str:
        return voter.tag(self.auth_settings.jwt_secret)

    def validate_voter_id(self, voter_id: Any) -> VoterId:
        if not isinstance(voter_id, str) or not voter_id.strip():
            raise ValidationError("Voter ID is required")
        if len(voter_id) > self.voting_settings.max_id_length:
            raise ValidationError(
                f"Voter ID must be at most {self.voting_settings.max_id_length} characters"
            )
        return VoterId(voter_id)

    async def cast_vote(self, product_id: str, voter: Voter, requested: Any) -> VoteResult:
        """Apply a voter's up/down/clear action to a product.

        Voting the same way twice removes the vote. Only creating a vote
        spends an anonymous voter's quota.

        Args:
            product_id: Product being voted on
            voter: Voter casting the vote
            requested: Vote type as received ("up", "down", "clear", None, 1, -1, 0)

        Returns:
            Canonical counts and the voter's vote after the cast

        Raises:
            ValidationError: If the product, voter or vote type is malformed
            QuotaExceededError: If an anonymous voter has no new votes left
            NotFoundError: If the product is unknown and auto-registration is off
            StorageError: If storage still fails after retrying
        """
        product_id = self.validate_product_id(product_id)
        self.validate_voter_id(voter.id)
        choice = VoteChoice.parse(requested)

        # Once storage is touched the cast completes even if the caller goes away
        return await asyncio.shield(self._cast_and_publish(product_id, voter, choice))

    async def _cast_and_publish(
        self, product_id: ProductId, voter: Voter, choice: VoteChoice
    ) -> VoteResult:
        with logfire.span(
            "vote_service.cast_vote",
            product_id=product_id,
            voter_id=voter.id,
            voter_kind=voter.kind.value,
            choice=choice.value,
        ):
            result = await self._cast_with_retry(product_id, voter, choice)
            logfire.info(
                "Vote cast",
                product_id=product_id,
                voter_id=voter.id,
                transition=result.transition.value,
                upvotes=result.upvotes,
                downvotes=result.downvotes,
            )
            if result.transition != VoteTransition.NOOP:
                await self._publish(voter, result)
            return result

    async def _cast_with_retry(
        self, product_id: ProductId, voter: Voter, choice: VoteChoice
    ) -> VoteResult:
        attempt = 1
        while True:
            try:
                return await self._cast_once(product_id, voter, choice)
            except StorageError as e:
                if attempt > self.storage_settings.retry_attempts:
                    logfire.error(
                        "Vote failed after retries",
                        product_id=product_id,
                        voter_id=voter.id,
                        attempts=attempt,
                        kind=e.kind,
                        error=str(e),
                    )
                    raise
                logfire.warn(
                    "Retrying vote after storage failure",
                    product_id=product_id,
                    voter_id=voter.id,
                    attempt=attempt,
                    kind=e.kind,
                    error=str(e),
                )
                attempt += 1

    async def _cast_once(
        self, product_id: ProductId, voter: Voter, choice: VoteChoice
    ) -> VoteResult:
        voter_key = voter.key
        async with self.store.transaction(VoteKey(product_id, voter_key)) as tx:
            await self._require_product(tx, product_id)

            current = await tx.votes.get(product_id, voter_key)
            plan = VotePlan.resolve(current.vote_type if current else None, choice)

            quota = await self._quota_for(tx, voter, plan)

            now = utc_now()
            if plan.vote_type is None:
                if current is not None:
                    await tx.votes.delete(product_id, voter_key)
            elif current is None:
                await tx.votes.upsert(
                    VoteRecord(
                        product_id=product_id,
                        voter_id=voter_key,
                        vote_type=plan.vote_type,
                        created_at=now,
                        updated_at=now,
                    )
                )
            else:
                await tx.votes.upsert(
                    current.model_copy(update={"vote_type": plan.vote_type, "updated_at": now})
                )

            if plan.transition == VoteTransition.NOOP:
                aggregate = await tx.aggregates.get(product_id)
            else:
                aggregate = await tx.aggregates.apply_delta(
                    product_id, plan.delta.upvotes, plan.delta.downvotes
                )

        return VoteResult.from_aggregate(
            aggregate,
            plan.vote_type,
            plan.transition,
            quota.remaining,
            voter_tag=self.voter_tag(voter),
        )

    async def _require_product(self, tx: StoreTransaction, product_id: ProductId) -> None:
        if self.voting_settings.auto_register_products:
            return
        if not await tx.aggregates.exists(product_id):
            logfire.warn("Vote on unregistered product", product_id=product_id)
            raise NotFoundError("Product", product_id)

    async def _quota_for(
        self, tx: StoreTransaction, voter: Voter, plan: VotePlan
    ) -> QuotaDecision:
        if not plan.is_new_vote:
            return await self.rate_limiter.remaining_votes(voter, tx.quotas)

        decision = await self.rate_limiter.check_and_reserve(voter, tx.quotas)
        if not decision.allowed:
            raise QuotaExceededError(voter.id, decision.window_reset_at)
        return decision

    async def _publish(self, voter: Voter, result: VoteResult) -> None:
        try:
            await self.broadcaster.publish(
                result.product_id, VoteUpdate.from_result(self.voter_tag(voter), result)
            )
        except BroadcastError as e:
            # Subscribers re-fetch canonical counts; the vote itself stands
            logfire.warn(
                "Vote update broadcast failed",
                product_id=result.product_id,
                error=str(e),
            )

    async def get_vote_status(self, product_id: str, voter: Voter) -> VoteStatus:
        """Get a voter's vote on a product along with the product's counts.

        Raises:
            ValidationError: If the product or voter ID is malformed
            NotFoundError: If the product is unknown and auto-registration is off
        """
        product_id = self.validate_product_id(product_id)
        self.validate_voter_id(voter.id)

        async with self.store.transaction() as tx:
            await self._require_product(tx, product_id)
            record = await tx.votes.get(product_id, voter.key)
            aggregate = await tx.aggregates.get(product_id)

        return VoteStatus(
            product_id=product_id,
            vote_type=record.vote_type if record else None,
            upvotes=aggregate.upvotes,
            downvotes=aggregate.downvotes,
            voter_tag=self.voter_tag(voter),
        )

    async def get_remaining_votes(self, voter: Voter) -> QuotaDecision:
        """Get how many new votes the voter may still cast in this window."""
        self.validate_voter_id(voter.id)
        async with self.store.transaction() as tx:
            return await self.rate_limiter.remaining_votes(voter, tx.quotas)

    async def remove_all_votes(self, voter: Voter) -> int:
        """Clear every vote the voter holds.

        Each removal is a regular clear, so aggregates and subscribers are
        updated exactly as for an individual cast.

        Returns:
            Number of votes removed
        """
        self.validate_voter_id(voter.id)

        with logfire.span("vote_service.remove_all_votes", voter_id=voter.id):
            async with self.store.transaction() as tx:
                records = await tx.votes.list_by_voter(voter.key)

            removed = 0
            for record in records:
                result = await self.cast_vote(record.product_id, voter, VoteChoice.CLEAR)
                if result.transition == VoteTransition.CLEARED:
                    removed += 1

            logfire.info("Voter votes reset", voter_id=voter.id, removed=removed)
            return removed

    async def list_rankings(self, limit: int = 30, offset: int = 0) -> list[ProductAggregate]:
        """List product tallies by score, then upvotes, then product ID."""
        if limit < 1 or limit > MAX_RANKING_PAGE:
            raise ValidationError(f"Limit must be between 1 and {MAX_RANKING_PAGE}")
        if offset < 0:
            raise ValidationError("Offset must not be negative")

        async with self.store.transaction() as tx:
            return await tx.aggregates.top(limit=limit, offset=offset)
