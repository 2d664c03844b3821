"""Application layer DI providers."""

from dishka import Scope, provide

from tally.application.usecase.ranking import ListRankingsUseCase
from tally.application.usecase.reconciliation import ReconcileAggregatesUseCase
from tally.application.usecase.vote import (
    CastVoteUseCase,
    GetRemainingVotesUseCase,
    GetVoteStatusUseCase,
    ResetVoterVotesUseCase,
)
from tally.domain.service import ReconciliationService, VoteService
from tally.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Vote use cases
    @provide(scope=Scope.REQUEST)
    def get_cast_vote_use_case(self, vote_service: VoteService) -> CastVoteUseCase:
        """Provide cast vote use case."""
        return CastVoteUseCase(vote_service=vote_service)

    @provide(scope=Scope.REQUEST)
    def get_vote_status_use_case(
        self, vote_service: VoteService
    ) -> GetVoteStatusUseCase:
        """Provide get vote status use case."""
        return GetVoteStatusUseCase(vote_service=vote_service)

    @provide(scope=Scope.REQUEST)
    def get_remaining_votes_use_case(
        self, vote_service: VoteService
    ) -> GetRemainingVotesUseCase:
        """Provide get remaining votes use case."""
        return GetRemainingVotesUseCase(vote_service=vote_service)

    @provide(scope=Scope.REQUEST)
    def get_reset_voter_votes_use_case(
        self, vote_service: VoteService
    ) -> ResetVoterVotesUseCase:
        """Provide reset voter votes use case."""
        return ResetVoterVotesUseCase(vote_service=vote_service)

    # Ranking use cases
    @provide(scope=Scope.REQUEST)
    def get_list_rankings_use_case(
        self, vote_service: VoteService
    ) -> ListRankingsUseCase:
        """Provide list rankings use case."""
        return ListRankingsUseCase(vote_service=vote_service)

    # Reconciliation use cases
    @provide(scope=Scope.REQUEST)
    def get_reconcile_aggregates_use_case(
        self, reconciliation_service: ReconciliationService
    ) -> ReconcileAggregatesUseCase:
        """Provide reconcile aggregates use case."""
        return ReconcileAggregatesUseCase(
            reconciliation_service=reconciliation_service
        )
