"""Domain layer DI providers."""

from dishka import Scope, provide

from tally.config import AuthSettings, QuotaSettings, StorageSettings, VotingSettings
from tally.domain.repository import VoteStore
from tally.domain.service import (
    Broadcaster,
    JWTService,
    RateLimiter,
    ReconciliationService,
    VoteService,
)
from tally.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Services are REQUEST-scoped and cheap to build; the store and
    broadcaster they wrap are shared for the whole app.
    """

    scope = Scope.REQUEST

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_rate_limiter(self, quota_settings: QuotaSettings) -> RateLimiter:
        """Provide anonymous voter quota service."""
        return RateLimiter(settings=quota_settings)

    @provide
    def get_vote_service(
        self,
        store: VoteStore,
        rate_limiter: RateLimiter,
        broadcaster: Broadcaster,
        voting_settings: VotingSettings,
        storage_settings: StorageSettings,
        auth_settings: AuthSettings,
    ) -> VoteService:
        """Provide vote domain service."""
        return VoteService(
            store=store,
            rate_limiter=rate_limiter,
            broadcaster=broadcaster,
            voting_settings=voting_settings,
            storage_settings=storage_settings,
            auth_settings=auth_settings,
        )

    @provide
    def get_reconciliation_service(self, store: VoteStore) -> ReconciliationService:
        """Provide aggregate reconciliation domain service."""
        return ReconciliationService(store=store)
