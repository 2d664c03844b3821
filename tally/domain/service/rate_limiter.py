"""Anonymous voter quota service."""

from datetime import datetime, timedelta, timezone
from typing import Callable

import logfire

from tally.config import QuotaSettings
from tally.domain.model import QuotaState, Voter
from tally.domain.repository import QuotaRepository
from tally.domain.value import QuotaDecision
from tally.util.clock import utc_now

from .base import Service

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class RateLimiter(Service):
    """Caps how many new votes an anonymous voter may cast per window.

    Windows are fixed and aligned to the Unix epoch, so every voter's
    allowance resets at the same instant. Only vote creation spends the
    allowance; toggles, changes and clears are free.
    """

    def __init__(
        self, settings: QuotaSettings, clock: Callable[[], datetime] = utc_now
    ) -> None:
        """Initialize rate limiter.

        Args:
            settings: Quota settings
            clock: Source of the current time
        """
        self.settings = settings
        self.clock = clock

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.settings.window_hours)

    def window_reset_at(self, now: datetime) -> datetime:
        """End of the window containing ``now``."""
        elapsed = (now - EPOCH) // self.window
        return EPOCH + (elapsed + 1) * self.window

    def is_unlimited(self, voter: Voter) -> bool:
        return voter.is_authenticated or not self.settings.enabled

    def _fresh(self, voter: Voter, now: datetime) -> QuotaState:
        return QuotaState(
            voter_id=voter.key,
            remaining=self.settings.max_votes_per_window,
            window_reset_at=self.window_reset_at(now),
        )

    async def check_and_reserve(
        self, voter: Voter, quotas: QuotaRepository
    ) -> QuotaDecision:
        """Spend one vote from the voter's allowance if any is left.

        Must run inside the vote's store transaction so the reservation is
        rolled back together with the vote.

        Args:
            voter: Voter creating a vote
            quotas: Quota repository of the current transaction

        Returns:
            Decision with the allowance left after this vote
        """
        if self.is_unlimited(voter):
            return QuotaDecision(allowed=True)

        with logfire.span("rate_limiter.check_and_reserve", voter_id=voter.id):
            now = self.clock()
            state = await quotas.get_for_update(voter.key)
            if state is None or state.is_expired(now):
                state = self._fresh(voter, now)

            if state.remaining <= 0:
                logfire.info(
                    "Vote quota exhausted",
                    voter_id=voter.id,
                    window_reset_at=state.window_reset_at.isoformat(),
                )
                return QuotaDecision(
                    allowed=False,
                    remaining=0,
                    limit=self.settings.max_votes_per_window,
                    window_reset_at=state.window_reset_at,
                )

            state = await quotas.save(
                state.model_copy(update={"remaining": state.remaining - 1})
            )
            return QuotaDecision(
                allowed=True,
                remaining=state.remaining,
                limit=self.settings.max_votes_per_window,
                window_reset_at=state.window_reset_at,
            )

    async def remaining_votes(
        self, voter: Voter, quotas: QuotaRepository
    ) -> QuotaDecision:
        """Read the voter's allowance without spending it."""
        if self.is_unlimited(voter):
            return QuotaDecision(allowed=True)

        now = self.clock()
        state = await quotas.get(voter.key)
        if state is None or state.is_expired(now):
            state = self._fresh(voter, now)

        return QuotaDecision(
            allowed=state.remaining > 0,
            remaining=state.remaining,
            limit=self.settings.max_votes_per_window,
            window_reset_at=state.window_reset_at,
        )
