"""Base use case."""

from abc import ABC, abstractmethod
from typing import Any

from tally.domain.model import Voter


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass


def voter_from(voter_id: str, authenticated: bool) -> Voter:
    """Build the voter identity resolved by the interface layer."""
    if authenticated:
        return Voter.authenticated(voter_id)
    return Voter.anonymous(voter_id)
