"""Product aggregate entity."""

from datetime import datetime

from pydantic import Field, computed_field

from tally.domain.model.common import DomainModel
from tally.domain.value import ProductId, VoteCounts
from tally.util.clock import utc_now


class ProductAggregate(DomainModel):
    """Cached up/down tally for a product.

    Incrementally maintained by the vote service for fast reads and
    wholesale replaced by reconciliation when it drifts from the ledger.
    """

    product_id: ProductId
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0)
    updated_at: datetime = Field(default_factory=utc_now)
    reconciled_at: datetime | None = None

    @computed_field
    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @property
    def counts(self) -> VoteCounts:
        return VoteCounts(upvotes=self.upvotes, downvotes=self.downvotes)

    @classmethod
    def empty(cls, product_id: ProductId) -> "ProductAggregate":
        return cls(product_id=product_id)
