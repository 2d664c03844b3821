"""Domain value objects for the vote engine.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from tally.domain.error import ValidationError
from tally.domain.value.common import ValueObject


class VoteType(str, Enum):
    """Direction of a recorded vote."""

    UP = "up"
    DOWN = "down"


class VoteChoice(str, Enum):
    """Action requested by a voter.

    ``CLEAR`` removes whatever vote the voter holds on the product.
    """

    UP = "up"
    DOWN = "down"
    CLEAR = "clear"

    @classmethod
    def parse(cls, value: Any) -> "VoteChoice":
        """Parse a wire value into a choice.

        Accepts ``"up"``, ``"down"``, ``"clear"``, ``None`` (clear) and the
        legacy numeric form ``1``, ``-1``, ``0``.

        Raises:
            ValidationError: If the value is not a known vote type
        """
        if value is None:
            return cls.CLEAR
        if isinstance(value, cls):
            return value
        if isinstance(value, VoteType):
            return cls(value.value)
        if isinstance(value, bool):
            raise ValidationError(f"Invalid vote type: {value!r}")
        if isinstance(value, int):
            numeric = {1: cls.UP, -1: cls.DOWN, 0: cls.CLEAR}
            if value in numeric:
                return numeric[value]
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValidationError(
            f"Invalid vote type: {value!r}. Use 'up', 'down' or 'clear' (1, -1 or 0)"
        )

    @property
    def vote_type(self) -> VoteType | None:
        """Vote type this choice records, None for clear."""
        if self is VoteChoice.CLEAR:
            return None
        return VoteType(self.value)


class VoterKind(str, Enum):
    """How a voter was identified."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class VoteTransition(str, Enum):
    """Ledger transition applied by a single cast."""

    CREATED = "created"
    TOGGLED_OFF = "toggled_off"
    CHANGED = "changed"
    CLEARED = "cleared"
    NOOP = "noop"


class VoteCounts(ValueObject):
    """Pair of up/down counters.

    Also used for differences between two tallies, so values may be negative.
    """

    upvotes: int = 0
    downvotes: int = 0

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    def __sub__(self, other: "VoteCounts") -> "VoteCounts":
        return VoteCounts(
            upvotes=self.upvotes - other.upvotes,
            downvotes=self.downvotes - other.downvotes,
        )

    @classmethod
    def for_vote(cls, vote_type: VoteType | None, sign: int = 1) -> "VoteCounts":
        """Counter delta contributed by a single vote."""
        if vote_type == VoteType.UP:
            return cls(upvotes=sign)
        if vote_type == VoteType.DOWN:
            return cls(downvotes=sign)
        return cls()


class QuotaDecision(ValueObject):
    """Outcome of a quota check.

    ``remaining`` is None for voters without a ceiling.
    """

    allowed: bool
    remaining: int | None = None
    limit: int | None = None
    window_reset_at: datetime | None = None

    @property
    def unlimited(self) -> bool:
        return self.remaining is None
