"""Voter identity."""

import hashlib
import hmac

from tally.domain.model.common import DomainModel
from tally.domain.value import VoterId, VoterKind

VOTER_TAG_LENGTH = 16


class Voter(DomainModel):
    """Identity casting votes.

    Anonymous ids are opaque tokens minted and persisted by the client;
    authenticated ids come from a verified session token. The two kinds
    never share ledger or quota rows, see ``key``.
    """

    id: VoterId
    kind: VoterKind = VoterKind.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.kind == VoterKind.AUTHENTICATED

    @property
    def key(self) -> VoterId:
        """Ledger and quota key, namespaced by kind.

        An anonymous client claiming a user's id gets ``anon:<id>`` and can
        never reach the rows of ``user:<id>``.
        """
        prefix = "user" if self.is_authenticated else "anon"
        return VoterId(f"{prefix}:{self.id}")

    def tag(self, secret: str) -> str:
        """Pseudonymous id that is safe to show to other clients.

        Anonymous ids double as bearer tokens, so broadcasts carry this keyed
        hash instead. The acting client learns its own tag from vote results.
        """
        digest = hmac.new(secret.encode(), self.key.encode(), hashlib.sha256)
        return digest.hexdigest()[:VOTER_TAG_LENGTH]

    @classmethod
    def anonymous(cls, voter_id: str) -> "Voter":
        return cls(id=VoterId(voter_id), kind=VoterKind.ANONYMOUS)

    @classmethod
    def authenticated(cls, user_id: str) -> "Voter":
        return cls(id=VoterId(user_id), kind=VoterKind.AUTHENTICATED)
