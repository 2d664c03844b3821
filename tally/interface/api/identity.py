"""Voter identity resolution for API routes."""

from tally.domain.error import ValidationError
from tally.domain.model import Voter
from tally.domain.service import JWTService


def resolve_voter(
    jwt_service: JWTService, voter_id: str | None, auth_token: str | None
) -> Voter:
    """Pick the identity a request votes as.

    A valid session token wins and makes the voter authenticated (no
    quota). Otherwise the client's anonymous voter ID is used.

    Raises:
        ValidationError: If there is neither a valid token nor a voter ID
    """
    user_id = jwt_service.get_user_id_from_token(auth_token)
    if user_id:
        return Voter.authenticated(user_id)
    if voter_id and voter_id.strip():
        return Voter.anonymous(voter_id)
    raise ValidationError("Voter ID is required")
