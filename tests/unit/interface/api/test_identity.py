"""Unit tests for voter identity resolution."""

import pytest

from tally.config import AuthSettings
from tally.domain.error import ValidationError
from tally.domain.service import JWTService
from tally.domain.value import VoterKind
from tally.interface.api.identity import resolve_voter
from tests.harness import create_token


@pytest.fixture
def jwt_service() -> JWTService:
    return JWTService(auth_settings=AuthSettings(jwt_secret="test-secret"))


class TestResolveVoter:
    """Token wins over the anonymous id."""

    def test_valid_token_is_authenticated(self, jwt_service):
        token = create_token("user-1", jwt_service.auth_settings)

        voter = resolve_voter(jwt_service, "anon-1", token)

        assert voter.id == "user-1"
        assert voter.kind == VoterKind.AUTHENTICATED

    def test_no_token_uses_anonymous_id(self, jwt_service):
        voter = resolve_voter(jwt_service, "anon-1", None)

        assert voter.id == "anon-1"
        assert voter.is_authenticated is False

    def test_token_signed_with_other_secret_is_ignored(self, jwt_service):
        token = create_token("user-1", AuthSettings(jwt_secret="other-secret"))

        voter = resolve_voter(jwt_service, "anon-1", token)

        assert voter.kind == VoterKind.ANONYMOUS

    @pytest.mark.parametrize("voter_id", [None, "", "   "])
    def test_no_identity_is_rejected(self, jwt_service, voter_id):
        with pytest.raises(ValidationError):
            resolve_voter(jwt_service, voter_id, None)
