"""
Unit tests for bearer-token identity.
"""

import pytest

from stashkeeper.core.auth import TokenVerifier, bearer_token
from stashkeeper.core.errors import AuthenticationError


@pytest.fixture
def verifier():
    return TokenVerifier('test-secret', max_age=3600)


class TestTokenVerifier:

    def test_issue_and_verify(self, verifier):
        token = verifier.issue('player_123')
        assert verifier.verify(token) == 'player_123'

    @pytest.mark.parametrize('credential', [None, ''])
    def test_missing_credential(self, verifier, credential):
        with pytest.raises(AuthenticationError, match="Must be authenticated"):
            verifier.verify(credential)

    def test_forged_token(self, verifier):
        forged = TokenVerifier('other-secret').issue('player_123')
        with pytest.raises(AuthenticationError, match="Invalid token"):
            verifier.verify(forged)

    def test_garbage_token(self, verifier):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            verifier.verify('not-a-token')

    def test_expired_token(self, verifier):
        token = verifier.issue('player_123')
        strict = TokenVerifier('test-secret', max_age=-1)
        with pytest.raises(AuthenticationError, match="Token expired"):
            strict.verify(token)

    def test_issue_requires_player(self, verifier):
        with pytest.raises(ValueError):
            verifier.issue('')


class TestBearerToken:

    def test_extracts_token(self):
        assert bearer_token('Bearer abc.def') == 'abc.def'

    def test_scheme_case_insensitive(self):
        assert bearer_token('bearer abc') == 'abc'

    @pytest.mark.parametrize('header', [None, '', 'Bearer', 'Bearer   ', 'Basic abc', 'abc'])
    def test_rejects_other_headers(self, header):
        assert bearer_token(header) is None
