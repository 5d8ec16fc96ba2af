"""Tests for the Token Issuer."""

import time
from datetime import timedelta

import pytest

from apps.accounts.tokens import TokenIssuer

CLAIMS = {
    "id": "6f1c0a5e-3d0b-4a41-9a57-1f0b6a8c2d11",
    "username": "jane",
    "email": "jane@example.com",
    "role": "user",
}


class TestTokenIssuer:

    def test_pair_round_trip(self, token_issuer):
        pair = token_issuer.issue_pair(CLAIMS)
        assert token_issuer.verify(pair.access_token) == CLAIMS
        assert token_issuer.verify(pair.refresh_token, is_refresh=True) == CLAIMS

    def test_refresh_token_rejected_as_access(self, token_issuer):
        pair = token_issuer.issue_pair(CLAIMS)
        assert token_issuer.verify(pair.refresh_token) is None

    def test_access_token_rejected_as_refresh(self, token_issuer):
        pair = token_issuer.issue_pair(CLAIMS)
        assert token_issuer.verify(pair.access_token, is_refresh=True) is None

    def test_same_key_still_separated_by_token_type(self):
        issuer = TokenIssuer(access_key="k" * 40, refresh_key="k" * 40)
        pair = issuer.issue_pair(CLAIMS)
        assert issuer.verify(pair.refresh_token) is None
        assert issuer.verify(pair.access_token, is_refresh=True) is None

    def test_foreign_key_rejected(self, token_issuer):
        other = TokenIssuer(access_key="a" * 40, refresh_key="b" * 40)
        assert token_issuer.verify(other.issue_access(CLAIMS)) is None

    def test_expired(self):
        issuer = TokenIssuer(access_lifetime=timedelta(seconds=1))
        token = issuer.issue_access(CLAIMS)
        time.sleep(2)
        assert issuer.verify(token) is None

    @pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
    def test_garbage(self, token_issuer, token):
        assert token_issuer.verify(token) is None
        assert token_issuer.verify(token, is_refresh=True) is None

    def test_tampered(self, token_issuer):
        token = token_issuer.issue_access(CLAIMS)
        head, payload, sig = token.split(".")
        tampered = ".".join([head, payload, sig[::-1]])
        assert token_issuer.verify(tampered) is None

    def test_tokens_are_unique(self, token_issuer):
        assert token_issuer.issue_access(CLAIMS) != token_issuer.issue_access(CLAIMS)

    def test_uuid_id_serialized_as_string(self, token_issuer, user):
        token = token_issuer.issue_access({**user.claims, "id": user.pk})
        assert token_issuer.verify(token)["id"] == str(user.pk)
