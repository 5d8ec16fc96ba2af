"""
Token Issuer: signs and verifies bearer credentials.

Built on djangorestframework-simplejwt's ``TokenBackend``, with one
backend per signing domain.  Access and refresh tokens use different
keys, so a refresh token can never be replayed as an access token (and
vice versa) even before the ``token_type`` claim is looked at.
"""

from dataclasses import dataclass
from uuid import uuid4

from django.conf import settings
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.utils import aware_utcnow, datetime_to_epoch

ACCESS = "access"
REFRESH = "refresh"

CLAIM_KEYS = ("id", "username", "email", "role")


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """
    Mint and verify ``{id, username, email, role}`` credentials.

    Keys and lifetimes default to ``SIMPLE_JWT`` plus
    ``JWT_REFRESH_SIGNING_KEY``; pass them explicitly to build an issuer
    for tests or for a second deployment domain.
    """

    def __init__(
        self,
        access_key=None,
        refresh_key=None,
        access_lifetime=None,
        refresh_lifetime=None,
        algorithm=None,
    ):
        algorithm = algorithm or api_settings.ALGORITHM
        self._backends = {
            ACCESS: TokenBackend(algorithm, signing_key=access_key or api_settings.SIGNING_KEY),
            REFRESH: TokenBackend(
                algorithm,
                signing_key=refresh_key or settings.JWT_REFRESH_SIGNING_KEY,
            ),
        }
        self._lifetimes = {
            ACCESS: access_lifetime or api_settings.ACCESS_TOKEN_LIFETIME,
            REFRESH: refresh_lifetime or api_settings.REFRESH_TOKEN_LIFETIME,
        }

    def issue_pair(self, claims):
        return TokenPair(
            access_token=self._encode(ACCESS, claims),
            refresh_token=self._encode(REFRESH, claims),
        )

    def issue_access(self, claims):
        return self._encode(ACCESS, claims)

    def verify(self, token, is_refresh=False):
        """Return the embedded claims, or ``None`` for any invalid token."""
        token_type = REFRESH if is_refresh else ACCESS
        if not token:
            return None
        try:
            payload = self._backends[token_type].decode(token, verify=True)
        except TokenBackendError:
            return None
        if payload.get(api_settings.TOKEN_TYPE_CLAIM) != token_type:
            return None
        if any(key not in payload for key in CLAIM_KEYS):
            return None
        return {key: payload[key] for key in CLAIM_KEYS}

    def _encode(self, token_type, claims):
        now = aware_utcnow()
        payload = {key: claims.get(key) for key in CLAIM_KEYS}
        payload["id"] = str(payload["id"])
        payload.update(
            {
                api_settings.TOKEN_TYPE_CLAIM: token_type,
                "exp": datetime_to_epoch(now + self._lifetimes[token_type]),
                "iat": datetime_to_epoch(now),
                api_settings.JTI_CLAIM: uuid4().hex,
            }
        )
        return self._backends[token_type].encode(payload)
