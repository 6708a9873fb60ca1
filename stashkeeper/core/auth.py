"""
Bearer-token identity for Stashkeeper.

Tokens are signed, timestamped player ids (itsdangerous). The inventory
core only needs ``verify(credential) -> player_id``; issuing tokens is
exposed for the CLI and for whatever login flow sits in front of the
server.
"""

import logging
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .errors import AuthenticationError

logger = logging.getLogger(__name__)

TOKEN_SALT = 'stashkeeper.player'


class TokenVerifier:
    """
    Issues and verifies player bearer tokens.

    Example:
        verifier = TokenVerifier(config.secret_key, max_age=3600)
        token = verifier.issue('player_123')
        verifier.verify(token)  # 'player_123'
    """

    def __init__(self, secret_key: str, max_age: Optional[int] = None):
        """
        Args:
            secret_key: Signing key (Config.secret_key)
            max_age: Token lifetime in seconds; None disables expiry
        """
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self.max_age = max_age

    def issue(self, player_id: str) -> str:
        """Sign a token for a player id."""
        if not player_id:
            raise ValueError("player_id is required")
        return self._serializer.dumps(player_id)

    def verify(self, credential: Optional[str]) -> str:
        """
        Resolve a bearer credential to a player id.

        Raises:
            AuthenticationError: Missing, expired, forged or malformed credential
        """
        if not credential:
            raise AuthenticationError("Must be authenticated")

        try:
            player_id = self._serializer.loads(credential, max_age=self.max_age)
        except SignatureExpired as e:
            raise AuthenticationError("Token expired") from e
        except BadSignature as e:
            logger.warning("Rejected token with bad signature")
            raise AuthenticationError("Invalid token") from e

        if not isinstance(player_id, str) or not player_id:
            raise AuthenticationError("Invalid token")
        return player_id


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


__all__ = ['TokenVerifier', 'bearer_token', 'TOKEN_SALT']
