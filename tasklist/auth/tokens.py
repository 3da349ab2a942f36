# =============================================================================
# Session Token Service
# =============================================================================
#
# Signed JWTs bound to a user id and the "auth" purpose.
#
# Tokens carry no expiry. A token is only honoured while it is listed in
# the owning user's sessions, which is checked by AuthResolver, so revoking
# a session is a storage write rather than a change to the token itself.
#
# =============================================================================

from __future__ import annotations

import logging

import jwt
from pydantic import BaseModel

from tasklist.core.errors import AuthError
from tasklist.core.models import AUTH_PURPOSE
from tasklist.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Verified token claims."""
    sub: str  # user_id
    access: str  # purpose, always "auth"


class TokenService:
    """
    Issues and verifies session tokens.

    The signing key is passed in explicitly; there is no module-level secret.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm

    def issue(self, user_id: str) -> str:
        """Create a token for a user. Each call returns a distinct token."""
        payload = {
            "sub": user_id,
            "access": AUTH_PURPOSE,
            "iat": utc_now(),
            "jti": generate_id("tok"),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """
        Decode and validate a token.

        Raises:
            AuthError("invalid_signature"): signed with another key, or tampered
            AuthError("malformed"): anything else wrong with the token
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "access"]},
            )
        except jwt.InvalidSignatureError:
            raise AuthError("invalid_signature")
        except (jwt.InvalidTokenError, ValueError, TypeError):
            raise AuthError("malformed")

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise AuthError("malformed")
        if payload.get("access") != AUTH_PURPOSE:
            raise AuthError("malformed")

        return TokenPayload(sub=sub, access=AUTH_PURPOSE)
