"""
Auth resolution - raw token in, (user, session) out.

Two phases: the token must verify cryptographically, and it must still be
listed in the user's sessions. The second phase is what makes logout work
for stateless tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tasklist.auth.tokens import TokenService
from tasklist.core.errors import AuthError
from tasklist.core.models import User

if TYPE_CHECKING:
    from tasklist.services.users import UserDirectory


@dataclass
class AuthContext:
    """
    The authenticated caller for a request.

    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(require_auth)):
            tasks = await repo.list_by_owner(ctx.user_id)
    """

    user: User
    session_token: str

    @property
    def user_id(self) -> str:
        return self.user.id


class AuthResolver:
    """Resolves a raw token to the user and session it belongs to."""

    def __init__(self, tokens: TokenService, users: UserDirectory):
        self.tokens = tokens
        self.users = users

    async def resolve(self, raw_token: str | None) -> AuthContext:
        """
        Raises:
            AuthError: missing, invalid_signature, malformed,
                unknown_subject or revoked
        """
        if not raw_token:
            raise AuthError("missing")

        payload = self.tokens.verify(raw_token)

        user = await self.users.find_by_id(payload.sub)
        if user is None:
            raise AuthError("unknown_subject")

        if not user.has_session(raw_token):
            raise AuthError("revoked")

        return AuthContext(user=user, session_token=raw_token)
