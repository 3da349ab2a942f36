"""
Authentication - passwords, session tokens and request resolution.

Design principles:
1. Signed tokens, revocable through the user's session list
2. Every failure reason collapses to a single 401 for clients
3. Secrets are passed in explicitly, never read from module globals

Routes live in ``tasklist.auth.routes`` and are mounted by the app.
"""

from tasklist.auth.passwords import PasswordHasher
from tasklist.auth.tokens import TokenService, TokenPayload
from tasklist.auth.resolver import AuthContext, AuthResolver

__all__ = [
    "PasswordHasher",
    "TokenService",
    "TokenPayload",
    "AuthContext",
    "AuthResolver",
]
