"""
FastAPI dependencies for authentication and service lookup.

Just use: `ctx: AuthContext = Depends(require_auth)`

- The token is read from the configured auth header (``x-auth`` by default)
- Services are taken from ``app.state``, set up by ``create_app``
- Any AuthError propagates to the app's exception handler, which answers
  401 with an empty body whatever the reason
"""

from __future__ import annotations

from fastapi import Depends, Request

from tasklist.auth.resolver import AuthContext, AuthResolver
from tasklist.integrations.sentry import set_user
from tasklist.services.tasks import TaskRepository
from tasklist.services.users import UserDirectory


def get_raw_token(request: Request) -> str | None:
    """Raw token from the auth header; None when absent."""
    return request.headers.get(request.app.state.settings.auth_header)


def get_user_directory(request: Request) -> UserDirectory:
    return request.app.state.users


def get_task_repository(request: Request) -> TaskRepository:
    return request.app.state.tasks


def get_auth_resolver(request: Request) -> AuthResolver:
    return request.app.state.auth_resolver


async def require_auth(
    raw_token: str | None = Depends(get_raw_token),
    resolver: AuthResolver = Depends(get_auth_resolver),
) -> AuthContext:
    """Resolve the caller, or raise AuthError."""
    ctx = await resolver.resolve(raw_token)
    set_user(ctx.user_id)
    return ctx
