"""
Core module - data models, domain errors and shared utilities.

This module contains:
- models: User, Session and Task records plus their client-facing views
- errors: ValidationError, AuthError, NotFound
- utils: id generation and clocks
"""

from tasklist.core.models import (
    AUTH_PURPOSE,
    Session,
    User,
    UserResponse,
    Task,
    TaskCreate,
    TaskUpdate,
    TaskResponse,
)

from tasklist.core.errors import (
    TasklistError,
    ValidationError,
    AuthError,
    NotFound,
)

from tasklist.core.utils import (
    generate_id,
    is_valid_id,
    utc_now,
    now_millis,
)

__all__ = [
    # Models
    "AUTH_PURPOSE",
    "Session",
    "User",
    "UserResponse",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    # Errors
    "TasklistError",
    "ValidationError",
    "AuthError",
    "NotFound",
    # Utils
    "generate_id",
    "is_valid_id",
    "utc_now",
    "now_millis",
]
