"""
Core data models for the tasklist service.

These are plain records. Token issuance, password checks and ownership
rules live on the services in ``tasklist.auth`` and ``tasklist.services``,
not on the models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, StrictBool

from tasklist.core.utils import generate_id, utc_now


AUTH_PURPOSE = "auth"


# =============================================================================
# User
# =============================================================================


class Session(BaseModel):
    """One logged-in session: a token the user has not logged out of."""

    token: str
    purpose: Literal["auth"] = AUTH_PURPOSE


class User(BaseModel):
    """
    A registered user.

    ``sessions`` is kept in append order, most recent last. A signed token
    is only honoured while it is listed here.
    """

    id: str = Field(default_factory=lambda: generate_id("user"))
    email: str
    password_hash: str
    sessions: list[Session] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)

    def has_session(self, token: str) -> bool:
        return any(s.token == token for s in self.sessions)


class UserResponse(BaseModel):
    """User data returned to client (no sensitive fields)."""
    id: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(id=user.id, email=user.email)


# =============================================================================
# Task
# =============================================================================


class Task(BaseModel):
    """
    A todo item owned by exactly one user.

    ``completed_at`` is epoch milliseconds and is set only while
    ``completed`` is true.
    """

    id: str = Field(default_factory=lambda: generate_id("task"))
    text: str
    completed: bool = False
    completed_at: int | None = None
    owner: str

    created_at: datetime = Field(default_factory=utc_now)


class TaskCreate(BaseModel):
    """Task creation data."""
    text: str | None = None


class TaskUpdate(BaseModel):
    """Partial task update. Omitted fields are left alone."""
    text: str | None = None
    completed: StrictBool | None = None  # only a JSON boolean drives completion


class TaskResponse(BaseModel):
    """Task data returned to client."""
    id: str
    text: str
    completed: bool
    completed_at: int | None = None
    owner: str

    @classmethod
    def from_task(cls, task: Task) -> TaskResponse:
        return cls(
            id=task.id,
            text=task.text,
            completed=task.completed,
            completed_at=task.completed_at,
            owner=task.owner,
        )
