"""
Domain errors.

Each error class maps to exactly one client-visible outcome:

    ValidationError -> 400
    AuthError       -> 401
    NotFound        -> 404

The ``kind`` carried by ValidationError and AuthError is diagnostic.
AuthError kinds are only ever logged, never returned to clients.
"""

from __future__ import annotations


class TasklistError(Exception):
    """Base exception for domain errors."""
    pass


class ValidationError(TasklistError):
    """Malformed or missing input, or a duplicate email."""

    KINDS = ("invalid_email", "weak_password", "duplicate_email", "empty_text")

    def __init__(self, kind: str, message: str | None = None):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown validation error kind: {kind}")
        self.kind = kind
        super().__init__(message or kind)


class AuthError(TasklistError):
    """Missing, invalid or revoked token, or bad credentials."""

    KINDS = (
        "missing",
        "invalid_signature",
        "malformed",
        "unknown_subject",
        "revoked",
        "invalid_credentials",
    )

    def __init__(self, kind: str):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown auth error kind: {kind}")
        self.kind = kind
        super().__init__(kind)


class NotFound(TasklistError):
    """Unknown id, syntactically invalid id, or a resource owned by someone else."""
    pass
