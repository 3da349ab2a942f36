"""
Shared utility functions for the tasklist service.
"""

from __future__ import annotations

import re
import time
import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "user", "task")

    Returns:
        A unique ID like "task_0f8a...e21c" (32 hex chars after the prefix)
    """
    uid = uuid.uuid4().hex
    return f"{prefix}_{uid}" if prefix else uid


def is_valid_id(value: object, prefix: str = "") -> bool:
    """Check that a value has the shape produced by generate_id(prefix)."""
    if not isinstance(value, str):
        return False
    pattern = rf"{re.escape(prefix)}_[0-9a-f]{{32}}" if prefix else r"[0-9a-f]{32}"
    return re.fullmatch(pattern, value) is not None


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_millis() -> int:
    """Current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000
