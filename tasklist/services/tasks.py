"""
Task repository - every operation is scoped to one owner.

Ownership is part of the storage filter itself ({"id": ..., "owner": ...}),
so a task belonging to someone else is simply never matched. Unknown ids,
malformed ids and other users' tasks all come back as NotFound.
"""

from __future__ import annotations

import logging
from typing import Any

from tasklist.core.errors import NotFound, ValidationError
from tasklist.core.models import Task, TaskUpdate
from tasklist.core.utils import is_valid_id, now_millis
from tasklist.storage.base import Collections, MetadataStorage

logger = logging.getLogger(__name__)


def _clean_text(text: object) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("empty_text", "Task text must not be empty")
    return text.strip()


def completion_updates(completed: bool) -> dict[str, Any]:
    """
    Fields written for an incoming ``completed`` value.

    ``true`` always stamps a fresh completed_at, even when the task was
    already complete. ``false`` always clears it.
    """
    if completed:
        return {"completed": True, "completed_at": now_millis()}
    return {"completed": False, "completed_at": None}


class TaskRepository:
    """Owner-scoped CRUD over Task records."""

    def __init__(self, storage: MetadataStorage):
        self.storage = storage

    @staticmethod
    def _owned(owner_id: str, task_id: str) -> dict[str, Any]:
        if not is_valid_id(task_id, "task"):
            raise NotFound()
        return {"id": task_id, "owner": owner_id}

    async def create(self, owner_id: str, text: str | None) -> Task:
        """
        Create a task for an owner.

        Raises:
            ValidationError("empty_text"): text missing or blank
        """
        task = Task(text=_clean_text(text), owner=owner_id)
        await self.storage.insert(Collections.TASKS, task.model_dump(mode="json"))
        logger.debug(f"Created task {task.id} for {owner_id}")
        return task

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        """All tasks of an owner, in creation order."""
        docs = await self.storage.query(Collections.TASKS, {"owner": owner_id})
        return [Task.model_validate(d) for d in docs]

    async def get_owned(self, owner_id: str, task_id: str) -> Task:
        """Get one of the owner's tasks, or raise NotFound."""
        data = await self.storage.find_one(Collections.TASKS, self._owned(owner_id, task_id))
        if data is None:
            raise NotFound()
        return Task.model_validate(data)

    async def update_owned(self, owner_id: str, task_id: str, patch: TaskUpdate) -> Task:
        """
        Apply a partial update to one of the owner's tasks.

        Validation happens before anything is written.

        Raises:
            NotFound: task missing or not owned
            ValidationError("empty_text"): text supplied but blank
        """
        filters = self._owned(owner_id, task_id)

        updates: dict[str, Any] = {}
        if patch.text is not None:
            updates["text"] = _clean_text(patch.text)
        if patch.completed is not None:
            updates.update(completion_updates(patch.completed))

        if updates:
            data = await self.storage.find_one_and_update(Collections.TASKS, filters, updates)
        else:
            data = await self.storage.find_one(Collections.TASKS, filters)
        if data is None:
            raise NotFound()
        return Task.model_validate(data)

    async def delete_owned(self, owner_id: str, task_id: str) -> Task:
        """Delete one of the owner's tasks and return it as it was."""
        data = await self.storage.find_one_and_delete(
            Collections.TASKS, self._owned(owner_id, task_id)
        )
        if data is None:
            raise NotFound()
        logger.debug(f"Deleted task {task_id} for {owner_id}")
        return Task.model_validate(data)
