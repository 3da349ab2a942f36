"""
Services - the stateful stores behind the API.

Services:
- UserDirectory: registration, login, logout, session lists
- TaskRepository: owner-scoped task CRUD
"""

from tasklist.services.users import UserDirectory
from tasklist.services.tasks import TaskRepository, completion_updates

__all__ = [
    "UserDirectory",
    "TaskRepository",
    "completion_updates",
]
