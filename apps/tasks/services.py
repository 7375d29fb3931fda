"""
Services for Tasks app.

Each function is a single store operation; nothing here spans more than
one query or runs inside a shared transaction.
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.conf import settings

from .models import Task

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('title', 'completed')


def ownership_enforced_on_write() -> bool:
    """Whether update/delete are scoped to the requester's own tasks."""
    return getattr(settings, 'TASKS_ENFORCE_OWNERSHIP_ON_WRITE', False)


def _parse_task_id(task_id) -> Optional[UUID]:
    if isinstance(task_id, UUID):
        return task_id
    try:
        return UUID(str(task_id))
    except ValueError:
        return None


def list_tasks_for_owner(owner: str) -> List[Task]:
    """Return the owner's tasks in creation order."""
    return list(Task.objects.filter(owner=owner))


def create_task(owner: str, title: str = '', completed: bool = False) -> Task:
    task = Task.objects.create(owner=owner, title=title, completed=completed)
    logger.info(f"Created task {task.id} for owner {owner}")
    return task


def update_task(task_id, fields: Dict[str, Any], owner: Optional[str] = None) -> Optional[Task]:
    """
    Shallow-merge title/completed onto an existing task.

    Returns None if no task has that id. When owner is given, a task
    belonging to someone else is treated as absent.
    Keys other than title/completed and None values are ignored.
    """
    pk = _parse_task_id(task_id)
    if pk is None:
        return None

    queryset = Task.objects.filter(id=pk)
    if owner is not None:
        queryset = queryset.filter(owner=owner)

    task = queryset.first()
    if task is None:
        return None

    changes = {
        key: value for key, value in fields.items()
        if key in UPDATABLE_FIELDS and value is not None
    }
    for attr, value in changes.items():
        setattr(task, attr, value)

    if changes:
        task.save(update_fields=[*changes, 'updated_at'])
    return task


def delete_task(task_id, owner: Optional[str] = None) -> bool:
    """
    Delete a task if present.

    Returns True if a task was removed. Deleting an absent id is a no-op.
    """
    pk = _parse_task_id(task_id)
    if pk is None:
        return False

    queryset = Task.objects.filter(id=pk)
    if owner is not None:
        queryset = queryset.filter(owner=owner)

    deleted, _ = queryset.delete()
    if deleted:
        logger.info(f"Deleted task {pk}")
    return bool(deleted)
