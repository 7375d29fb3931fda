"""
Tasks API endpoints.

All routes run behind bearer token verification; request.uid is the
verified requester. Each route performs exactly one store operation.
"""
import logging
from typing import List, Optional

from django.http import HttpRequest
from ninja import Router

from apps.identity.auth import token_auth
from .dtos import TaskIn, TaskPatch, TaskOut
from .services import (
    list_tasks_for_owner,
    create_task,
    update_task,
    delete_task,
    ownership_enforced_on_write,
)

logger = logging.getLogger(__name__)

router = Router(tags=["Tasks"], auth=token_auth)


def _write_scope(request: HttpRequest) -> Optional[str]:
    # Update/delete key on id alone unless ownership enforcement is on.
    return request.uid if ownership_enforced_on_write() else None


@router.get("", response=List[TaskOut])
def list_tasks_api(request: HttpRequest):
    """List the requester's tasks."""
    return list_tasks_for_owner(request.uid)


@router.post("", response=TaskOut)
def create_task_api(request: HttpRequest, payload: TaskIn):
    """
    Create a task owned by the requester.

    The owner always comes from the verified token, never from the body.
    """
    return create_task(
        request.uid,
        title=payload.title if payload.title is not None else '',
        completed=bool(payload.completed),
    )


@router.put("/{task_id}", response=Optional[TaskOut])
def update_task_api(request: HttpRequest, task_id: str, payload: TaskPatch):
    """
    Update title and/or completed on a task.

    Returns null when the task does not exist.
    """
    task = update_task(task_id, payload.dict(exclude_unset=True), owner=_write_scope(request))
    if task is None:
        logger.info(f"Update of missing task {task_id} by {request.uid}")
    return task


@router.delete("/{task_id}", response={204: None})
def delete_task_api(request: HttpRequest, task_id: str):
    """Delete a task. Missing ids are not an error."""
    delete_task(task_id, owner=_write_scope(request))
    return 204, None
