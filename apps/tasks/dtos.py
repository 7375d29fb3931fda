"""Schemas for the Tasks app."""
from typing import Optional
from uuid import UUID

from ninja import Schema
from pydantic import field_validator


class TaskFields(Schema):
    # null means "unset" for both fields.
    title: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator('title', mode='before')
    @classmethod
    def scalar_title_to_str(cls, value):
        # Numbers are stored as their text; lists/objects still fail the str check.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class TaskIn(TaskFields):
    pass


class TaskPatch(TaskFields):
    # Only fields present in the request body are applied.
    pass


class TaskOut(Schema):
    # owner is a filter key only and never leaves the server.
    id: UUID
    title: str
    completed: bool
