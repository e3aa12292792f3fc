# src/taskdesk/core/forms.py

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from .models import CreateTaskRequest, CreateUserRequest, Task, TaskStatus

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _field(data: Any, name: str) -> Any:
    # Forms hand over either request objects or raw dicts.
    if isinstance(data, Mapping):
        return data.get(name)
    return getattr(data, name, None)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email or ""))


def validate_user_form(data: CreateUserRequest | Mapping[str, Any]) -> str | None:
    """Return the first validation message for a user form, or None if it is valid."""
    name = _field(data, "name")
    if not name or not str(name).strip():
        return "Name is required"

    email = _field(data, "email")
    if not email or not str(email).strip():
        return "Email is required"

    if not is_valid_email(str(email)):
        return "Email format is invalid"

    return None


def validate_task_form(data: CreateTaskRequest | Mapping[str, Any]) -> str | None:
    title = _field(data, "title")
    if not title or not str(title).strip():
        return "Title is required"

    if not _field(data, "user"):
        return "User assignment is required"

    return None


def format_date(value: str) -> str:
    """Render an ISO-8601 timestamp in local time; unparseable input is returned as-is."""
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return value
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def group_tasks_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Bucket tasks per status; every status gets a key, order within a bucket is kept."""
    grouped: dict[TaskStatus, list[Task]] = {s: [] for s in TaskStatus}
    for task in tasks:
        grouped[task.status].append(task)
    return grouped
