# tests/test_models.py

from __future__ import annotations

import pytest

from taskdesk.core.models import (
    CreateTaskRequest,
    MoveTaskRequest,
    Task,
    TaskStatus,
    UpdateTaskRequest,
    UpdateUserRequest,
    User,
)


def test_user_from_api_accepts_underscore_id() -> None:
    assert User.from_api({"_id": "abc", "name": "Ann", "email": "a@x.com"}) == User(
        id="abc", name="Ann", email="a@x.com"
    )
    assert User.from_api({"id": 7, "name": "Bob", "email": "b@x.com"}).id == "7"


def test_task_from_api_reduces_embedded_user_to_id() -> None:
    task = Task.from_api(
        {
            "_id": "t1",
            "title": "Write docs",
            "status": "IN_PROGRESS",
            "user": {"_id": "u1", "name": "Ann", "email": "a@x.com"},
            "createdAt": "2024-03-01T10:00:00Z",
        }
    )
    assert task.id == "t1"
    assert task.user == "u1"
    assert task.status is TaskStatus.IN_PROGRESS
    assert task.created_at == "2024-03-01T10:00:00Z"

    assert Task.from_api({"id": "t2", "title": "x", "user": "u2"}).user == "u2"


def test_task_status_unknown_wire_value_falls_back_to_pending() -> None:
    assert TaskStatus.from_api("ARCHIVED") is TaskStatus.PENDING
    assert TaskStatus.from_api(None) is TaskStatus.PENDING


def test_task_status_parse_is_lenient() -> None:
    assert TaskStatus.parse("in-progress") is TaskStatus.IN_PROGRESS
    assert TaskStatus.parse(" completed ") is TaskStatus.COMPLETED
    with pytest.raises(ValueError, match="Unknown task status"):
        TaskStatus.parse("done")


def test_partial_payloads_omit_unset_fields() -> None:
    assert UpdateUserRequest(email="new@x.com").to_payload() == {"email": "new@x.com"}
    assert UpdateTaskRequest(status=TaskStatus.COMPLETED).to_payload() == {"status": "COMPLETED"}
    assert CreateTaskRequest(title="t", user="u1").to_payload() == {
        "title": "t",
        "user": "u1",
        "status": "PENDING",
    }
    assert MoveTaskRequest("u9").to_payload() == {"userId": "u9"}
