# tests/test_commands.py

from __future__ import annotations

import httpx
import pytest

from taskdesk.api.client import ApiClient
from taskdesk.cli.commands import CommandRegistry, registry
from taskdesk.core.models import TaskStatus
from taskdesk.core.state import AppState, ViewMode


@pytest.mark.asyncio
async def test_command_registry_routes_sync_and_async(state) -> None:
    reg = CommandRegistry()
    called = {"sync": 0, "async": 0}

    def h_sync(state, args):
        called["sync"] += 1
        return "sync:" + ",".join(args)

    async def h_async(state, args):
        called["async"] += 1
        return "async:" + ",".join(args)

    reg.register("a", h_sync, "a")
    reg.register("b", h_async, "b", aliases=["bee"])

    assert await reg.handle(state, '/a x "y z"') == "sync:x,y z"
    assert await reg.handle(state, "/bee y") == "async:y"
    assert called == {"sync": 1, "async": 1}


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")
    assert "Cannot parse" in (await reg.handle(state, '/a "unterminated') or "")


@pytest.mark.asyncio
async def test_user_new_validates_before_calling_backend(state, user_repo) -> None:
    await state.mount()

    reply = await registry.handle(state, "/user new Ann bad-email")

    assert reply == "Email format is invalid"
    assert state.users.form_visible is False
    assert not [c for c, _ in user_repo.calls if c == "create"]


@pytest.mark.asyncio
async def test_user_new_creates_and_refreshes(state, user_repo) -> None:
    await state.mount()

    reply = await registry.handle(state, '/user new "Cy Doe" cy@x.com')

    assert reply is not None and reply.startswith("Created user id-1.")
    assert "Cy Doe - cy@x.com" in reply
    assert [u.id for u in state.users.items] == ["u1", "u2", "id-1"]
    assert state.users.form_visible is False


@pytest.mark.asyncio
async def test_user_new_backend_failure_keeps_snapshot(state, user_repo) -> None:
    await state.mount()
    before = list(state.users.items)
    user_repo.fail_next = True

    reply = await registry.handle(state, "/user new Cy cy@x.com")

    assert reply is not None and reply.startswith("Failed to save user: API error (500)")
    assert state.users.items == before
    assert state.users.form_visible is False


@pytest.mark.asyncio
async def test_user_edit_sends_only_changed_fields(state, user_repo) -> None:
    await state.mount()

    await registry.handle(state, '/user edit u1 name="Ann Lee"')

    kind, (user_id, body) = user_repo.calls[-2]
    assert (kind, user_id) == ("update", "u1")
    assert body.to_payload() == {"name": "Ann Lee"}
    assert state.users.find("u1").name == "Ann Lee"
    assert state.users.editing_id == "u1"


@pytest.mark.asyncio
async def test_user_rm_missing_is_silent_and_keeps_items(state) -> None:
    await state.mount()
    before = list(state.users.items)

    reply = await registry.handle(state, "/user rm missing-id")

    assert state.users.items == before
    assert reply is not None and reply.startswith("List of Users:")


@pytest.mark.asyncio
async def test_task_status_and_move_refresh_snapshot(state, task_repo) -> None:
    await state.mount()

    await registry.handle(state, "/task status t1 completed")
    assert state.tasks.find("t1").status is TaskStatus.COMPLETED

    reply = await registry.handle(state, "/task move t1 u2")
    assert state.tasks.find("t1").user == "u2"
    assert reply is not None and "COMPLETED (1):" in reply
    assert "[t1] Write docs -> Bob" in reply


@pytest.mark.asyncio
async def test_task_new_requires_title_and_user(state, task_repo) -> None:
    await state.mount()

    assert (await registry.handle(state, "/task new u1")) == "Usage: /task new <user_id> <title...>"
    reply = await registry.handle(state, "/task new u1 Plan the release")

    assert reply is not None and reply.startswith("Created task id-1.")
    assert state.tasks.find("id-1").title == "Plan the release"


@pytest.mark.asyncio
async def test_status_reports_counts(state) -> None:
    await state.mount()
    reply = await registry.handle(state, "/status")
    assert "Users: 2 (viewing)" in (reply or "")
    assert "Tasks: 2 (viewing)" in (reply or "")


def _state_over_odd_backend(settings) -> AppState:
    """Backend that lists fine but answers writes with bodies the client cannot decode."""

    users = [{"_id": "u1", "name": "Ann", "email": "ann@x.com"}]
    tasks = [{"_id": "t1", "title": "Write docs", "status": "PENDING", "user": "u1"}]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            data = users if request.url.path == "/api/users/" else tasks
            return httpx.Response(200, json={"success": True, "data": data})
        if request.method == "POST":
            return httpx.Response(201, text="Created")
        return httpx.Response(204)

    api = ApiClient(settings.api_url, transport=httpx.MockTransport(handler))
    return AppState(settings=settings, user_repo=api.users, task_repo=api.tasks, api=api)


@pytest.mark.asyncio
async def test_user_new_with_undecodable_2xx_closes_form(settings) -> None:
    state = _state_over_odd_backend(settings)
    await state.mount()

    reply = await registry.handle(state, "/user new Cy cy@x.com")

    assert reply is not None and reply.startswith("Failed to save user: API error (201)")
    assert state.users.form_visible is False
    assert state.users.mode is ViewMode.VIEWING
    await state.api.aclose()


@pytest.mark.asyncio
async def test_edit_with_empty_204_closes_form(settings) -> None:
    state = _state_over_odd_backend(settings)
    await state.mount()

    user_reply = await registry.handle(state, "/user edit u1 name=Bob")
    task_reply = await registry.handle(state, "/task edit t1 Write more docs")

    assert user_reply is not None and user_reply.startswith("Failed to save user: API error (204)")
    assert task_reply is not None and task_reply.startswith("Failed to save task: API error (204)")
    assert state.users.mode is ViewMode.VIEWING
    assert state.tasks.mode is ViewMode.VIEWING
    await state.api.aclose()


@pytest.mark.asyncio
async def test_unexpected_save_error_propagates_but_closes_form(state, task_repo, monkeypatch) -> None:
    await state.mount()

    async def _broken_create(body):
        raise RuntimeError("decoder bug")

    monkeypatch.setattr(task_repo, "create", _broken_create)

    with pytest.raises(RuntimeError, match="decoder bug"):
        await registry.handle(state, "/task new u1 Plan the release")

    assert state.tasks.form_visible is False
    assert [t.id for t in state.tasks.items] == ["t1", "t2"]
