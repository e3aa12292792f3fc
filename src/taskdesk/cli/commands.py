# src/taskdesk/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import Any

import httpx

from ..api.client import ApiError
from ..core.forms import format_date, group_tasks_by_status, validate_task_form, validate_user_form
from ..core.models import (
    CreateTaskRequest,
    CreateUserRequest,
    Task,
    TaskStatus,
    UpdateTaskRequest,
    UpdateUserRequest,
    User,
)
from ..core.state import AppState, ListManager

CommandResult = str | Awaitable[str]
CommandHandler = Callable[[AppState, list[str]], CommandResult]

logger = logging.getLogger(__name__)

# Failures a form submit can hit; anything else is a bug and propagates.
_SAVE_ERRORS = (ApiError, httpx.HTTPError)


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /users, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Arguments are shell-split, so quoted values may contain spaces.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        result = handler(state, args)
        # Handlers may be plain functions or coroutines.
        if inspect.isawaitable(result):
            return await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def render_users(users: Iterable[User]) -> str:
    users = list(users)
    if not users:
        return "No users found."
    lines = ["List of Users:"]
    for u in users:
        lines.append(f"  [{u.id}] {u.name} - {u.email}")
    return "\n".join(lines)


def _user_label(user_id: str, users: Iterable[User]) -> str:
    for u in users:
        if u.id == user_id:
            return u.name
    return user_id or "?"


def render_tasks(tasks: Iterable[Task], users: Iterable[User] = ()) -> str:
    tasks = list(tasks)
    if not tasks:
        return "No tasks found."
    users = list(users)
    lines: list[str] = []
    for status, bucket in group_tasks_by_status(tasks).items():
        lines.append(f"{status.value} ({len(bucket)}):")
        for t in bucket:
            created = f" ({format_date(t.created_at)})" if t.created_at else ""
            lines.append(f"  [{t.id}] {t.title} -> {_user_label(t.user, users)}{created}")
    return "\n".join(lines)


def _split_kv(args: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep:
            out[key.strip().lower()] = value
    return out


@contextlib.contextmanager
def _open_form(vm: ListManager[Any]) -> Iterator[None]:
    """Form session: the form is closed on every exit path that did not reach on_saved()."""
    try:
        yield
    finally:
        if vm.form_visible:
            vm.cancel()


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    api_url = getattr(state.settings, "api_url", "?")
    return (
        "Status:\n"
        f"  Backend: {api_url}\n"
        f"  Users: {len(state.users.items)} ({state.users.mode.value})\n"
        f"  Tasks: {len(state.tasks.items)} ({state.tasks.mode.value})"
    )


async def cmd_users(state: AppState, args: list[str]) -> str:
    """
    /users          -> show the current snapshot
    /users reload   -> re-fetch from the backend first
    """
    if args and args[0].lower() in ("reload", "refresh"):
        await state.users.refresh()
    return render_users(state.users.items)


async def _user_new(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return 'Usage: /user new "<name>" <email>'

    vm = state.users
    vm.start_create()
    with _open_form(vm):
        form = CreateUserRequest(name=" ".join(args[:-1]), email=args[-1])
        error = validate_user_form(form)
        if error:
            return error

        try:
            created = await state.user_repo.create(form)
        except _SAVE_ERRORS as e:
            logger.exception("Error creating user")
            return f"Failed to save user: {e}"

        await vm.on_saved()
    return f"Created user {created.id}.\n{render_users(vm.items)}"


async def _user_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return 'Usage: /user edit <id> [name="<name>"] [email=<email>]'

    vm = state.users
    user = vm.find(args[0])
    if user is None:
        return f"No user with id {args[0]} (try /users reload)."

    fields = _split_kv(args[1:])
    if not fields.keys() & {"name", "email"}:
        return "Nothing to update: pass name=... and/or email=..."

    vm.start_edit(user)
    with _open_form(vm):
        form = UpdateUserRequest(name=fields.get("name"), email=fields.get("email"))
        error = validate_user_form(
            {
                "name": user.name if form.name is None else form.name,
                "email": user.email if form.email is None else form.email,
            }
        )
        if error:
            return error

        try:
            await state.user_repo.update(user.id, form)
        except _SAVE_ERRORS as e:
            logger.exception("Error updating user id=%s", user.id)
            return f"Failed to save user: {e}"

        await vm.on_saved()
    return render_users(vm.items)


async def _user_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /user rm <id>"
    # Failures are logged by the view-model; the list is re-rendered either way.
    await state.users.remove(args[0])
    return render_users(state.users.items)


async def cmd_user(state: AppState, args: list[str]) -> str:
    """
    /user new "<name>" <email>
    /user edit <id> [name=...] [email=...]
    /user rm <id>
    """
    sub = args[0].lower() if args else ""
    if sub in ("new", "add", "create"):
        return await _user_new(state, args[1:])
    if sub == "edit":
        return await _user_edit(state, args[1:])
    if sub in ("rm", "del", "delete"):
        return await _user_rm(state, args[1:])
    return (
        "Usage:\n"
        '  /user new "<name>" <email>\n'
        "  /user edit <id> [name=...] [email=...]\n"
        "  /user rm <id>"
    )


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    if args and args[0].lower() in ("reload", "refresh"):
        await state.tasks.refresh()
    return render_tasks(state.tasks.items, state.users.items)


async def _task_new(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /task new <user_id> <title...>"

    vm = state.tasks
    vm.start_create()
    with _open_form(vm):
        form = CreateTaskRequest(title=" ".join(args[1:]), user=args[0])
        error = validate_task_form(form)
        if error:
            return error

        try:
            created = await state.task_repo.create(form)
        except _SAVE_ERRORS as e:
            logger.exception("Error creating task")
            return f"Failed to save task: {e}"

        await vm.on_saved()
    return f"Created task {created.id}.\n{render_tasks(vm.items, state.users.items)}"


async def _task_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /task edit <id> <new title...>"

    vm = state.tasks
    task = vm.find(args[0])
    if task is None:
        return f"No task with id {args[0]} (try /tasks reload)."

    vm.start_edit(task)
    with _open_form(vm):
        title = " ".join(args[1:])
        error = validate_task_form({"title": title, "user": task.user})
        if error:
            return error

        try:
            await state.task_repo.update(task.id, UpdateTaskRequest(title=title))
        except _SAVE_ERRORS as e:
            logger.exception("Error updating task id=%s", task.id)
            return f"Failed to save task: {e}"

        await vm.on_saved()
    return render_tasks(vm.items, state.users.items)


async def _task_status(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        allowed = " | ".join(s.value for s in TaskStatus)
        return f"Usage: /task status <id> <{allowed}>"
    try:
        status = TaskStatus.parse(args[1])
    except ValueError as e:
        return str(e)

    try:
        await state.task_repo.update_status(args[0], status)
    except _SAVE_ERRORS as e:
        logger.exception("Error updating status of task id=%s", args[0])
        return f"Failed to update task: {e}"

    await state.tasks.refresh()
    return render_tasks(state.tasks.items, state.users.items)


async def _task_move(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /task move <id> <user_id>"
    try:
        await state.task_repo.move(args[0], args[1])
    except _SAVE_ERRORS as e:
        logger.exception("Error moving task id=%s", args[0])
        return f"Failed to move task: {e}"

    await state.tasks.refresh()
    return render_tasks(state.tasks.items, state.users.items)


async def _task_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /task rm <id>"
    await state.tasks.remove(args[0])
    return render_tasks(state.tasks.items, state.users.items)


async def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task new <user_id> <title...>
    /task edit <id> <new title...>
    /task status <id> <status>
    /task move <id> <user_id>
    /task rm <id>
    """
    sub = args[0].lower() if args else ""
    rest = args[1:]

    handlers: dict[str, Callable[[AppState, list[str]], Awaitable[str]]] = {
        "new": _task_new,
        "add": _task_new,
        "edit": _task_edit,
        "status": _task_status,
        "move": _task_move,
        "rm": _task_rm,
        "delete": _task_rm,
    }
    handler = handlers.get(sub)
    if handler is None:
        return (
            "Usage:\n"
            "  /task new <user_id> <title...>\n"
            "  /task edit <id> <new title...>\n"
            "  /task status <id> <status>\n"
            "  /task move <id> <user_id>\n"
            "  /task rm <id>"
        )

    return await handler(state, rest)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend URL and collection sizes.")
registry.register("users", cmd_users, help_text="List users: /users [reload].")
registry.register("user", cmd_user, help_text="Manage users: /user new | edit | rm.")
registry.register("tasks", cmd_tasks, help_text="List tasks grouped by status: /tasks [reload].")
registry.register(
    "task", cmd_task, help_text="Manage tasks: /task new | edit | status | move | rm."
)