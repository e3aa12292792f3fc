# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdesk.api.client import ApiClient
from taskdesk.core.models import Task, TaskStatus, User
from taskdesk.core.state import AppState

from .fakes import FakeBackend, FakeTaskRepo, FakeUserRepo


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskdesk-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_url="http://backend.test",
        http_timeout=None,
        console_enabled=False,
    )


@pytest.fixture()
def user_repo() -> FakeUserRepo:
    return FakeUserRepo(
        [
            User(id="u1", name="Ann", email="ann@x.com"),
            User(id="u2", name="Bob", email="bob@x.com"),
        ]
    )


@pytest.fixture()
def task_repo() -> FakeTaskRepo:
    return FakeTaskRepo(
        [
            Task(id="t1", title="Write docs", status=TaskStatus.PENDING, user="u1"),
            Task(id="t2", title="Ship it", status=TaskStatus.IN_PROGRESS, user="u2"),
        ]
    )


@pytest.fixture()
def state(settings: SimpleNamespace, user_repo: FakeUserRepo, task_repo: FakeTaskRepo) -> AppState:
    """AppState wired with in-memory repos (no HTTP)."""
    return AppState(settings=settings, user_repo=user_repo, task_repo=task_repo)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def api(backend: FakeBackend) -> ApiClient:
    """Real ApiClient talking to FakeBackend through httpx.MockTransport."""
    return ApiClient("http://backend.test", transport=backend.transport())
