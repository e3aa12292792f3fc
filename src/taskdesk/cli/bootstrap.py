# src/taskdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the HTTP client into AppState (users/tasks view-models).
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..api.client import ApiClient
from ..config import get_settings
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, api: ApiClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the client) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if api is None:
        api = ApiClient.from_settings(settings)
    logger.info("Backend: %s", api.base_url)

    return AppState(
        settings=settings,
        user_repo=api.users,
        task_repo=api.tasks,
        api=api,
    )


async def close_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    state.unmount()
    api = getattr(state, "api", None)
    if api is None or not hasattr(api, "aclose"):
        return
    try:
        await api.aclose()
    except Exception:
        logger.exception("Failed to close HTTP client.")
