# src/taskdesk/core/state.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from .models import Task, User
from .ports import ResourceRepo, TaskRepo

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ViewMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


def _item_id(item: Any) -> str | None:
    return getattr(item, "id", None)


class ListManager(Generic[T]):
    """
    View-model for one remote collection.

    Holds:
    - items: snapshot of the collection, in server order
    - form_visible: whether the create/edit form is shown
    - editing: item being edited (None while creating)

    Sync rules:
    - the snapshot is replaced wholesale by refresh(), never merged
    - remove() is the exception: the deleted id is filtered out locally
    - failures are logged, never raised to the caller
    """

    def __init__(self, repo: ResourceRepo[T], *, label: str = "items") -> None:
        self._repo = repo
        self.label = label

        self.items: list[T] = []
        self.form_visible: bool = False
        self.editing: T | None = None

        self._initialized = False
        self._mounted = True
        self._listeners: list[Listener] = []

    # ---- derived state ----

    @property
    def mode(self) -> ViewMode:
        return ViewMode.EDITING if self.form_visible else ViewMode.VIEWING

    @property
    def editing_id(self) -> str | None:
        if self.editing is None:
            return None
        return _item_id(self.editing)

    @property
    def mounted(self) -> bool:
        return self._mounted

    def find(self, item_id: str) -> T | None:
        for item in self.items:
            if _item_id(item) == item_id:
                return item
        return None

    # ---- change notification ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a re-render callback; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("%s listener failed", self.label)

    # ---- lifecycle ----

    async def initialize(self) -> None:
        """Load the collection once per mount. Later calls are no-ops."""
        if self._initialized:
            return
        self._initialized = True
        await self.refresh()

    def unmount(self) -> None:
        """End of lifecycle: late refresh results are dropped, listeners detached."""
        self._mounted = False
        self._listeners.clear()

    async def refresh(self) -> bool:
        try:
            items = await self._repo.list()
        except Exception:
            logger.exception("Error loading %s", self.label)
            return False

        if not self._mounted:
            logger.debug("Dropping %s refresh that resolved after unmount", self.label)
            return False

        self.items = list(items)
        logger.debug("Loaded %d %s", len(self.items), self.label)
        self._notify()
        return True

    # ---- form actions ----

    def start_create(self) -> None:
        self.form_visible = True
        self.editing = None
        self._notify()

    def start_edit(self, item: T) -> None:
        self.form_visible = True
        self.editing = item
        self._notify()

    def cancel(self) -> None:
        # `editing` is left as-is; only start_create() clears it.
        self.form_visible = False
        self._notify()

    async def on_saved(self) -> None:
        """Close the form and reload. The create/update call has already been made."""
        self.form_visible = False
        self._notify()
        await self.refresh()

    async def remove(self, item_id: str) -> bool:
        try:
            await self._repo.delete(item_id)
        except Exception:
            logger.exception("Error deleting %s id=%s", self.label, item_id)
            return False

        self.items = [item for item in self.items if _item_id(item) != item_id]
        self._notify()
        return True


# Re-render callback, called with the view-model after each state change.
Listener = Callable[[ListManager[Any]], None]


@dataclass
class AppState:
    settings: object

    user_repo: ResourceRepo[User]
    task_repo: TaskRepo

    users: ListManager[User] = field(init=False)
    tasks: ListManager[Task] = field(init=False)

    # Closed on shutdown (ApiClient); None when repos are fakes.
    api: Any = None

    def __post_init__(self) -> None:
        self.users = ListManager(self.user_repo, label="users")
        self.tasks = ListManager(self.task_repo, label="tasks")

    async def mount(self) -> None:
        await self.users.initialize()
        await self.tasks.initialize()

    def unmount(self) -> None:
        self.users.unmount()
        self.tasks.unmount()
