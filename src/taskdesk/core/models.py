# src/taskdesk/core/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task status as the backend spells it.

    Notes:
    - Any status may follow any other at the client; the backend decides validity.
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @classmethod
    def from_api(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """Parse user input leniently ("in-progress", "completed", ...)."""
        key = (raw or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown task status {raw!r} (expected one of: {allowed})") from None


def _entity_id(raw: dict[str, Any]) -> str:
    # Document-store backends spell the key "_id".
    value = raw.get("id", raw.get("_id"))
    return "" if value is None else str(value)


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> User:
        return cls(
            id=_entity_id(raw),
            name=str(raw.get("name") or ""),
            email=str(raw.get("email") or ""),
        )


UserRef = str
# Id of the owning user. Backends may embed the whole user object instead.


def _user_ref(raw: Any) -> UserRef:
    if isinstance(raw, dict):
        return _entity_id(raw)
    return "" if raw is None else str(raw)


@dataclass(slots=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    user: UserRef

    description: str | None = None
    created_at: str | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=_entity_id(raw),
            title=str(raw.get("title") or ""),
            status=TaskStatus.from_api(raw.get("status")),
            user=_user_ref(raw.get("user")),
            description=raw.get("description"),
            created_at=raw.get("createdAt", raw.get("created_at")),
        )


# ---- request payloads ----


def _drop_unset(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


@dataclass(slots=True)
class CreateUserRequest:
    name: str
    email: str

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email}


@dataclass(slots=True)
class UpdateUserRequest:
    """Partial update: fields left as None are not sent."""

    name: str | None = None
    email: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_unset({"name": self.name, "email": self.email})


@dataclass(slots=True)
class CreateTaskRequest:
    title: str
    user: UserRef
    status: TaskStatus = TaskStatus.PENDING
    description: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_unset(
            {
                "title": self.title,
                "user": self.user,
                "status": self.status.value,
                "description": self.description,
            }
        )


@dataclass(slots=True)
class UpdateTaskRequest:
    title: str | None = None
    status: TaskStatus | None = None
    user: UserRef | None = None
    description: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_unset(
            {
                "title": self.title,
                "status": self.status.value if self.status is not None else None,
                "user": self.user,
                "description": self.description,
            }
        )


@dataclass(slots=True, frozen=True)
class UpdateTaskStatusRequest:
    status: TaskStatus

    def to_payload(self) -> dict[str, Any]:
        return {"status": self.status.value}


@dataclass(slots=True, frozen=True)
class MoveTaskRequest:
    user_id: UserRef

    def to_payload(self) -> dict[str, Any]:
        return {"userId": self.user_id}
