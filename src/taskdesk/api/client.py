# src/taskdesk/api/client.py

"""
Async REST client for the users/tasks backend.

One shared httpx.AsyncClient, one ResourceClient per collection:
- /api/users/ -> UsersClient
- /api/tasks/ -> TasksClient (+ status / move)

Every non-2xx response raises ApiError, and so does a 2xx whose body is
not the expected JSON shape. No retries, no idempotency keys,
and no timeout unless one is configured.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

import httpx

from ..core.models import (
    MoveTaskRequest,
    Task,
    TaskStatus,
    UpdateTaskStatusRequest,
    User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(Exception):
    """Non-2xx response, an envelope with success=false, or a body that is not the expected JSON."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


def _raise_for_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise ApiError(response.status_code, response.text)


def unwrap_response(response: httpx.Response) -> Any:
    """
    Return the payload of a successful response.

    Backends are inconsistent: some endpoints wrap the entity in
    {"success": bool, "data": ...}, others return it raw. Both shapes are accepted.
    """
    _raise_for_status(response)

    if not response.content:
        return None

    try:
        payload = response.json()
    except ValueError:
        raise ApiError(response.status_code, response.text) from None
    if isinstance(payload, dict) and "data" in payload and isinstance(payload.get("success"), bool):
        if not payload["success"]:
            raise ApiError(response.status_code, response.text)
        return payload["data"]
    return payload


def _to_payload(body: Any) -> dict[str, Any]:
    to_payload = getattr(body, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    if isinstance(body, Mapping):
        return dict(body)
    raise TypeError(f"Unsupported request body: {type(body).__name__}")


class ResourceClient(Generic[T]):
    """CRUD over one REST collection rooted at `path` (e.g. "/api/users")."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        path: str,
        decode: Callable[[dict[str, Any]], T],
    ) -> None:
        self._http = http
        self._path = "/" + path.strip("/")
        self._decode = decode

    def _item_url(self, item_id: str, *suffix: str) -> str:
        parts = [self._path, str(item_id), *suffix]
        return "/".join(parts)

    def _decode_one(self, response: httpx.Response) -> T:
        data = unwrap_response(response)
        if not isinstance(data, dict):
            raise ApiError(response.status_code, response.text)
        return self._decode(data)

    def _decode_many(self, response: httpx.Response) -> list[T]:
        data = unwrap_response(response)
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ApiError(response.status_code, response.text)
        return [self._decode(item) for item in data]

    async def _send(self, method: str, url: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        response = await self._http.request(method, url, json=json)
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    async def list(self) -> list[T]:
        response = await self._send("GET", f"{self._path}/")
        return self._decode_many(response)

    async def get(self, item_id: str) -> T:
        response = await self._send("GET", self._item_url(item_id))
        return self._decode_one(response)

    async def create(self, body: Any) -> T:
        response = await self._send("POST", f"{self._path}/", json=_to_payload(body))
        return self._decode_one(response)

    async def update(self, item_id: str, body: Any) -> T:
        response = await self._send("PUT", self._item_url(item_id), json=_to_payload(body))
        return self._decode_one(response)

    async def delete(self, item_id: str) -> None:
        response = await self._send("DELETE", self._item_url(item_id))
        # Success has no body contract.
        _raise_for_status(response)


class UsersClient(ResourceClient[User]):
    def __init__(self, http: httpx.AsyncClient) -> None:
        super().__init__(http, "/api/users", User.from_api)


class TasksClient(ResourceClient[Task]):
    def __init__(self, http: httpx.AsyncClient) -> None:
        super().__init__(http, "/api/tasks", Task.from_api)

    async def update_status(self, task_id: str, status: TaskStatus | str) -> Task:
        body = UpdateTaskStatusRequest(TaskStatus(status))
        response = await self._send("PUT", self._item_url(task_id, "status"), json=body.to_payload())
        return self._decode_one(response)

    async def move(self, task_id: str, user_id: str) -> Task:
        body = MoveTaskRequest(user_id)
        response = await self._send("PUT", self._item_url(task_id, "move"), json=body.to_payload())
        return self._decode_one(response)


class ApiClient:
    """
    Owns the shared HTTP connection pool.

    Usage:
        async with ApiClient("http://localhost:8000") as api:
            users = await api.users.list()
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self.users = UsersClient(self._http)
        self.tasks = TasksClient(self._http)

    @classmethod
    def from_settings(cls, settings: Any) -> ApiClient:
        return cls(
            str(getattr(settings, "api_url", "http://localhost:8000")),
            timeout=getattr(settings, "http_timeout", None),
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
