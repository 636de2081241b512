"""HTTP clients for the remote time-log and project/task services.

The time-log service is the authority for log records: it opens them, closes
them and computes their final duration. The project directory only lists what
the user may categorize time against.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError

from worklog.api.errors import ApiError, NotFoundError, TransientApiError
from worklog.api.models import Project, StopRequest, Task, TimeLogRecord
from worklog.config.settings import ApiSettings
from worklog.utils.logging import get_logger, timed_operation

logger = get_logger("worklog.api")


class ApiClient:
    """Thin async JSON client over ``httpx.AsyncClient``.

    Maps transport failures and status codes onto the ``ApiError`` hierarchy
    so callers never see raw httpx exceptions.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ApiSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ApiClient:
        return cls(
            base_url=settings.base_url,
            timeout=settings.timeout,
            token=settings.token,
            transport=transport,
        )

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        with timed_operation("api.request", logger=logger, method=method, path=path):
            try:
                response = await self._client.request(method, path, json=json)
            except httpx.TimeoutException as exc:
                raise TransientApiError(f"{method} {path} timed out") from exc
            except httpx.TransportError as exc:
                raise TransientApiError(f"{method} {path} failed: {exc}") from exc

        body = _decode(response)
        if response.is_success:
            return body

        message = _error_message(body) or f"{method} {path} returned {response.status_code}"
        if response.status_code == 404:
            raise NotFoundError(message, response.status_code, body)
        if response.status_code >= 500:
            raise TransientApiError(message, response.status_code, body)
        raise ApiError(message, response.status_code, body)

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json={} if json is None else json)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        if not response.is_success:
            return None
        raise ApiError(
            f"Undecodable response from {response.request.url}",
            response.status_code,
        ) from exc


def _error_message(body: Any) -> str | None:
    if isinstance(body, dict):
        return body.get("msg") or body.get("message") or body.get("error")
    return None


def unwrap(body: Any) -> Any:
    """Strip the ``{"message": ..., "data": ...}`` envelope when present."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


def extract_items(body: Any, key: str) -> list[Any]:
    """Pull a list of items out of the shapes list endpoints are known to return.

    Accepts a bare list, ``{key: [...]}``, ``{key: {"data": [...]}}`` and
    ``{"data": [...]}``.
    """
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        return []
    for candidate in (body.get(key), body.get("data")):
        if isinstance(candidate, list):
            return candidate
        if isinstance(candidate, dict):
            nested = candidate.get("data")
            if isinstance(nested, list):
                return nested
    return []


def _parse_record(body: Any) -> TimeLogRecord:
    data = unwrap(body)
    if isinstance(data, dict) and isinstance(data.get("log"), dict):
        data = data["log"]
    try:
        return TimeLogRecord.model_validate(data)
    except ValidationError as exc:
        raise ApiError(f"Malformed time log payload: {exc.error_count()} error(s)", payload=body) from exc


def _parse_many(model: type[Any], items: list[Any]) -> list[Any]:
    parsed = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            logger.warning("api.item_skipped", model=model.__name__, item=item)
    return parsed


# ==================== TIME-LOG SERVICE ====================


class TimeLogService(ABC):
    """Contract of the remote authority for time logs."""

    @abstractmethod
    async def create(self) -> TimeLogRecord:
        """Open a new, uncategorized log."""

    @abstractmethod
    async def finalize(self, log_id: int, request: StopRequest) -> TimeLogRecord:
        """Close ``log_id`` with its project/task; returns the closed record."""

    @abstractmethod
    async def get(self, log_id: int) -> TimeLogRecord:
        """Fetch a log, used to detect logs closed elsewhere."""


class HttpTimeLogService(TimeLogService):
    def __init__(self, client: ApiClient):
        self.client = client

    async def create(self) -> TimeLogRecord:
        return _parse_record(await self.client.post("/logs/startTimeLog", {}))

    async def finalize(self, log_id: int, request: StopRequest) -> TimeLogRecord:
        body = await self.client.post(f"/logs/stopTimeLog/{log_id}", request.to_payload())
        return _parse_record(body)

    async def get(self, log_id: int) -> TimeLogRecord:
        return _parse_record(await self.client.get(f"/logs/getLogById/{log_id}"))


# ==================== PROJECT DIRECTORY ====================


class ProjectDirectory(ABC):
    """Source lists for the stop-categorization choices."""

    @abstractmethod
    async def owned_projects(self) -> list[Project]: ...

    @abstractmethod
    async def member_projects(self) -> list[Project]: ...

    @abstractmethod
    async def created_tasks(self) -> list[Task]: ...

    @abstractmethod
    async def assigned_tasks(self) -> list[Task]: ...


class HttpProjectDirectory(ProjectDirectory):
    def __init__(self, client: ApiClient, user_id: int | None = None):
        self.client = client
        self.user_id = user_id

    async def owned_projects(self) -> list[Project]:
        body = await self.client.get("/project/getAllProjectsOfUser")
        return _parse_many(Project, extract_items(body, "projects"))

    async def member_projects(self) -> list[Project]:
        body = await self.client.get("/projectMember/getAllProjectsAUserIsMemberOf")
        return _parse_many(Project, extract_items(body, "projects"))

    async def created_tasks(self) -> list[Task]:
        body = await self.client.get("/task/getAllTasksOfUser")
        return _parse_many(Task, extract_items(body, "tasks"))

    async def assigned_tasks(self) -> list[Task]:
        if self.user_id is None:
            logger.debug("api.assigned_tasks_skipped", reason="no user_id configured")
            return []
        body = await self.client.get(f"/taskAssignment/user/{self.user_id}/assigned")
        return _parse_many(Task, extract_items(body, "tasks"))
