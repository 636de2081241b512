"""Shared fixtures: fake clock, fake remote services and an HTTP fake backend."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from worklog.api.client import ProjectDirectory, TimeLogService
from worklog.api.errors import NotFoundError
from worklog.api.models import Project, StopRequest, Task, TimeLogRecord
from worklog.core.controller import TimerController
from worklog.core.store import SnapshotPersistence, TimerStore
from worklog.utils.formatting import elapsed_seconds

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# FAKES
# =============================================================================


class FakeClock:
    """Manually driven clock."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now

    def at(self, seconds: float) -> datetime:
        """Jump to ``T0 + seconds``."""
        self.now = T0 + timedelta(seconds=seconds)
        return self.now


class FakeTimeLogService(TimeLogService):
    """In-memory time-log authority with failure injection."""

    def __init__(self, clock: FakeClock, next_id: int = 7):
        self.clock = clock
        self.next_id = next_id
        self.records: dict[int, TimeLogRecord] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.fail_create: Exception | None = None
        self.fail_finalize: Exception | None = None
        self.fail_get: Exception | None = None
        self.send_start_time = True
        self.gate: asyncio.Event | None = None

    async def create(self) -> TimeLogRecord:
        self.calls.append(("create",))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_create is not None:
            raise self.fail_create
        record = TimeLogRecord(
            id=self.next_id,
            start_time=self.clock() if self.send_start_time else None,
        )
        self.records[record.id] = record.model_copy(update={"start_time": self.clock()})
        self.next_id += 1
        return record

    async def finalize(self, log_id: int, request: StopRequest) -> TimeLogRecord:
        self.calls.append(("finalize", log_id, request))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_finalize is not None:
            raise self.fail_finalize
        record = self.records[log_id]
        end = self.clock()
        closed = record.model_copy(
            update={
                "end_time": end,
                "project_id": request.project_id,
                "task_id": request.task_id,
                "description": request.description,
                "duration": elapsed_seconds(record.start_time, end),
            }
        )
        self.records[log_id] = closed
        return closed

    async def get(self, log_id: int) -> TimeLogRecord:
        self.calls.append(("get", log_id))
        if self.fail_get is not None:
            raise self.fail_get
        if log_id not in self.records:
            raise NotFoundError(f"Log {log_id} not found", 404)
        return self.records[log_id]

    def open_log(self, log_id: int, start_time: datetime) -> None:
        self.records[log_id] = TimeLogRecord(id=log_id, start_time=start_time)

    def close_remotely(self, log_id: int, end_time: datetime, name: str = "Standup") -> None:
        self.records[log_id] = self.records[log_id].model_copy(
            update={"end_time": end_time, "name": name, "time_spent": 300}
        )

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


class FakeDirectory(ProjectDirectory):
    def __init__(
        self,
        owned: list[Project] | None = None,
        member: list[Project] | None = None,
        created: list[Task] | None = None,
        assigned: list[Task] | None = None,
    ):
        self.owned = owned or []
        self.member = member or []
        self.created = created or []
        self.assigned = assigned or []

    async def owned_projects(self) -> list[Project]:
        return list(self.owned)

    async def member_projects(self) -> list[Project]:
        return list(self.member)

    async def created_tasks(self) -> list[Task]:
        return list(self.created)

    async def assigned_tasks(self) -> list[Task]:
        return list(self.assigned)


class FakeSocket:
    """Stands in for ``socketio.AsyncClient``; tests deliver events by hand."""

    def __init__(self, refuse: Exception | None = None):
        self.handlers: dict[str, Any] = {}
        self.connected = False
        self.connections: list[tuple[str, dict[str, Any]]] = []
        self.refuse = refuse

    def on(self, event: str, handler: Any) -> Any:
        self.handlers[event] = handler
        return handler

    async def connect(self, url: str, **kwargs: Any) -> None:
        self.connections.append((url, kwargs))
        if self.refuse is not None:
            raise self.refuse
        self.connected = True
        await self.handlers["connect"]()

    async def disconnect(self) -> None:
        self.connected = False
        await self.handlers["disconnect"]()

    async def deliver(self, event: str, data: Any) -> None:
        await self.handlers[event](data)


class FakeBackend:
    """HTTP-level fake of the time-log and project services.

    Used through ``httpx.MockTransport`` by the CLI and TUI tests.
    """

    def __init__(self, next_id: int = 7):
        self.next_id = next_id
        self.logs: dict[int, dict[str, Any]] = {}
        self.projects: list[dict[str, Any]] = [
            {"id": 3, "name": "Website", "status": "In Progress"},
            {"id": 4, "name": "Archive", "status": "Completed"},
        ]
        self.member_projects: list[dict[str, Any]] = [
            {"id": 3, "name": "Website", "status": "In Progress"},
        ]
        self.tasks: list[dict[str, Any]] = [
            {"id": 9, "subject": "Landing page", "status": "In Progress", "projectId": 3},
            {"id": 10, "subject": "Old copy", "status": "Done", "projectId": 3},
        ]
        self.assigned: Any = {"tasks": {"data": []}}
        self.requests: list[httpx.Request] = []
        self.stop_duration = 65

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")

        if request.method == "POST" and path == "/logs/startTimeLog":
            log_id = self.next_id
            self.next_id += 1
            self.logs[log_id] = {
                "id": log_id,
                "startTime": datetime.now(timezone.utc).isoformat(),
            }
            return httpx.Response(201, json={"message": "Timer started", "data": self.logs[log_id]})

        if request.method == "POST" and path.startswith("/logs/stopTimeLog/"):
            log_id = int(path.rsplit("/", 1)[1])
            if log_id not in self.logs:
                return httpx.Response(404, json={"msg": "Log not found"})
            body = json.loads(request.content or b"{}")
            self.logs[log_id].update(
                body,
                endTime=datetime.now(timezone.utc).isoformat(),
                duration=self.stop_duration,
            )
            return httpx.Response(200, json={"data": self.logs[log_id]})

        if request.method == "GET" and path.startswith("/logs/getLogById/"):
            log_id = int(path.rsplit("/", 1)[1])
            if log_id not in self.logs:
                return httpx.Response(404, json={"msg": "Log not found"})
            return httpx.Response(200, json={"data": self.logs[log_id]})

        if path == "/project/getAllProjectsOfUser":
            return httpx.Response(200, json={"projects": self.projects})
        if path == "/projectMember/getAllProjectsAUserIsMemberOf":
            return httpx.Response(200, json={"data": self.member_projects})
        if path == "/task/getAllTasksOfUser":
            return httpx.Response(200, json=self.tasks)
        if path.startswith("/taskAssignment/user/"):
            return httpx.Response(200, json=self.assigned)

        return httpx.Response(404, json={"msg": f"No route for {path}"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(clock: FakeClock) -> FakeTimeLogService:
    return FakeTimeLogService(clock)


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "timer-storage.json"


@pytest.fixture
def persistence(state_path: Path) -> SnapshotPersistence:
    return SnapshotPersistence(state_path)


@pytest.fixture
def store(persistence: SnapshotPersistence, clock: FakeClock) -> TimerStore:
    return TimerStore.load(persistence, clock)


@pytest_asyncio.fixture
async def controller(store: TimerStore, service: FakeTimeLogService):
    """Controller whose tickers never fire on their own; tests call tick()."""
    ctrl = TimerController(store, service, tick_interval=3600, reconcile_interval=3600)
    yield ctrl
    await ctrl.close()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
