"""Application root wiring.

Both surfaces (CLI and TUI) build their objects here: one store per process,
handed by reference to the controller, plus the HTTP services it talks to.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from worklog.api.client import ApiClient, HttpProjectDirectory, HttpTimeLogService
from worklog.api.push import PushListener
from worklog.config.settings import Settings
from worklog.core.controller import TimerController
from worklog.core.notifications import NotificationCenter
from worklog.core.store import SnapshotPersistence, TimerStore


@dataclass
class Runtime:
    settings: Settings
    client: ApiClient
    service: HttpTimeLogService
    directory: HttpProjectDirectory
    store: TimerStore
    controller: TimerController
    push: PushListener | None = None

    async def start_push(self) -> bool:
        """Open the push connection, if this runtime listens for pushes."""
        if self.push is None:
            return False
        return await self.push.start()

    async def aclose(self) -> None:
        if self.push is not None:
            await self.push.stop()
        await self.controller.close()
        await self.client.aclose()


def build_runtime(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
    notifications: NotificationCenter | None = None,
    *,
    listen: bool = False,
    push_client: Any = None,
) -> Runtime:
    """Create the client, hydrate the store and wire the controller.

    With ``listen`` (and ``api.push_enabled``) server "timer stopped" pushes
    are routed to the controller once ``start_push()`` is awaited.
    """
    client = ApiClient.from_settings(settings.api, transport=transport)
    service = HttpTimeLogService(client)
    directory = HttpProjectDirectory(client, user_id=settings.api.user_id)
    store = TimerStore.load(SnapshotPersistence(settings.timer.state_file))
    controller = TimerController(
        store,
        service,
        tick_interval=settings.timer.tick_interval,
        reconcile_interval=settings.timer.reconcile_interval,
        notifications=notifications,
    )
    push = None
    if listen and settings.api.push_enabled:
        push = PushListener.from_settings(
            settings.api, controller.handle_remote_stop, client=push_client
        )
    return Runtime(settings, client, service, directory, store, controller, push)


@asynccontextmanager
async def open_runtime(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Runtime]:
    """Build a runtime, mount its controller and tear it down on exit."""
    runtime = build_runtime(settings, transport=transport)
    try:
        await runtime.controller.mount()
        yield runtime
    finally:
        await runtime.aclose()
