"""Socket.IO listener for server-side timer events.

The time-log service announces timers it stopped on its own (auto-stop,
another device) with a ``timerStopped`` event. The listener validates the
payload and hands it to a callback, normally
``TimerController.handle_remote_stop``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import socketio
from pydantic import ValidationError
from socketio.exceptions import ConnectionError as SocketConnectionError

from worklog.api.models import RemoteStopEvent
from worklog.config.settings import ApiSettings
from worklog.utils.logging import get_logger

logger = get_logger("worklog.push")

TIMER_STOPPED_EVENT = "timerStopped"

RemoteStopCallback = Callable[[RemoteStopEvent], Any]


class PushListener:
    """Keeps a Socket.IO connection open and dispatches timer-stopped pushes.

    Parameters
    ----------
    url : str
        Socket.IO server origin.
    on_timer_stopped : RemoteStopCallback
        Called with every valid ``timerStopped`` payload.
    token : str | None
        Sent as the connection ``auth`` token when set.
    connect_timeout : float
        Seconds to wait for the namespace handshake.
    client : socketio.AsyncClient | None
        Injected client; a reconnecting ``AsyncClient`` by default.
    """

    def __init__(
        self,
        url: str,
        on_timer_stopped: RemoteStopCallback,
        *,
        token: str | None = None,
        connect_timeout: float = 10.0,
        client: Any = None,
    ):
        self.url = url
        self.token = token
        self.connect_timeout = connect_timeout
        self._on_timer_stopped = on_timer_stopped
        self._sio = client or socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=5,
            reconnection_delay=1,
            reconnection_delay_max=5,
        )
        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on(TIMER_STOPPED_EVENT, self._on_timer_stopped_event)

    @classmethod
    def from_settings(
        cls,
        settings: ApiSettings,
        on_timer_stopped: RemoteStopCallback,
        client: Any = None,
    ) -> PushListener:
        return cls(
            settings.resolved_push_url,
            on_timer_stopped,
            token=settings.token,
            connect_timeout=settings.timeout,
            client=client,
        )

    @property
    def connected(self) -> bool:
        return bool(self._sio.connected)

    async def start(self) -> bool:
        """Connect to the server; returns False when it is unreachable.

        Without a connection the periodic reconcile still notices remote stops.
        """
        if self.connected:
            return True
        try:
            await self._sio.connect(
                self.url,
                auth={"token": self.token} if self.token else None,
                transports=["websocket", "polling"],
                wait_timeout=self.connect_timeout,
            )
        except SocketConnectionError as exc:
            logger.warning("push.connect_failed", url=self.url, error=str(exc))
            return False
        return True

    async def stop(self) -> None:
        if self.connected:
            await self._sio.disconnect()

    async def _on_connect(self) -> None:
        logger.info("push.connected", url=self.url)

    async def _on_disconnect(self, *args: Any) -> None:
        logger.info("push.disconnected", url=self.url)

    async def _on_timer_stopped_event(self, data: Any) -> None:
        try:
            event = RemoteStopEvent.model_validate(data)
        except ValidationError as exc:
            logger.warning("push.malformed_event", event=TIMER_STOPPED_EVENT, error=str(exc))
            return
        logger.debug("push.received", event=TIMER_STOPPED_EVENT, log_id=event.log_id)
        self._on_timer_stopped(event)
