"""Timer store: the single timer snapshot and its four mutators.

The store is constructed once at the application root and handed to every
consumer. State is an immutable value; the only way to change it is through
``start_timer``, ``stop_timer``, ``update_elapsed_time`` and ``reset_timer``.
Every change is persisted and broadcast to subscribers.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from worklog.core.errors import StatePersistenceError
from worklog.utils.formatting import elapsed_seconds
from worklog.utils.logging import get_logger

Clock = Callable[[], datetime]
StateListener = Callable[["TimerState"], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ==================== STATE ====================


@dataclass(frozen=True)
class TimerState:
    """Client-held timer state mirroring the open phase of a remote log."""

    is_running: bool = False
    active_log_id: int | None = None
    start_time: datetime | None = None
    elapsed_time: int = 0

    def elapsed_at(self, now: datetime) -> int:
        """Elapsed seconds at ``now``, recomputed from the anchor while running."""
        if self.is_running and self.start_time is not None:
            return elapsed_seconds(self.start_time, now)
        return self.elapsed_time

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "active_log_id": self.active_log_id,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "elapsed_time": self.elapsed_time,
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> TimerState:
        """Rebuild state from a snapshot dict.

        Raises ValueError when the snapshot is malformed or breaks the
        running-implies-anchor invariant.
        """
        start_raw = data.get("start_time")
        start_time = datetime.fromisoformat(start_raw) if start_raw else None
        if start_time is not None and start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)

        is_running = data.get("is_running", False)
        if not isinstance(is_running, bool):
            raise ValueError(f"is_running must be a boolean, got {is_running!r}")

        log_id = data.get("active_log_id")
        state = cls(
            is_running=is_running,
            active_log_id=int(log_id) if log_id is not None else None,
            start_time=start_time,
            elapsed_time=int(data.get("elapsed_time") or 0),
        )
        if state.is_running and (state.active_log_id is None or state.start_time is None):
            raise ValueError("running snapshot without an active log id and start time")
        return state


IDLE_STATE = TimerState()


# ==================== PERSISTENCE ====================


class SnapshotPersistence:
    """Stores the timer snapshot as a JSON file.

    Features:
    - Atomic writes (temp file + rename) to prevent corruption
    - Missing or corrupt files load as "nothing persisted"
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.logger = get_logger("worklog.persistence")

    def save(self, state: TimerState, saved_at: datetime | None = None) -> Path:
        """Persist state to disk atomically.

        Returns:
            Path to the snapshot file
        """
        payload = state.to_snapshot()
        payload["saved_at"] = (saved_at or utc_now()).isoformat()
        temp_file = self.path.with_suffix(".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            temp_file.replace(self.path)
        except OSError as exc:
            if temp_file.exists():
                temp_file.unlink()
            raise StatePersistenceError(f"Failed to persist timer state: {exc}") from exc

        self.logger.debug("state.persisted", path=str(self.path), **state.to_snapshot())
        return self.path

    def load(self) -> TimerState | None:
        """Load the persisted snapshot, or None if there is nothing usable."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return TimerState.from_snapshot(data)
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            self.logger.warning("state.load_failed", path=str(self.path), error=str(exc))
            return None

    def clear(self) -> bool:
        if self.path.exists():
            self.path.unlink()
            return True
        return False


# ==================== STORE ====================


class TimerStore:
    """Holds the timer snapshot shared by every view of the process.

    Parameters
    ----------
    persistence : SnapshotPersistence | None
        Where to write the snapshot on every change; None keeps it in memory.
    clock : Clock
        Source of "now", injectable for tests.
    initial : TimerState | None
        Starting state, normally produced by ``TimerStore.load``.
    """

    def __init__(
        self,
        persistence: SnapshotPersistence | None = None,
        clock: Clock = utc_now,
        initial: TimerState | None = None,
    ):
        self.persistence = persistence
        self.clock = clock
        self.logger = get_logger("worklog.store")
        self._state = initial or IDLE_STATE
        self._listeners: list[StateListener] = []

    @classmethod
    def load(
        cls,
        persistence: SnapshotPersistence | None,
        clock: Clock = utc_now,
    ) -> TimerStore:
        """Hydrate a store from its persisted snapshot.

        A running timer's elapsed time is recomputed from its start instant,
        never resumed from the stored counter.
        """
        state = persistence.load() if persistence else None
        if state is None:
            return cls(persistence, clock)

        if state.is_running:
            state = replace(state, elapsed_time=state.elapsed_at(clock()))
        store = cls(persistence, clock, initial=state)
        store.logger.info("store.hydrated", **state.to_snapshot())
        return store

    @property
    def state(self) -> TimerState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called after every change; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== MUTATORS ====================

    def start_timer(self, log_id: int, started_at: datetime | None = None) -> None:
        """Enter the running state for ``log_id``.

        ``started_at`` is the anchor every tick measures from; the local clock
        is used when the server did not supply one.
        """
        self._set(
            TimerState(
                is_running=True,
                active_log_id=log_id,
                start_time=started_at or self.clock(),
                elapsed_time=0,
            )
        )

    def stop_timer(self) -> None:
        """Leave running while keeping the last elapsed value on display."""
        self._set(replace(self._state, is_running=False))

    def update_elapsed_time(self, seconds: int) -> None:
        if seconds != self._state.elapsed_time:
            self._set(replace(self._state, elapsed_time=seconds))

    def reset_timer(self) -> None:
        self._set(IDLE_STATE)

    def _set(self, state: TimerState) -> None:
        self._state = state
        if self.persistence is not None:
            try:
                self.persistence.save(state, saved_at=self.clock())
            except StatePersistenceError as exc:
                self.logger.warning("state.persist_failed", error=str(exc))
        for listener in list(self._listeners):
            listener(state)
