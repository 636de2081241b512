"""Wire models for the time-log, project and task services.

The backend speaks camelCase JSON; the models expose snake_case attributes and
accept either spelling on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# Statuses after which an item no longer accepts tracked time.
CLOSED_PROJECT_STATUSES = frozenset({"Completed", "Done"})
DONE_TASK_STATUS = "Done"


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimeLogRecord(ApiModel):
    """A time log as owned by the server."""

    id: int
    start_time: datetime | None = None
    end_time: datetime | None = None
    project_id: int | None = None
    task_id: int | None = None
    name: str | None = None
    description: str | None = None
    time_spent: int | None = None
    duration: int | None = None

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None

    @property
    def server_duration(self) -> int | None:
        """Seconds computed by the server, whichever field it filled."""
        return self.duration if self.duration is not None else self.time_spent


class Project(ApiModel):
    id: int
    name: str = ""
    status: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_PROJECT_STATUSES


class Task(ApiModel):
    id: int
    subject: str = ""
    name: str | None = None
    status: str | None = None
    project_id: int | None = None

    @property
    def label(self) -> str:
        return self.name or self.subject or f"Task #{self.id}"

    @property
    def is_done(self) -> bool:
        return self.status == DONE_TASK_STATUS


class StopRequest(ApiModel):
    """Categorization sent when finalizing the active log."""

    project_id: int | None = None
    task_id: int | None = None
    description: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RemoteStopEvent(ApiModel):
    """Server push announcing that a timer was stopped out-of-band."""

    log_id: int
    name: str | None = None
    time_spent: int | None = None
    end_time: datetime | None = None

    @field_validator("end_time", mode="after")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)
