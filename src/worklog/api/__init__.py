"""Remote service clients and wire models."""

from worklog.api.client import (
    ApiClient,
    HttpProjectDirectory,
    HttpTimeLogService,
    ProjectDirectory,
    TimeLogService,
    extract_items,
    unwrap,
)
from worklog.api.errors import ApiError, NotFoundError, TransientApiError
from worklog.api.models import (
    Project,
    RemoteStopEvent,
    StopRequest,
    Task,
    TimeLogRecord,
)
from worklog.api.push import PushListener

__all__ = [
    # Clients
    "ApiClient",
    "TimeLogService",
    "HttpTimeLogService",
    "ProjectDirectory",
    "HttpProjectDirectory",
    "extract_items",
    "unwrap",
    "PushListener",
    # Errors
    "ApiError",
    "TransientApiError",
    "NotFoundError",
    # Models
    "TimeLogRecord",
    "Project",
    "Task",
    "StopRequest",
    "RemoteStopEvent",
]
