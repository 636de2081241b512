"""Exceptions raised by the remote service clients."""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """The remote service rejected a request or answered with garbage."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class TransientApiError(ApiError):
    """Network failure, timeout or 5xx; the same request may succeed later."""


class NotFoundError(ApiError):
    """The requested record does not exist (HTTP 404)."""
