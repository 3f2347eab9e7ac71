"""
Error kinds surfaced by the recording and meeting workflows.

Every error carries the HTTP status it maps to, so the API layer can turn
any of them into a ``{"error": ..., "details": ...}`` response without
knowing which workflow raised it.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from googleapiclient.errors import HttpError


class RecorderError(Exception):
    """Base class for all errors raised by Meet Recorder workflows."""

    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body: dict = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class UnauthorizedError(RecorderError):
    """Missing, expired or unrefreshable Google credentials."""

    status_code = 401


class InvalidRequestError(RecorderError):
    """The request does not identify what to work on."""

    status_code = 400


class NotFoundError(RecorderError):
    """A recording or calendar event could not be found."""

    status_code = 404


class UpstreamError(RecorderError):
    """Google returned a non-success response or did not answer in time."""

    status_code = 502

    def __init__(
        self,
        message: str,
        details: Any = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.upstream_status = upstream_status


class UpstreamTimeoutError(UpstreamError):
    status_code = 504


class LocalIOError(RecorderError):
    """The download directory or the file being written failed."""

    status_code = 500


def _http_error_body(error: HttpError) -> Any:
    content = error.content
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        return content


def from_http_error(error: HttpError, resource: str) -> RecorderError:
    """
    Translate a googleapiclient ``HttpError`` into a Meet Recorder error.

    Args:
        error: The error raised by the Google API client
        resource: Human readable name of what was being accessed

    Returns:
        UnauthorizedError for 401 and missing-scope 403s, NotFoundError for 404, otherwise
        UpstreamError with the upstream body attached
    """
    status = getattr(error.resp, "status", None)
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    body = _http_error_body(error)

    # 403 is also used for quota errors; only scope problems need a new sign-in
    if status == 401 or (status == 403 and "insufficient" in str(body).lower()):
        return UnauthorizedError(
            f"Google denied access to {resource} - sign in again to grant access",
            details=body,
        )
    if status == 404:
        return NotFoundError(f"{resource} not found", details=body)
    return UpstreamError(
        f"Google API error while accessing {resource}",
        details=body,
        upstream_status=status,
    )
