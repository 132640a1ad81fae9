"""Explicit success/failure values returned by every adapter method."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Mapping, Optional, TypeVar

import requests
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class UpstreamFailure:
    code: str
    message: str
    status: Optional[int] = None


@dataclass(frozen=True)
class AdapterResult(Generic[T]):
    value: Optional[T] = None
    failure: Optional[UpstreamFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "AdapterResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, failure: UpstreamFailure) -> "AdapterResult[T]":
        return cls(failure=failure)


def code_for_status(status: Optional[int], headers: Optional[Mapping[str, str]] = None) -> str:
    # GitHub reports an exhausted primary rate limit as 403
    if status == 403 and headers is not None and headers.get("X-RateLimit-Remaining") == "0":
        return "rate_limited"
    if status in (401, 403):
        return "upstream_auth"
    if status == 404:
        return "not_found"
    if status == 429:
        return "rate_limited"
    return "upstream_error"


def _response_message(resp: requests.Response) -> Optional[str]:
    """The ``message`` field of a JSON error body (Notion and GitHub both send one)."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return None


def failure_from_exception(exc: Exception) -> UpstreamFailure:
    """Map an upstream client exception to a failure, keeping its message."""
    if isinstance(exc, HttpError):
        status = getattr(exc.resp, "status", None)
        status = int(status) if status is not None else None
        return UpstreamFailure(code_for_status(status), str(exc), status)
    if isinstance(exc, requests.HTTPError):
        resp = exc.response
        if resp is None:
            return UpstreamFailure("upstream_error", str(exc))
        message = _response_message(resp) or str(exc)
        return UpstreamFailure(code_for_status(resp.status_code, resp.headers), message, resp.status_code)
    if isinstance(exc, GoogleAuthError):
        return UpstreamFailure("upstream_auth", str(exc))
    if isinstance(exc, requests.RequestException):
        return UpstreamFailure("upstream_unavailable", str(exc))
    return UpstreamFailure("upstream_error", str(exc))


# Exceptions an upstream call may raise; anything else is a bug and propagates.
UPSTREAM_ERRORS = (HttpError, GoogleAuthError, requests.RequestException, OSError, ValueError)


def capture(op: str, fn: Callable[[], T]) -> AdapterResult[T]:
    """Run one upstream call and fold its exception (if any) into a failure."""
    try:
        return AdapterResult.success(fn())
    except UPSTREAM_ERRORS as e:
        logger.error("Upstream call %s failed: %s", op, e)
        return AdapterResult.fail(failure_from_exception(e))
