"""
Lightweight shared HTTP client for the REST-based adapters (Notion, GitHub).

- Centralizes timeouts, default headers and error logging.
- One request per call: no retry adapter is mounted on the session.
- Keeps dependencies limited to `requests`.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests
from requests import Response


logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


DEFAULT_CONNECT_TIMEOUT_S = _env_float("DEVASSIST_HTTP_CONNECT_TIMEOUT", 3.05)
DEFAULT_READ_TIMEOUT_S = _env_float("DEVASSIST_HTTP_READ_TIMEOUT", 20.0)
DEFAULT_TIMEOUT = (DEFAULT_CONNECT_TIMEOUT_S, DEFAULT_READ_TIMEOUT_S)


@dataclass(frozen=True)
class HttpClientConfig:
    base_url: str = ""
    timeout: tuple[float, float] = DEFAULT_TIMEOUT
    headers: Mapping[str, str] = field(default_factory=dict)
    user_agent: str = os.getenv("DEVASSIST_HTTP_USER_AGENT", "developer-assistant-mcp/0.1")


class HttpClient:
    """A small wrapper around `requests.Session` with sane defaults."""

    def __init__(self, *, config: HttpClientConfig | None = None, session: requests.Session | None = None) -> None:
        self.config = config or HttpClientConfig()
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", self.config.user_agent)
        self.session.headers.update(dict(self.config.headers))

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")) or not self.config.base_url:
            return path_or_url
        return f"{self.config.base_url.rstrip('/')}/{path_or_url.lstrip('/')}"

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
        timeout: tuple[float, float] | float | None = None,
        **kwargs: Any,
    ) -> Response:
        """Perform an HTTP request and raise for non-2xx responses."""
        full_url = self._url(url)
        t0 = time.perf_counter()
        try:
            resp = self.session.request(
                method=method,
                url=full_url,
                headers=dict(headers) if headers else None,
                params=dict(params) if params else None,
                json=json,
                timeout=timeout or self.config.timeout,
                **kwargs,
            )
            resp.raise_for_status()
            return resp
        except requests.RequestException as e:
            ms = int((time.perf_counter() - t0) * 1000)
            status = getattr(getattr(e, "response", None), "status_code", None)
            logger.warning(
                "HTTP %s %s failed (status=%s, ms=%s): %s",
                method.upper(),
                full_url,
                status,
                ms,
                str(e),
            )
            raise

    def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        return self.request("GET", url, params=params, **kwargs).json()

    def post_json(
        self,
        url: str,
        *,
        json: Any | None = None,
        **kwargs: Any,
    ) -> Any:
        return self.request("POST", url, json=json, **kwargs).json()
