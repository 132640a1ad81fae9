from __future__ import annotations

import base64
import logging
import os
from typing import List, Optional
from urllib.parse import quote

from devassist_common.errors import ConfigError
from devassist_mcp.core_infrastructure.http_client import HttpClient, HttpClientConfig
from devassist_mcp.results import AdapterResult, capture

logger = logging.getLogger(__name__)

GITHUB_API_BASE = os.getenv("GITHUB_API_BASE", "https://api.github.com")


def _repo_path(owner: str, repo: str) -> str:
    return f"repos/{quote(owner, safe='')}/{quote(repo, safe='')}"


def decode_file_content(data: object) -> Optional[str]:
    """
    Text of a contents-API payload, or None when it is not a single
    base64-encoded file (a directory listing, a submodule, another encoding).
    """
    if not isinstance(data, dict):
        return None
    if "content" not in data or data.get("encoding") != "base64":
        return None
    # binary files decode lossily rather than failing
    return base64.b64decode(data["content"] or "").decode("utf-8", errors="replace")


class GitHubAdapter:
    """GitHub REST v3. Listing endpoints return the first page only."""

    def __init__(self, token: str, *, http: HttpClient | None = None) -> None:
        token = (token or "").strip()
        if not token:
            raise ConfigError("GitHub access token is empty")
        self._http = http or HttpClient(
            config=HttpClientConfig(
                base_url=GITHUB_API_BASE,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/vnd.github+json",
                },
            )
        )

    def get_repository(self, owner: str, repo: str) -> AdapterResult[dict]:
        return capture("github.repos.get", lambda: self._http.get_json(_repo_path(owner, repo)))

    def get_file_content(self, owner: str, repo: str, path: str) -> AdapterResult[Optional[str]]:
        url = f"{_repo_path(owner, repo)}/contents/{quote(path.strip('/'))}"
        return capture("github.repos.getContent", lambda: decode_file_content(self._http.get_json(url)))

    def list_branches(self, owner: str, repo: str) -> AdapterResult[List[dict]]:
        return capture(
            "github.repos.listBranches",
            lambda: list(self._http.get_json(f"{_repo_path(owner, repo)}/branches")),
        )
