from __future__ import annotations

import logging
import os
from typing import List, Optional
from urllib.parse import quote

from devassist_common.errors import ConfigError
from devassist_mcp.core_infrastructure.http_client import HttpClient, HttpClientConfig
from devassist_mcp.models import NotionFilter, NotionPageProperties
from devassist_mcp.results import AdapterResult, capture

logger = logging.getLogger(__name__)

NOTION_API_BASE = os.getenv("NOTION_API_BASE", "https://api.notion.com/v1")
NOTION_VERSION = "2022-06-28"


class NotionAdapter:
    """
    Notion databases/pages/blocks over the REST API.

    Listing endpoints return the first upstream page only (no cursor loop).
    """

    def __init__(self, token: str, *, http: HttpClient | None = None) -> None:
        token = (token or "").strip()
        if not token:
            raise ConfigError("Notion integration token is empty")
        self._http = http or HttpClient(
            config=HttpClientConfig(
                base_url=NOTION_API_BASE,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Notion-Version": NOTION_VERSION,
                },
            )
        )

    def query_database(self, database_id: str, filter: Optional[NotionFilter] = None) -> AdapterResult[List[dict]]:
        body = {}
        if filter is not None:
            body["filter"] = filter.to_request_body()

        def _query() -> List[dict]:
            resp = self._http.post_json(f"databases/{quote(database_id, safe='')}/query", json=body)
            return list(resp.get("results") or [])

        return capture("notion.databases.query", _query)

    def create_page(self, database_id: str, properties: NotionPageProperties) -> AdapterResult[dict]:
        body = {
            "parent": {"database_id": database_id},
            "properties": properties.model_dump(),
        }
        result = capture("notion.pages.create", lambda: self._http.post_json("pages", json=body))
        if result.ok:
            logger.info("Created Notion page %s in database %s", (result.value or {}).get("id"), database_id)
        return result

    def read_page(self, page_id: str) -> AdapterResult[List[dict]]:
        """Direct child blocks of a page; nested children are not fetched."""

        def _children() -> List[dict]:
            resp = self._http.get_json(f"blocks/{quote(page_id, safe='')}/children")
            return list(resp.get("results") or [])

        return capture("notion.blocks.children.list", _children)
