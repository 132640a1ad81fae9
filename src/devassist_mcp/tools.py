"""Tool catalogue: binds each MCP tool to one adapter method."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from devassist_common.telemetry import telemetry_recent
from devassist_config.settings import Credentials
from devassist_mcp.adapters.github import GitHubAdapter
from devassist_mcp.adapters.google_calendar import GoogleCalendarAdapter
from devassist_mcp.adapters.notion import NotionAdapter
from devassist_mcp.models import (
    CreateCalendarEventParams,
    CreateNotionPageParams,
    GetCalendarEventsParams,
    GetGithubFileContentParams,
    NoParams,
    QueryNotionPagesParams,
    ReadNotionPageParams,
    RepoParams,
    TelemetryRecentParams,
)
from devassist_mcp.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    calendar: GoogleCalendarAdapter
    notion: NotionAdapter
    github: GitHubAdapter


def build_services(credentials: Credentials) -> Services:
    """Construct every adapter once; a bad credential raises ConfigError here."""
    return Services(
        calendar=GoogleCalendarAdapter(credentials.google_service_account_key),
        notion=NotionAdapter(credentials.notion_token),
        github=GitHubAdapter(credentials.github_token),
    )


def repo_summary(repo: dict) -> dict:
    return {
        "name": repo.get("name"),
        "description": repo.get("description"),
        "stars": repo.get("stargazers_count"),
        "language": repo.get("language"),
    }


def build_registry(services: Services, *, registry: ToolRegistry | None = None) -> ToolRegistry:
    reg = registry or ToolRegistry()

    # ---- calendar ----

    @reg.tool("get_calendar_events", "Get upcoming calendar events", GetCalendarEventsParams)
    def get_calendar_events(p: GetCalendarEventsParams):
        return services.calendar.list_upcoming_events(p.maxResults)

    @reg.tool("create_calendar_event", "Create an event on the primary calendar", CreateCalendarEventParams)
    def create_calendar_event(p: CreateCalendarEventParams):
        return services.calendar.create_event(p.event)

    # ---- notion ----

    @reg.tool("query_notion_pages", "Query pages from a Notion database", QueryNotionPagesParams)
    def query_notion_pages(p: QueryNotionPagesParams):
        return services.notion.query_database(p.databaseId, p.filter)

    @reg.tool("create_notion_page", "Create a page in a Notion database", CreateNotionPageParams)
    def create_notion_page(p: CreateNotionPageParams):
        return services.notion.create_page(p.databaseId, p.properties)

    @reg.tool("read_notion_page", "Read the top-level blocks of a Notion page", ReadNotionPageParams)
    def read_notion_page(p: ReadNotionPageParams):
        return services.notion.read_page(p.pageId)

    # ---- github ----

    @reg.tool("get_github_repo_info", "Get GitHub repository information", RepoParams)
    def get_github_repo_info(p: RepoParams):
        result = services.github.get_repository(p.owner, p.repo)
        if not result.ok:
            return result
        return repo_summary(result.value or {})

    @reg.tool("get_github_file_content", "Get the text of a file in a GitHub repository", GetGithubFileContentParams)
    def get_github_file_content(p: GetGithubFileContentParams):
        result = services.github.get_file_content(p.owner, p.repo, p.path)
        if not result.ok:
            return result
        return {"path": p.path, "content": result.value}

    @reg.tool("list_github_branches", "List branches of a GitHub repository", RepoParams)
    def list_github_branches(p: RepoParams):
        return services.github.list_branches(p.owner, p.repo)

    # ---- ops ----

    @reg.tool("healthz", "Liveness check", NoParams)
    def healthz(p: NoParams):
        return {"ok": True}

    @reg.tool("telemetry_recent", "Recent tool-call telemetry (secrets redacted)", TelemetryRecentParams)
    def recent(p: TelemetryRecentParams):
        return telemetry_recent(p.n)

    logger.info("Registered %d tools", len(reg.names()))
    return reg
