from __future__ import annotations

import pytest

from devassist_mcp.adapters.github import GitHubAdapter
from devassist_mcp.adapters.google_calendar import GoogleCalendarAdapter
from devassist_mcp.adapters.notion import NotionAdapter
from devassist_mcp.tools import Services, build_registry
from tests.helpers.fakes import FakeCalendarService, FakeHttpClient, calendar_event

NOW = "2030-01-01T00:00:00Z"


@pytest.fixture(autouse=True)
def _isolated_telemetry(tmp_path, monkeypatch):
    """Keep telemetry out of the repo for every test."""
    monkeypatch.setenv("DEVASSIST_TELEMETRY_DIR", str(tmp_path / "telemetry"))
    monkeypatch.delenv("DEVASSIST_DISABLE_TELEMETRY", raising=False)


@pytest.fixture()
def calendar_service():
    # five upcoming events, deliberately out of order, plus one in the past
    items = [calendar_event(i, day) for i, day in enumerate([9, 3, 7, 2, 5], start=1)]
    items.append({"id": "evt-past", "start": {"dateTime": "2029-12-31T10:00:00Z"}})
    return FakeCalendarService(items)


@pytest.fixture()
def notion_http():
    return FakeHttpClient()


@pytest.fixture()
def github_http():
    return FakeHttpClient()


@pytest.fixture()
def services(calendar_service, notion_http, github_http):
    return Services(
        calendar=GoogleCalendarAdapter("unused.json", service=calendar_service, clock=lambda: NOW),
        notion=NotionAdapter("secret_test", http=notion_http),
        github=GitHubAdapter("ghp_test", http=github_http),
    )


@pytest.fixture()
def registry(services):
    return build_registry(services)

