import pytest

from devassist_common.errors import ConfigError
from devassist_mcp.adapters.notion import NotionAdapter
from devassist_mcp.models import NotionFilter, NotionPageProperties
from tests.helpers.fakes import FakeHttpClient, RecordingTransport, http_error, recording_http_client


def test_query_without_filter_posts_empty_body():
    http = FakeHttpClient({("POST", "databases/db1/query"): {"object": "list", "results": [{"id": "p1"}], "has_more": True}})

    result = NotionAdapter("secret", http=http).query_database("db1")

    assert result.ok
    assert result.value == [{"id": "p1"}]
    assert http.calls == [("POST", "databases/db1/query", {})]


def test_query_passes_filter_through():
    http = FakeHttpClient({("POST", "databases/db1/query"): {"results": []}})
    flt = NotionFilter.model_validate({"property": "Status", "select": {"equals": "Done"}})

    NotionAdapter("secret", http=http).query_database("db1", flt)

    assert http.calls[0][2] == {"filter": {"property": "Status", "select": {"equals": "Done"}}}


def test_query_with_no_pages_is_empty_list_not_error():
    http = FakeHttpClient({("POST", "databases/abc/query"): {"object": "list", "results": []}})
    result = NotionAdapter("secret", http=http).query_database("abc")
    assert result.ok and result.value == []


def test_create_page_targets_database_parent():
    http = FakeHttpClient({("POST", "pages"): {"object": "page", "id": "new-page"}})
    props = NotionPageProperties.model_validate({"Name": {"title": [{"text": {"content": "Hello"}}]}})

    result = NotionAdapter("secret", http=http).create_page("db1", props)

    assert result.value["id"] == "new-page"
    assert http.calls[0][2] == {
        "parent": {"database_id": "db1"},
        "properties": {"Name": {"title": [{"text": {"content": "Hello"}}]}},
    }


def test_read_page_returns_direct_children_only():
    http = FakeHttpClient({
        ("GET", "blocks/page1/children"): {
            "results": [{"id": "b1", "type": "paragraph", "has_children": True}],
            "has_more": False,
        },
    })

    result = NotionAdapter("secret", http=http).read_page("page1")

    assert [b["id"] for b in result.value] == ["b1"]
    assert len(http.calls) == 1


def test_auth_failure_is_reported_with_upstream_message():
    http = FakeHttpClient({("POST", "databases/db1/query"): http_error(401)})

    result = NotionAdapter("secret", http=http).query_database("db1")

    assert not result.ok
    assert result.failure.code == "upstream_auth"
    assert "Unauthorized" in result.failure.message


def test_rate_limit_is_not_retried():
    http = FakeHttpClient({("GET", "blocks/p/children"): http_error(429)})

    result = NotionAdapter("secret", http=http).read_page("p")

    assert result.failure.code == "rate_limited"
    assert len(http.calls) == 1


def test_empty_token_is_config_error():
    with pytest.raises(ConfigError):
        NotionAdapter("")


def test_default_client_sends_auth_and_version_headers():
    adapter = NotionAdapter("secret_abc")
    headers = adapter._http.session.headers
    assert headers["Authorization"] == "Bearer secret_abc"
    assert headers["Notion-Version"] == "2022-06-28"


@pytest.mark.parametrize("call", [
    lambda a: a.query_database("../../pages?x="),
    lambda a: a.read_page("../../pages?x="),
])
def test_ids_cannot_escape_their_endpoint(call):
    transport = RecordingTransport(body={"results": []})
    adapter = NotionAdapter("secret", http=recording_http_client("https://api.notion.com/v1", transport))

    call(adapter)

    ((method, url),) = transport.sent
    assert url.startswith(("https://api.notion.com/v1/databases/", "https://api.notion.com/v1/blocks/"))
    assert "/v1/pages" not in url
    assert "?" not in url


def test_error_body_message_is_kept_through_real_client():
    transport = RecordingTransport(
        status=400,
        body={"object": "error", "status": 400, "code": "validation_error",
              "message": "body failed validation: filter.select should be defined"},
    )
    adapter = NotionAdapter("secret", http=recording_http_client("https://api.notion.com/v1", transport))

    result = adapter.query_database("db1")

    assert transport.sent == [("POST", "https://api.notion.com/v1/databases/db1/query")]
    assert result.failure.code == "upstream_error"
    assert result.failure.status == 400
    assert result.failure.message == "body failed validation: filter.select should be defined"
