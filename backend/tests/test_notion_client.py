# backend/tests/test_notion_client.py

import asyncio
import json

import httpx
import pytest

from mashboard.notion.client import NotionAPIError, NotionAuthError, NotionClient, NotionClientError
from mashboard.notion.config import NotionConfig, get_notion_config


def _config(**overrides) -> NotionConfig:
    values = dict(
        token="dummy-token",
        storyteller_database_id="db-1",
        metabase_page_id="page-root",
    )
    values.update(overrides)
    return NotionConfig(**values)


def _client(handler, **overrides) -> NotionClient:
    return NotionClient(_config(**overrides), transport=httpx.MockTransport(handler))


def test_query_data_source_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"results": [{"id": "page-1"}, "broken"]})

    results = asyncio.run(_client(handler).query_data_source("ds-1"))

    assert results == [{"id": "page-1"}]
    assert seen["url"] == "https://api.notion.com/v1/data_sources/ds-1/query"
    assert seen["headers"]["Authorization"] == "Bearer dummy-token"
    assert seen["headers"]["Notion-Version"] == "2025-09-03"
    assert seen["body"] == {"page_size": 100}


def test_query_401_raises_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, content=b"")

    with pytest.raises(NotionAuthError):
        asyncio.run(_client(handler).query_data_source("ds-1"))


def test_query_500_raises_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(NotionAPIError):
        asyncio.run(_client(handler).retrieve_database("db-1"))


def test_network_error_raises_client_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NotionClientError):
        asyncio.run(_client(handler).retrieve_database("db-1"))


def test_results_not_a_list_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": "nope"})

    with pytest.raises(NotionAPIError):
        asyncio.run(_client(handler).query_database("db-1"))


def test_list_block_children_uses_get_with_page_size():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"results": [{"id": "b1", "type": "paragraph"}]})

    blocks = asyncio.run(_client(handler, page_size=50).list_block_children("page-root"))

    assert blocks == [{"id": "b1", "type": "paragraph"}]
    assert seen["method"] == "GET"
    assert seen["params"] == {"page_size": "50"}


def test_client_requires_token():
    with pytest.raises(NotionClientError):
        NotionClient(_config(token=None))


def test_get_notion_config_rejects_bad_page_size(monkeypatch):
    monkeypatch.setenv("NOTION_PAGE_SIZE", "500")

    with pytest.raises(RuntimeError):
        get_notion_config()


def test_get_notion_config_reads_env(monkeypatch):
    monkeypatch.setenv("NOTION_TOKEN", "secret")
    monkeypatch.setenv("NOTION_STORYTELLER_DB_ID", "db-xyz")
    monkeypatch.delenv("NOTION_PAGE_SIZE", raising=False)

    config = get_notion_config()

    assert config.token == "secret"
    assert config.storyteller_database_id == "db-xyz"
    assert config.is_configured
    assert config.page_size == 100
