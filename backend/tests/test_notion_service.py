# backend/tests/test_notion_service.py

import asyncio

import httpx

from mashboard.notion.client import NotionClient
from mashboard.notion.config import NotionConfig
from mashboard.notion.service import NotionAggregator


def _page(page_id, group_id=None, title=None, status=None):
    properties = {}
    if title is not None:
        properties["Name"] = {"type": "title", "title": [{"plain_text": title}]}
    if group_id is not None:
        properties["GroupID"] = {"type": "rich_text", "rich_text": [{"plain_text": group_id}]}
    if status is not None:
        properties["Status"] = {"type": "status", "status": {"name": status}}
    return {"id": page_id, "properties": properties}


def _aggregator(routes) -> NotionAggregator:
    """
    routes: {(method, path): response or callable}
    """

    def handler(request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        route = routes.get(key)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(route):
            return route(request)
        return route

    config = NotionConfig(token="t", storyteller_database_id="db-1", metabase_page_id=None)
    return NotionAggregator(NotionClient(config, transport=httpx.MockTransport(handler)))


def test_fetch_tasks_from_multiple_data_sources():
    aggregator = _aggregator(
        {
            ("GET", "/v1/databases/db-1"): httpx.Response(
                200, json={"data_sources": [{"id": "ds-a"}, {"id": "ds-b"}]}
            ),
            ("POST", "/v1/data_sources/ds-a/query"): httpx.Response(
                200, json={"results": [_page("p1", "63", "Alpha", "진행중")]}
            ),
            ("POST", "/v1/data_sources/ds-b/query"): httpx.Response(
                200, json={"results": [_page("p2", "64", "Beta", "Done")]}
            ),
        }
    )

    result = asyncio.run(aggregator.fetch_tasks("db-1"))

    assert result.is_complete
    assert sorted(task.group_id for task in result.items) == ["63", "64"]
    task = next(task for task in result.items if task.group_id == "63")
    assert task.status == "진행중"


def test_failed_data_source_is_recorded_and_others_survive():
    aggregator = _aggregator(
        {
            ("GET", "/v1/databases/db-1"): httpx.Response(
                200, json={"data_sources": [{"id": "ds-a"}, {"id": "ds-b"}]}
            ),
            ("POST", "/v1/data_sources/ds-a/query"): httpx.Response(
                200, json={"results": [_page("p1", "63")]}
            ),
            ("POST", "/v1/data_sources/ds-b/query"): httpx.Response(500, text="boom"),
        }
    )

    result = asyncio.run(aggregator.fetch_tasks("db-1"))

    assert [task.group_id for task in result.items] == ["63"]
    assert result.is_partial
    assert [failure.source for failure in result.failures] == ["ds-b"]


def test_pages_without_group_id_are_excluded():
    aggregator = _aggregator(
        {
            ("GET", "/v1/databases/db-1"): httpx.Response(200, json={"data_sources": [{"id": "ds-a"}]}),
            ("POST", "/v1/data_sources/ds-a/query"): httpx.Response(
                200,
                json={"results": [_page("p1", "63"), _page("p2"), _page("p3", "  ")]},
            ),
        }
    )

    result = asyncio.run(aggregator.fetch_tasks("db-1"))

    assert [task.id for task in result.items] == ["p1"]


def test_legacy_query_when_no_data_sources():
    aggregator = _aggregator(
        {
            ("GET", "/v1/databases/db-1"): httpx.Response(200, json={"data_sources": []}),
            ("POST", "/v1/databases/db-1/query"): httpx.Response(
                200, json={"results": [_page("p1", "70", "Legacy")]}
            ),
        }
    )

    result = asyncio.run(aggregator.fetch_tasks("db-1"))

    assert [task.title for task in result.items] == ["Legacy"]


def test_database_metadata_failure_gives_empty_result():
    aggregator = _aggregator({("GET", "/v1/databases/db-1"): httpx.Response(401)})

    result = asyncio.run(aggregator.fetch_pages("db-1"))

    assert result.items == []
    assert [failure.source for failure in result.failures] == ["db-1"]


def test_fetch_projects_dedupes_by_group_id():
    aggregator = _aggregator(
        {
            ("GET", "/v1/databases/db-1"): httpx.Response(200, json={"data_sources": [{"id": "ds-a"}]}),
            ("POST", "/v1/data_sources/ds-a/query"): httpx.Response(
                200,
                json={
                    "results": [
                        _page("p1", "63", "First"),
                        _page("p2", "63", "Second"),
                        _page("p3", "64", "Other"),
                    ]
                },
            ),
        }
    )

    projects = asyncio.run(aggregator.fetch_projects("db-1"))

    assert [(p.group_id, p.title) for p in projects.items] == [("63", "First"), ("64", "Other")]


def test_fetch_blocks_recurses_into_children():
    aggregator = _aggregator(
        {
            ("GET", "/v1/blocks/root/children"): httpx.Response(
                200,
                json={
                    "results": [
                        {"id": "b1", "type": "toggle", "has_children": True},
                        {"id": "b2", "type": "paragraph", "has_children": False},
                    ]
                },
            ),
            ("GET", "/v1/blocks/b1/children"): httpx.Response(
                200, json={"results": [{"id": "b1-1", "type": "paragraph", "has_children": False}]}
            ),
        }
    )

    blocks = asyncio.run(aggregator.fetch_blocks("root"))

    assert [block["id"] for block in blocks] == ["b1", "b2"]
    assert [child["id"] for child in blocks[0]["children"]] == ["b1-1"]
    assert "children" not in blocks[1]


def test_fetch_blocks_failure_returns_empty_list():
    aggregator = _aggregator({})

    assert asyncio.run(aggregator.fetch_blocks("missing")) == []
