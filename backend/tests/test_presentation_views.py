# backend/tests/test_presentation_views.py

import asyncio
import json
from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from mashboard.dependencies import get_mindshare_client, get_notion_aggregator
from mashboard.leaderboard.client import LeaderboardClient
from mashboard.leaderboard.config import LeaderboardSettings
from mashboard.leaderboard.service import LeaderboardService
from mashboard.main import create_app
from mashboard.mindshare.client import MindshareClient
from mashboard.mindshare.config import MindshareSettings
from mashboard.notion.schemas import NotionTask
from mashboard.presentation.router import get_storyteller_view_builder
from mashboard.presentation.service import StorytellerViewBuilder, select_group
from mashboard.snapshots.store import FileSystemSnapshotStore, SnapshotNotFoundError
from mashboard.utils.results import PartialResult, SourceFailure

TODAY = date(2025, 3, 10)


class _FakeAggregator:
    def __init__(self, tasks=(), failures=(), blocks=()):
        self._tasks = list(tasks)
        self._failures = list(failures)
        self._blocks = list(blocks)

    async def fetch_tasks(self, database_id, *, year=None):
        return PartialResult(items=list(self._tasks), failures=list(self._failures))

    async def fetch_blocks(self, block_id):
        return list(self._blocks)


def _leaderboard_handler(request: httpx.Request) -> httpx.Response:
    group_id = request.url.path.split("/")[-2]
    lookback = request.url.params["lookbacks"]
    if group_id == "64" and lookback == "90":
        return httpx.Response(500)
    return httpx.Response(
        200,
        json={
            "channels": [
                {"channelId": f"{group_id}-a", "channelTitle": f"live-{lookback}", "score": 60},
                {"channelId": f"{group_id}-b", "channelTitle": "b", "score": 40},
            ]
        },
    )


def _builder(tmp_path, tasks, *, settings=None, failures=()) -> StorytellerViewBuilder:
    settings = settings or LeaderboardSettings()
    return StorytellerViewBuilder(
        aggregator=_FakeAggregator(tasks, failures),
        leaderboard=LeaderboardService(
            LeaderboardClient(settings, transport=httpx.MockTransport(_leaderboard_handler)),
            settings,
        ),
        store=FileSystemSnapshotStore(tmp_path),
        database_id="db-1",
    )


TASKS = [
    NotionTask(id="t1", title="Alpha", group_id="63", status="Done", date_start="2025-03-05"),
    NotionTask(id="t2", title="Beta", group_id="64", status="진행중", date_start="2025-03-08"),
    NotionTask(id="t3", title="Beta 2", group_id="64", status="Done"),
]


def test_select_group():
    assert select_group("70", ["63"], []) == "70"
    assert select_group(None, ["63", "64"], ["64"]) == "64"
    assert select_group(None, ["63"], []) == "63"
    assert select_group(None, [], []) is None


def test_storyteller_view_live(tmp_path):
    view = asyncio.run(_builder(tmp_path, TASKS).build(today=TODAY))

    assert view.today == "2025-03-10"
    assert view.snapshot_date == "2025-03-10"
    assert view.available_group_ids == ["63", "64"]
    assert view.active_group_ids == ["64"]
    assert view.finished_group_ids == ["63"]
    assert view.project_names == {"63": "Alpha", "64": "Beta"}
    assert view.selected_group_id == "64"
    assert view.lookback == 30
    assert sorted(view.api_data_map["63"]) == ["14", "30", "7", "90"]
    assert "90" not in view.api_data_map["64"]
    assert [f.source for f in view.failures] == ["64:90d"]
    assert [node.name for node in view.treemap.nodes] == ["live-30", "b"]
    assert view.treemap.nodes[0].share == 60.0
    assert view.schedule.start_date == "2025-03-02"


def test_storyteller_view_respects_group_and_lookback(tmp_path):
    view = asyncio.run(_builder(tmp_path, TASKS).build(group_id="63", lookback=7, today=TODAY))

    assert view.selected_group_id == "63"
    assert view.lookback == 7
    assert view.treemap.nodes[0].name == "live-7"


def test_storyteller_view_rejects_unknown_lookback(tmp_path):
    with pytest.raises(ValueError):
        asyncio.run(_builder(tmp_path, TASKS).build(lookback=5, today=TODAY))


def test_storyteller_view_uses_snapshot_for_past_date(tmp_path):
    snapshot = {"channels": [{"channelId": "old", "channelTitle": "archived", "score": 5}]}
    asyncio.run(
        FileSystemSnapshotStore(tmp_path).write("64", "2025-03-01", json.dumps(snapshot).encode())
    )

    view = asyncio.run(
        _builder(tmp_path, TASKS).build(snapshot_date="2025-03-01", lookback=7, today=TODAY)
    )

    assert view.snapshot_date == "2025-03-01"
    assert view.lookback == 30
    assert view.api_data_map["64"] == {"30": snapshot}
    assert [node.name for node in view.treemap.nodes] == ["archived"]


def test_storyteller_view_missing_snapshot(tmp_path):
    with pytest.raises(SnapshotNotFoundError):
        asyncio.run(_builder(tmp_path, TASKS).build(snapshot_date="2025-03-01", today=TODAY))


def test_storyteller_view_default_group_when_notion_is_empty(tmp_path):
    settings = LeaderboardSettings(default_group_id="63")
    failure = SourceFailure(source="db-1", error="unauthorized")

    view = asyncio.run(
        _builder(tmp_path, [], settings=settings, failures=[failure]).build(today=TODAY)
    )

    assert view.available_group_ids == ["63"]
    assert view.selected_group_id == "63"
    assert view.tasks == []
    assert view.schedule.total_days == 30
    assert view.failures[0].source == "db-1"


def _client_with_builder(builder) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_storyteller_view_builder] = lambda: builder
    return TestClient(app)


def test_storyteller_endpoint(tmp_path):
    client = _client_with_builder(_builder(tmp_path, TASKS))

    resp = client.get("/storyteller", params={"groupId": "63", "lookback": 14})

    assert resp.status_code == 200
    body = resp.json()
    assert body["selectedGroupId"] == "63"
    assert body["activeGroupIds"] == ["64"]
    assert body["treemap"]["nodes"][0]["name"] == "live-14"
    assert "apiDataMap" in body
    assert body["tasks"][0]["groupId"] == "63"


def test_storyteller_endpoint_errors(tmp_path):
    client = _client_with_builder(_builder(tmp_path, TASKS))

    assert client.get("/storyteller", params={"lookback": 5}).status_code == 400
    assert client.get("/storyteller", params={"date": "yesterday"}).status_code == 400
    resp = client.get("/storyteller", params={"date": "2001-01-01"})
    assert resp.status_code == 404


def test_storyteller_endpoint_rejects_bad_group_id(tmp_path):
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return _leaderboard_handler(request)

    settings = LeaderboardSettings()
    builder = StorytellerViewBuilder(
        aggregator=_FakeAggregator(TASKS),
        leaderboard=LeaderboardService(
            LeaderboardClient(settings, transport=httpx.MockTransport(handler)),
            settings,
        ),
        store=FileSystemSnapshotStore(tmp_path),
        database_id="db-1",
    )
    client = _client_with_builder(builder)

    for group_id in ["../admin", "63/64", "63?x=1"]:
        resp = client.get("/storyteller", params={"groupId": group_id})
        assert resp.status_code == 400

    assert requested == []


def test_kimchimap_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["intervalDays"] == "7"
        return httpx.Response(
            200,
            json={
                "items": [{"ticker": "BTC", "mentions": 1, "trend_score": 0}],
                "timeseries": {},
            },
        )

    app = create_app()
    app.dependency_overrides[get_mindshare_client] = lambda: MindshareClient(
        MindshareSettings(), transport=httpx.MockTransport(handler)
    )
    client = TestClient(app)

    resp = client.get("/kimchimap", params={"intervalDays": 7})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["nodes"][0]["name"] == "BTC"
    assert body["nodes"][0]["share"] == 100.0
    assert body["nodes"][0]["isGrowing"] is True


def test_metabase_endpoint():
    blocks = [
        {"id": "b1", "type": "bulleted_list_item", "bulleted_list_item": {"rich_text": []}},
        {"id": "b2", "type": "bulleted_list_item", "bulleted_list_item": {"rich_text": []}},
    ]
    app = create_app()
    app.dependency_overrides[get_notion_aggregator] = lambda: _FakeAggregator(blocks=blocks)
    client = TestClient(app)

    resp = client.get("/metabase")

    assert resp.status_code == 200
    grouped = resp.json()["blocks"]
    assert len(grouped) == 1
    assert grouped[0]["type"] == "list_group"
    assert [item["id"] for item in grouped[0]["items"]] == ["b1", "b2"]


def test_metabase_endpoint_without_page_id(monkeypatch):
    monkeypatch.delenv("NOTION_METABASE_PAGE_ID", raising=False)
    client = TestClient(create_app())

    resp = client.get("/metabase")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Server configuration error"
