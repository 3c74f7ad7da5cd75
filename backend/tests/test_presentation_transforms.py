# backend/tests/test_presentation_transforms.py

from datetime import date

import pytest

from mashboard.leaderboard.schemas import ChannelEntry, SeriesPoint
from mashboard.notion.schemas import NotionTask
from mashboard.presentation.transforms import (
    build_mindshare_nodes,
    build_schedule,
    build_treemap_nodes,
    daily_series,
    find_metabase_url,
    group_list_blocks,
    percentage_share,
    sparkline_path,
    split_active_groups,
)


def test_percentage_share():
    assert percentage_share(1, 3) == 33.33
    assert percentage_share(1, 3, precision=0) == 33.0
    assert percentage_share(5, 0) == 0.0
    assert percentage_share(0, 0) == 0.0


def test_daily_series_clamps_negative_deltas():
    series = [
        SeriesPoint(date="2025-03-01", score=10),
        SeriesPoint(date="2025-03-02", score=15),
        SeriesPoint(date="2025-03-03", score=12),
        SeriesPoint(date="2025-03-04", score=20),
    ]

    points = daily_series(series)

    assert [(p.date, p.daily_score) for p in points] == [
        ("2025-03-02", 5.0),
        ("2025-03-03", 0.0),
        ("2025-03-04", 8.0),
    ]
    assert daily_series([]) == []
    assert daily_series(series[:1]) == []


def test_sparkline_path():
    assert sparkline_path([0, 5, 10], 100, 40) == "M 0,35 L 50,20 L 100,5"
    assert sparkline_path([0, 1, 2, 3], 10, 10, padding_y=0) == "M 0,10 L 3.33,6.67 L 6.67,3.33 L 10,0"


def test_sparkline_path_edge_cases():
    assert sparkline_path([], 100, 40) == ""
    assert sparkline_path([7], 100, 40) == "M 0,35"
    # 全部同じ値なら下端の水平線
    assert sparkline_path([3, 3], 100, 40) == "M 0,35 L 100,35"


def _entry(title, score, scores=()):
    return ChannelEntry(
        channel_id=title,
        channel_title=title,
        score=score,
        series=[SeriesPoint(date=f"2025-03-0{i + 1}", score=s) for i, s in enumerate(scores)],
    )


def test_build_treemap_nodes_sorted_with_share():
    channels = [
        _entry("b", 30, [0, 10, 15]),
        _entry("c", 10, [0, 10, 12]),
        _entry("a", 60),
    ]

    view = build_treemap_nodes(channels, limit=2)

    assert view.total == 100
    assert [node.name for node in view.nodes] == ["a", "b"]
    assert [node.name for node in view.ranking] == ["a", "b", "c"]
    assert [node.share for node in view.ranking] == [60.0, 30.0, 10.0]
    assert view.ranking[1].is_growing is False
    assert [p.daily_score for p in view.ranking[1].daily_series] == [10.0, 5.0]
    assert view.ranking[0].sparkline == ""
    assert view.ranking[0].item_data["channelTitle"] == "a"


def test_build_treemap_nodes_empty():
    view = build_treemap_nodes([])

    assert view.total == 0
    assert view.nodes == []


def test_build_mindshare_nodes():
    payload = {
        "items": [
            {"ticker": "BTC", "mentions": 30, "trend_score": -1.5},
            {"ticker": "ETH", "mentions": "70", "trend_score": 2},
        ],
        "timeseries": {
            "ETH": {
                "daily": [
                    {"stats_date": "2025-03-02", "mention_count": "5"},
                    {"stats_date": "2025-03-01", "mention_count": "3"},
                ]
            }
        },
    }

    view = build_mindshare_nodes(payload)

    assert view.total == 100
    assert [node.name for node in view.nodes] == ["ETH", "BTC"]
    eth, btc = view.nodes
    assert eth.share == 70.0
    assert eth.is_growing is True
    assert [(p.date, p.daily_score) for p in eth.daily_series] == [
        ("2025-03-01", 3.0),
        ("2025-03-02", 5.0),
    ]
    assert btc.is_growing is False
    assert btc.sparkline == ""
    assert btc.item_data["ticker"] == "BTC"


def test_build_mindshare_nodes_malformed_payload():
    assert build_mindshare_nodes(None).nodes == []
    assert build_mindshare_nodes({"items": "nope"}).nodes == []


def _block(block_id, block_type, **extra):
    return {"id": block_id, "type": block_type, block_type: {"rich_text": []}, **extra}


def test_group_list_blocks():
    blocks = [
        _block("p1", "paragraph"),
        _block("b1", "bulleted_list_item"),
        _block("b2", "bulleted_list_item"),
        _block("n1", "numbered_list_item"),
        _block("p2", "paragraph", children=[_block("b3", "bulleted_list_item")]),
        _block("b4", "bulleted_list_item"),
    ]

    grouped = group_list_blocks(blocks)

    assert [node["type"] for node in grouped] == [
        "paragraph",
        "list_group",
        "list_group",
        "paragraph",
        "list_group",
    ]
    assert grouped[1]["listType"] == "bulleted_list_item"
    assert [item["id"] for item in grouped[1]["items"]] == ["b1", "b2"]
    assert grouped[2]["listType"] == "numbered_list_item"
    assert grouped[3]["children"][0]["type"] == "list_group"
    assert [item["id"] for item in grouped[4]["items"]] == ["b4"]


def test_find_metabase_url():
    block = {
        "type": "paragraph",
        "paragraph": {
            "rich_text": [
                {"plain_text": "see", "href": None},
                {"plain_text": "other", "href": "https://example.com"},
                {"plain_text": "chart", "href": "https://metabase.despreadlabs.io/question/12-abc"},
            ]
        },
    }

    assert find_metabase_url(block) == "https://metabase.despreadlabs.io/question/12-abc"
    assert find_metabase_url(_block("p", "paragraph")) is None
    assert find_metabase_url({"type": "divider"}) is None

    grouped = group_list_blocks([block])
    assert grouped[0]["metabaseUrl"] == "https://metabase.despreadlabs.io/question/12-abc"


def _task(task_id, group_id, status="Ready", start=None, end=None):
    return NotionTask(id=task_id, group_id=group_id, status=status, date_start=start, date_end=end)


def test_split_active_groups():
    tasks = [
        _task("t1", "63", "진행중"),
        _task("t2", "64", "Done"),
        _task("t3", "65", "In Progress"),
        _task("t4", "64", "Active"),
    ]

    active, finished = split_active_groups(["63", "64", "65", "66"], tasks)

    assert active == ["63", "65"]
    assert finished == ["64", "66"]


def test_build_schedule_without_tasks():
    view = build_schedule([], date(2025, 3, 10))

    assert view.start_date == "2025-03-07"
    assert view.total_days == 30
    assert view.headers == []
    assert view.bars == []


def test_build_schedule_layout():
    tasks = [
        _task("t1", "63", start="2025-03-05", end="2025-03-11"),
        _task("t2", "64", start="2025-03-20T10:00:00.000+09:00"),
        _task("t3", "65"),
    ]

    view = build_schedule(tasks, date(2025, 3, 10))

    assert view.start_date == "2025-03-02"
    assert view.total_days == 25
    assert [h.label for h in view.headers] == ["3/2", "3/9", "3/16", "3/23"]
    assert [h.left for h in view.headers] == pytest.approx([0.0, 28.0, 56.0, 84.0])

    t1, t2, t3 = view.bars
    assert (t1.left, t1.width) == pytest.approx((12.0, 28.0))
    assert (t2.left, t2.width) == pytest.approx((72.0, 5.0))
    assert (t3.left, t3.width) == pytest.approx((0.0, 5.0))
