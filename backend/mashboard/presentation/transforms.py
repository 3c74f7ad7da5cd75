# backend/mashboard/presentation/transforms.py

"""
表示用の派生データを計算する純粋関数群。

同じ入力に対しては常に同じ出力を返し、外部 I/O は行わない。
- 割合（%）・日次増分・スパークライン SVG パス
- ツリーマップノード（リーダーボード / マインドシェア）
- Notion ブロックのリストグループ化
- 進行中 / 終了済みグループの振り分け
- ガントチャート（スケジュール）のレイアウト
"""

import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from mashboard.leaderboard.schemas import ChannelEntry, SeriesPoint
from mashboard.notion.schemas import NotionTask

from .schemas import (
    DailyPoint,
    ScheduleBar,
    ScheduleHeader,
    ScheduleView,
    TreemapNode,
    TreemapView,
)

ACTIVE_STATUSES: Tuple[str, ...] = (
    "진행중",
    "In Progress",
    "진행 중",
    "Ongoing",
    "Running",
    "Active",
)

LIST_BLOCK_TYPES: Tuple[str, ...] = ("numbered_list_item", "bulleted_list_item")

METABASE_QUESTION_MARKER = "metabase.despreadlabs.io/question"

TREEMAP_LIMIT = 20
SPARKLINE_WIDTH = 120.0
SPARKLINE_HEIGHT = 32.0


# ---- 数値まわり -------------------------------------------------------


def percentage_share(value: float, total: float, precision: int = 2) -> float:
    """
    value / total * 100 を precision 桁で丸めた値。total が 0 なら 0.0。
    """
    if not total:
        return 0.0
    return round(value / total * 100, precision)


def daily_series(series: Sequence[SeriesPoint]) -> List[DailyPoint]:
    """
    累積スコアの時系列から日次増分を作る。減少した日は 0 にする。
    """
    points: List[DailyPoint] = []
    for prev, curr in zip(series, series[1:]):
        delta = curr.score - prev.score
        points.append(DailyPoint(date=curr.date, daily_score=max(delta, 0.0)))
    return points


def _fmt(value: float) -> str:
    return f"{round(value, 2):g}"


def sparkline_path(
    values: Sequence[float],
    width: float,
    height: float,
    *,
    padding_y: float = 5.0,
) -> str:
    """
    数値列を min-max 正規化して高さ height に収めた SVG パス文字列を返す。

    - 空なら ""
    - 全部同じ値なら下端に水平線
    - 1点だけなら x=0 の 1点
    """
    if not values:
        return ""

    low = min(values)
    high = max(values)
    value_range = (high - low) or 1
    draw_height = height - padding_y * 2
    steps = len(values) - 1

    points = []
    for i, value in enumerate(values):
        x = (i / steps) * width if steps else 0.0
        normalized = (value - low) / value_range
        y = height - padding_y - normalized * draw_height
        points.append(f"{_fmt(x)},{_fmt(y)}")

    return "M " + " L ".join(points)


def is_growing(daily_scores: Sequence[float]) -> bool:
    """最後の日次値が最初の日次値以上なら増加傾向とみなす。"""
    if not daily_scores:
        return True
    return daily_scores[-1] >= daily_scores[0]


# ---- ツリーマップ -----------------------------------------------------


def build_treemap_nodes(
    channels: Iterable[ChannelEntry],
    *,
    limit: Optional[int] = None,
    sparkline_size: Tuple[float, float] = (SPARKLINE_WIDTH, SPARKLINE_HEIGHT),
) -> TreemapView:
    """
    リーダーボードのチャンネル一覧をスコア降順のツリーマップノードにする。

    nodes は上位 limit 件、ranking は全件。share は全チャンネル合計に対する割合。
    """
    channel_list = list(channels)
    total = sum(channel.score for channel in channel_list)

    ranking: List[TreemapNode] = []
    for channel in channel_list:
        daily = daily_series(channel.series)
        scores = [point.daily_score for point in daily]
        ranking.append(
            TreemapNode(
                name=channel.channel_title,
                value=channel.score,
                share=percentage_share(channel.score, total),
                is_growing=is_growing(scores),
                sparkline=sparkline_path(scores, *sparkline_size),
                daily_series=daily,
                item_data=channel.model_dump(by_alias=True),
            )
        )

    ranking.sort(key=lambda node: node.value, reverse=True)
    nodes = ranking[:limit] if limit is not None else list(ranking)
    return TreemapView(total=total, nodes=nodes, ranking=ranking)


def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def build_mindshare_nodes(
    payload: Optional[Dict[str, Any]],
    *,
    limit: Optional[int] = None,
    sparkline_size: Tuple[float, float] = (SPARKLINE_WIDTH, SPARKLINE_HEIGHT),
) -> TreemapView:
    """
    マインドシェア API のレスポンス（items + ティッカー別 timeseries）を
    mentions の降順ツリーマップノードにする。
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        return TreemapView()

    items = [item for item in payload["items"] if isinstance(item, dict)]
    timeseries = payload.get("timeseries") if isinstance(payload.get("timeseries"), dict) else {}
    total = sum(_to_float(item.get("mentions")) for item in items)

    ranking: List[TreemapNode] = []
    for item in items:
        ticker = str(item.get("ticker", ""))
        raw_daily = (timeseries.get(ticker) or {}).get("daily") or []
        daily = sorted(
            (
                DailyPoint(
                    date=str(point.get("stats_date", "")),
                    daily_score=_to_float(point.get("mention_count")),
                )
                for point in raw_daily
                if isinstance(point, dict)
            ),
            key=lambda point: point.date,
        )
        mentions = _to_float(item.get("mentions"))
        scores = [point.daily_score for point in daily]
        ranking.append(
            TreemapNode(
                name=ticker,
                value=mentions,
                share=percentage_share(mentions, total),
                is_growing=_to_float(item.get("trend_score")) >= 0,
                sparkline=sparkline_path(scores, *sparkline_size),
                daily_series=daily,
                item_data=item,
            )
        )

    ranking.sort(key=lambda node: node.value, reverse=True)
    nodes = ranking[:limit] if limit is not None else list(ranking)
    return TreemapView(total=total, nodes=nodes, ranking=ranking)


# ---- Notion ブロック --------------------------------------------------


def find_metabase_url(block: Dict[str, Any]) -> Optional[str]:
    """
    ブロックのリッチテキストに含まれる最初のメタベース質問リンクを返す。
    """
    block_type = block.get("type")
    value = block.get(block_type) if isinstance(block_type, str) else None
    if not isinstance(value, dict):
        return None

    for text in value.get("rich_text") or []:
        href = text.get("href") if isinstance(text, dict) else None
        if isinstance(href, str) and METABASE_QUESTION_MARKER in href:
            return href
    return None


def group_list_blocks(blocks: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    連続する同種のリスト項目（番号付き / 箇条書き）を list_group ノードにまとめる。

    children を持つブロックは子要素にも同じ処理を再帰的に適用し、
    メタベースのリンクがあれば metabaseUrl を付与する。
    """
    result: List[Dict[str, Any]] = []
    current_type: Optional[str] = None
    current_items: List[Dict[str, Any]] = []

    def _flush() -> None:
        if current_items:
            result.append(
                {"type": "list_group", "listType": current_type, "items": list(current_items)}
            )

    for block in blocks:
        node = dict(block)
        if isinstance(node.get("children"), list):
            node["children"] = group_list_blocks(node["children"])
        metabase_url = find_metabase_url(node)
        if metabase_url:
            node["metabaseUrl"] = metabase_url

        block_type = node.get("type")
        if block_type in LIST_BLOCK_TYPES:
            if block_type != current_type:
                _flush()
                current_type = block_type
                current_items = []
            current_items.append(node)
        else:
            _flush()
            current_type = None
            current_items = []
            result.append(node)

    _flush()
    return result


# ---- グループ振り分け・スケジュール ----------------------------------


def split_active_groups(
    group_ids: Sequence[str],
    tasks: Sequence[NotionTask],
) -> Tuple[List[str], List[str]]:
    """
    グループごとに最初に見つかったタスクのステータスで、進行中 / 終了済みに振り分ける。
    """
    active: List[str] = []
    finished: List[str] = []
    for group_id in group_ids:
        task = next((t for t in tasks if t.group_id == group_id), None)
        if task is not None and task.status in ACTIVE_STATUSES:
            active.append(group_id)
        else:
            finished.append(group_id)
    return active, finished


def parse_task_date(value: Optional[str]) -> Optional[date]:
    """
    "2025-03-05" / "2025-03-05T10:00:00.000+09:00" / "...Z" を date にする。
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def build_schedule(tasks: Sequence[NotionTask], today: date) -> ScheduleView:
    """
    ガントチャートの表示範囲・週ヘッダー・各タスクのバー位置（%）を計算する。

    - 表示範囲: 最も早い日付の 3日前 〜 最も遅い日付の 7日後
    - 日付が 1つも無ければ today 〜 today+30日 を基準にする
    - バーの幅は最低 5%
    """
    if not tasks:
        return ScheduleView(start_date=(today - timedelta(days=3)).isoformat(), total_days=30)

    dates = [
        parsed
        for task in tasks
        for parsed in (parse_task_date(task.date_start), parse_task_date(task.date_end))
        if parsed is not None
    ]
    low = min(dates) if dates else today
    high = max(dates) if dates else today + timedelta(days=30)

    start = low - timedelta(days=3)
    end = high + timedelta(days=7)
    diff_days = (end - start).days
    total_days = diff_days or 30

    headers = []
    for offset in range(0, diff_days + 1, 7):
        day = start + timedelta(days=offset)
        headers.append(
            ScheduleHeader(
                label=f"{day.month}/{day.day}",
                left=offset / diff_days * 100 if diff_days else 0.0,
            )
        )

    bars = []
    for task in tasks:
        task_start = parse_task_date(task.date_start)
        task_end = parse_task_date(task.date_end) or task_start

        left = 0.0
        width = 0.0
        if task_start is not None:
            left = max(0.0, (task_start - start).days / total_days * 100)
            width = ((task_end - task_start).days + 1) / total_days * 100

        bars.append(
            ScheduleBar(
                task_id=task.id,
                title=task.title,
                status=task.status,
                category=task.category,
                manager=task.manager,
                manager_img=task.manager_img,
                left=left,
                width=max(width, 5.0),
            )
        )

    return ScheduleView(
        start_date=start.isoformat(),
        total_days=total_days,
        headers=headers,
        bars=bars,
    )
