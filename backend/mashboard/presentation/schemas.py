# backend/mashboard/presentation/schemas.py

"""
ダッシュボード表示用のレスポンススキーマ。

いずれも取得済みデータから毎回計算する派生データで、永続化はしない。
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from mashboard.notion.schemas import NotionTask
from mashboard.utils.results import SourceFailure
from mashboard.utils.schemas import CamelModel


class DailyPoint(CamelModel):
    """日次の増分スコア（累積スコアの差分、負の値は 0）。"""

    date: str
    daily_score: float


class TreemapNode(CamelModel):
    """
    ツリーマップ 1タイル分。レイアウト計算はチャートライブラリ側に任せる。
    """

    name: str = Field(..., description="表示名（チャンネル名 / ティッカー）")
    value: float = Field(..., description="タイルの大きさに使う指標（score / mentions）")
    share: float = Field(0.0, description="全体に対する割合（%）")
    is_growing: bool = Field(True, description="増加傾向かどうか（色分け用）")
    sparkline: str = Field("", description="日次系列の SVG パス")
    daily_series: List[DailyPoint] = Field(default_factory=list)
    item_data: Dict[str, Any] = Field(default_factory=dict, description="元データ（API の 1行）")


class TreemapView(CamelModel):
    """
    ツリーマップ（上位のみ）とランキング（全件）。
    """

    total: float = 0.0
    nodes: List[TreemapNode] = Field(default_factory=list)
    ranking: List[TreemapNode] = Field(default_factory=list)


class ScheduleHeader(CamelModel):
    label: str
    left: float


class ScheduleBar(CamelModel):
    """ガントチャートのバー 1本（left / width は % 単位）。"""

    task_id: str
    title: str
    status: str
    category: str
    manager: str
    manager_img: Optional[str] = None
    left: float
    width: float


class ScheduleView(CamelModel):
    start_date: str
    total_days: int
    headers: List[ScheduleHeader] = Field(default_factory=list)
    bars: List[ScheduleBar] = Field(default_factory=list)


class StorytellerView(CamelModel):
    """
    /storyteller のレスポンス。ページの初期表示に必要なものを一度に返す。
    """

    today: str
    snapshot_date: str
    tasks: List[NotionTask] = Field(default_factory=list)
    available_group_ids: List[str] = Field(default_factory=list)
    active_group_ids: List[str] = Field(default_factory=list)
    finished_group_ids: List[str] = Field(default_factory=list)
    project_names: Dict[str, str] = Field(default_factory=dict)
    selected_group_id: Optional[str] = None
    lookback: int = 30
    api_data_map: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    treemap: TreemapView = Field(default_factory=TreemapView)
    schedule: ScheduleView
    failures: List[SourceFailure] = Field(default_factory=list)


class MetabaseView(CamelModel):
    """/metabase のレスポンス（リストをグループ化したブロックツリー）。"""

    blocks: List[Dict[str, Any]] = Field(default_factory=list)
