# backend/mashboard/notion/schemas.py

"""
Notion から取得したデータを内部で扱うためのスキーマ定義。
"""

from typing import List, Optional

from pydantic import Field

from mashboard.utils.results import SourceFailure
from mashboard.utils.schemas import CamelModel


class NotionTask(CamelModel):
    """
    ストーリーテラー DB の 1 ページ（プロジェクト / タスク）を表現する内部モデル。

    groupId がリーダーボード API・スナップショットとの結合キーになる。
    """

    id: str = Field(..., description="Notion ページ ID")
    title: str = Field("Untitled", description="プロジェクト名")
    group_id: Optional[str] = Field(None, description="リーダーボードのグループ ID")
    date_start: Optional[str] = Field(None, description="開始日（ISO8601）")
    date_end: Optional[str] = Field(None, description="終了日（ISO8601）。未指定なら開始日と同じ")
    status: str = Field("Ready", description="ステータス（自由記述。例: 진행중 / Done）")
    category: str = Field("General", description="分類（Video / Article など）")
    manager: str = Field("-", description="担当者名")
    manager_img: Optional[str] = Field(None, description="担当者のアバター URL")


class NotionProject(CamelModel):
    """
    ランク集計などで使う最小限のプロジェクト情報。
    """

    title: str
    group_id: str


class NotionTasksResponse(CamelModel):
    """
    /notion/tasks のレスポンス全体を表現するモデル。

    failures が空でない場合、一部の data source が取得できていない。
    """

    items: List[NotionTask]
    count: int
    failures: List[SourceFailure] = Field(default_factory=list)
