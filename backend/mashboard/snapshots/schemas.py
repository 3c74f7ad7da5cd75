# backend/mashboard/snapshots/schemas.py

from typing import List

from pydantic import Field

from mashboard.utils.results import SourceFailure
from mashboard.utils.schemas import CamelModel


class SavedSnapshot(CamelModel):
    """
    保存できたスナップショット 1件分。
    """

    group_id: str = Field(..., description="グループ ID")
    url: str = Field(..., description="保存先の URL（blob URL / file URI）")


class SnapshotJobSummary(CamelModel):
    """
    /api/cron/storyteller のレスポンス（日次ジョブのサマリ）。

    success は「ジョブが最後まで走ったか」であり、全グループ保存できたかは failures を見る。
    """

    success: bool = Field(True, description="ジョブが完走したかどうか")
    date: str = Field(..., description="スナップショットの日付（YYYY-MM-DD, UTC）")
    count: int = Field(..., ge=0, description="保存できたグループ数")
    saved: List[SavedSnapshot] = Field(default_factory=list)
    failures: List[SourceFailure] = Field(
        default_factory=list,
        description="Notion の data source / グループごとの失敗一覧",
    )
