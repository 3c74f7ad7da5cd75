# backend/mashboard/notion/router.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mashboard.dependencies import get_notion_aggregator, get_storyteller_database_id

from .schemas import NotionTasksResponse
from .service import NotionAggregator

router = APIRouter(prefix="/notion", tags=["notion"])


@router.get(
    "/tasks",
    response_model=NotionTasksResponse,
    summary="ストーリーテラー DB のタスク一覧を取得",
    description="全 data source を並列に取得し、GroupID を持つページだけを返す。",
)
async def list_tasks(
    year: Optional[int] = Query(None, description="「3월 5일」形式の日付に補う年"),
    aggregator: NotionAggregator = Depends(get_notion_aggregator),
    database_id: str = Depends(get_storyteller_database_id),
) -> NotionTasksResponse:
    """
    - 正常系: 取得できた data source 分のタスク + failures
    - 異常系: 予期しない例外発生時には 500 エラーとして扱う
    """
    try:
        tasks = await aggregator.fetch_tasks(database_id, year=year)
    except Exception as exc:  # noqa: BLE001
        # 詳細はログ側で確認
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch tasks from Notion.",
        ) from exc

    return NotionTasksResponse(items=tasks.items, count=len(tasks.items), failures=tasks.failures)
