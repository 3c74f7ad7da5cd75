# backend/mashboard/presentation/router.py

"""
ダッシュボード画面用の FastAPI ルーター。

- GET /storyteller  ストーリーテラー・リーダーボード画面
- GET /kimchimap    マインドシェア（キムチマップ）画面
- GET /metabase     メタベースのリンク集
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from mashboard.dependencies import (
    get_leaderboard_service,
    get_metabase_page_id,
    get_mindshare_client,
    get_notion_aggregator,
    get_snapshot_store,
    get_storyteller_database_id,
)
from mashboard.leaderboard.service import LeaderboardService
from mashboard.mindshare.client import MindshareClient, MindshareClientError, MindshareHTTPError
from mashboard.notion.client import NotionClientError
from mashboard.notion.service import NotionAggregator
from mashboard.snapshots.store import SnapshotNotFoundError, SnapshotStore, SnapshotStoreError

from .schemas import MetabaseView, StorytellerView, TreemapView
from .service import StorytellerViewBuilder, build_kimchimap_view, build_metabase_view

logger = logging.getLogger(__name__)

router = APIRouter(tags=["views"])


def get_storyteller_view_builder(
    aggregator: NotionAggregator = Depends(get_notion_aggregator),
    database_id: str = Depends(get_storyteller_database_id),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service),
    store: SnapshotStore = Depends(get_snapshot_store),
) -> StorytellerViewBuilder:
    return StorytellerViewBuilder(
        aggregator=aggregator,
        leaderboard=leaderboard,
        store=store,
        database_id=database_id,
    )


@router.get(
    "/storyteller",
    response_model=StorytellerView,
    summary="ストーリーテラー画面の表示データ",
)
async def get_storyteller_view(
    group_id: Optional[str] = Query(None, alias="groupId"),
    lookback: Optional[int] = Query(None),
    snapshot_date: Optional[str] = Query(None, alias="date"),
    builder: StorytellerViewBuilder = Depends(get_storyteller_view_builder),
) -> StorytellerView:
    """
    - 上流の一部失敗は failures に入れて 200
    - lookback / date の形式不正 → 400
    - 過去日付のスナップショットが無い → 404
    """
    try:
        return await builder.build(
            group_id=group_id,
            lookback=lookback,
            snapshot_date=snapshot_date,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except SnapshotNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        ) from exc
    except SnapshotStoreError as exc:
        logger.error("Storyteller snapshot error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc


@router.get(
    "/kimchimap",
    response_model=TreemapView,
    summary="マインドシェアのツリーマップ",
)
async def get_kimchimap_view(
    request: Request,
    client: MindshareClient = Depends(get_mindshare_client),
) -> TreemapView:
    """クエリパラメータはマインドシェア API にそのまま渡す。"""
    try:
        return await build_kimchimap_view(client, request.query_params.multi_items())
    except MindshareHTTPError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail="Failed to fetch from external API",
        ) from exc
    except MindshareClientError as exc:
        logger.error("Kimchimap view error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc


@router.get(
    "/metabase",
    response_model=MetabaseView,
    summary="メタベースのリンク集（Notion ページのブロックツリー）",
)
async def get_metabase_view(
    aggregator: NotionAggregator = Depends(get_notion_aggregator),
    page_id: str = Depends(get_metabase_page_id),
) -> MetabaseView:
    try:
        return await build_metabase_view(aggregator, page_id)
    except NotionClientError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc
