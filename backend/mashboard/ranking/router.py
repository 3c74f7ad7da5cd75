# backend/mashboard/ranking/router.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from mashboard.dependencies import (
    get_leaderboard_service,
    get_notion_aggregator,
    get_storyteller_database_id,
)
from mashboard.leaderboard.service import LeaderboardService
from mashboard.notion.service import NotionAggregator

from .schemas import RankEntry, RankRequest
from .service import RankResolver

router = APIRouter(prefix="/api", tags=["ranking"])


def get_rank_resolver(
    aggregator: NotionAggregator = Depends(get_notion_aggregator),
    database_id: str = Depends(get_storyteller_database_id),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service),
) -> RankResolver:
    return RankResolver(aggregator=aggregator, leaderboard=leaderboard, database_id=database_id)


@router.post(
    "/my-rank",
    response_model=List[RankEntry],
    summary="連携済みチャンネルの全プロジェクト横断順位",
)
async def get_my_rank(
    body: RankRequest,
    resolver: RankResolver = Depends(get_rank_resolver),
) -> List[RankEntry]:
    """
    - handle が空 → 400
    - どのプロジェクトにも見つからない → 200 []
    - 想定外の内部エラー → 500
    """
    try:
        return await resolver.resolve(body.handle or "")
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc
