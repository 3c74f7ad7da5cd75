# backend/mashboard/ranking/service.py

"""
連携済みチャンネルの順位を、全プロジェクトのリーダーボードから横断的に探すサービス層。

- Notion からプロジェクト（title, groupId）一覧を取得
- 各グループのリーダーボードを並列に取得し、ハンドルが一致するチャンネルを探す
- プロジェクト単位のエラーはログに出して無視する（結果はベストエフォート）
"""

import asyncio
import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from mashboard.leaderboard.client import LeaderboardClientError
from mashboard.leaderboard.schemas import SeriesPoint
from mashboard.leaderboard.service import LeaderboardService
from mashboard.notion.schemas import NotionProject
from mashboard.notion.service import NotionAggregator
from mashboard.telegram.service import normalize_handle

from .schemas import RankEntry

logger = logging.getLogger(__name__)


def comparable_handle(raw: Any) -> str:
    """大文字・小文字と @ を無視して比較するためのキー。文字列以外は空文字。"""
    if not isinstance(raw, str):
        return ""
    return normalize_handle(raw).lower()


def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _lenient_series(raw: Any) -> List[SeriesPoint]:
    if not isinstance(raw, list):
        return []
    return [
        SeriesPoint(date=str(point.get("date") or ""), score=_to_float(point.get("score")))
        for point in raw
        if isinstance(point, dict)
    ]


def day_over_day_change(series: Sequence[SeriesPoint]) -> int:
    """
    時系列の最後の 2点の差を切り捨てた値。2点未満なら 0。
    """
    if len(series) < 2:
        return 0
    return math.floor(series[-1].score - series[-2].score)


def find_rank(
    payload: Dict[str, Any],
    handle: str,
    *,
    campaign: str,
) -> Optional[RankEntry]:
    """
    リーダーボードのレスポンスからハンドルが一致するチャンネルを探す。

    channels は API 側で既にスコア降順に並んでいる前提で、
    rank は配列中の 1始まりの位置をそのまま使う。
    一致したチャンネルの score / series が壊れていても 0 扱いで順位は返す。
    """
    channels = payload.get("channels") if isinstance(payload, dict) else None
    if not isinstance(channels, list):
        return None

    target = comparable_handle(handle)
    if not target:
        return None
    for index, raw in enumerate(channels):
        if not isinstance(raw, dict):
            continue
        username = raw.get("channelUsername")
        if comparable_handle(username) != target:
            continue

        return RankEntry(
            campaign=campaign,
            rank=index + 1,
            score=math.floor(_to_float(raw.get("score"))),
            change=day_over_day_change(_lenient_series(raw.get("series"))),
            handle=username,
        )
    return None


class RankResolver:
    """
    NotionAggregator と LeaderboardService を組み合わせて順位を求める。
    """

    def __init__(
        self,
        *,
        aggregator: NotionAggregator,
        leaderboard: LeaderboardService,
        database_id: str,
    ) -> None:
        self._aggregator = aggregator
        self._leaderboard = leaderboard
        self._database_id = database_id

    async def _rank_in_project(self, project: NotionProject, handle: str) -> Optional[RankEntry]:
        settings = self._leaderboard.settings
        try:
            payload = await self._leaderboard.fetch_one(
                project.group_id,
                lookback_days=settings.rank_lookback_days,
                limit=settings.rank_limit,
            )
            return find_rank(payload, handle, campaign=project.title)
        except LeaderboardClientError as exc:
            logger.error("Error fetching group %s: %s", project.group_id, exc)
            return None
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error ranking group %s.", project.group_id)
            return None

    async def resolve(self, handle: str) -> List[RankEntry]:
        """
        :param handle: 正規化前のハンドル
        :raises ValueError: ハンドルが空の場合
        :return: スコア降順の RankEntry リスト（見つからなければ空）
        """
        if not comparable_handle(handle):
            raise ValueError("Handle required")

        projects = await self._aggregator.fetch_projects(self._database_id)
        if not projects.items:
            logger.info("Project list is empty; nothing to rank.")
            return []

        outcomes = await asyncio.gather(
            *(self._rank_in_project(project, handle) for project in projects.items)
        )
        rankings = [entry for entry in outcomes if entry is not None]
        rankings.sort(key=lambda entry: entry.score, reverse=True)

        logger.info("Found %d rankings for handle %s.", len(rankings), comparable_handle(handle))
        return rankings
