# backend/mashboard/snapshots/service.py

"""
日次スナップショットジョブ。

Notion から groupId を持つプロジェクトを集め、グループごとにリーダーボードを取得して
history/{groupId}/{YYYY-MM-DD}.json に保存する。
グループ単位の失敗は他のグループの保存を止めない。
"""

import asyncio
import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from mashboard.leaderboard.client import LeaderboardClientError
from mashboard.leaderboard.service import LeaderboardService
from mashboard.notion.service import NotionAggregator
from mashboard.utils.results import SourceFailure

from .schemas import SavedSnapshot, SnapshotJobSummary
from .store import SnapshotStore, SnapshotStoreError, normalize_date

logger = logging.getLogger(__name__)


def serialize_snapshot(payload: Dict[str, Any]) -> bytes:
    """
    レスポンス JSON をそのまま UTF-8 のコンパクトな JSON にする。
    """
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def utc_today(now: Optional[datetime] = None) -> date:
    """
    naive な datetime が渡された場合でも UTC として扱うヘルパー。
    """
    if now is None:
        return datetime.now(timezone.utc).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date()


class SnapshotJob:
    """
    Notion → リーダーボード → スナップショットストアのパイプライン。
    """

    def __init__(
        self,
        *,
        aggregator: NotionAggregator,
        leaderboard: LeaderboardService,
        store: SnapshotStore,
        database_id: str,
    ) -> None:
        self._aggregator = aggregator
        self._leaderboard = leaderboard
        self._store = store
        self._database_id = database_id

    async def _save_group(self, group_id: str, day: str) -> SavedSnapshot:
        settings = self._leaderboard.settings
        payload = await self._leaderboard.fetch_one(
            group_id,
            lookback_days=settings.snapshot_lookback_days,
            limit=settings.snapshot_limit,
        )
        url = await self._store.write(group_id, day, serialize_snapshot(payload))
        return SavedSnapshot(group_id=group_id, url=url)

    async def run(self, snapshot_date: Optional[date] = None) -> SnapshotJobSummary:
        """
        ジョブを 1回実行してサマリを返す。

        :param snapshot_date: 保存キーに使う日付（デフォルト: UTC の今日）
        """
        day = normalize_date(snapshot_date or utc_today())
        logger.info("Snapshot job started for %s.", day)

        projects = await self._aggregator.fetch_projects(self._database_id)
        failures: List[SourceFailure] = list(projects.failures)
        group_ids = [project.group_id for project in projects.items]
        logger.info("Target projects with GroupID: %d", len(group_ids))

        outcomes = await asyncio.gather(
            *(self._save_group(group_id, day) for group_id in group_ids),
            return_exceptions=True,
        )

        saved: List[SavedSnapshot] = []
        for group_id, outcome in zip(group_ids, outcomes):
            if isinstance(outcome, (LeaderboardClientError, SnapshotStoreError)):
                logger.error("Snapshot failed for group %s: %s", group_id, outcome)
                failures.append(SourceFailure(source=group_id, error=str(outcome)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                saved.append(outcome)

        logger.info("Snapshot job finished: %d saved, %d failed.", len(saved), len(failures))
        return SnapshotJobSummary(
            success=True,
            date=day,
            count=len(saved),
            saved=saved,
            failures=failures,
        )
