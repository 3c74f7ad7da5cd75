# backend/mashboard/presentation/service.py

"""
ダッシュボード画面用のビューを組み立てるサービス層。

取得（Notion / リーダーボード / スナップショット / マインドシェア）は各サービスに任せ、
ここでは結果の組み合わせと transforms の呼び出しだけを行う。
"""

import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from mashboard.leaderboard.schemas import parse_channels
from mashboard.leaderboard.service import GroupWindows, LeaderboardService
from mashboard.mindshare.client import MindshareClient
from mashboard.notion.service import NotionAggregator
from mashboard.snapshots.service import utc_today
from mashboard.snapshots.store import (
    SnapshotStore,
    SnapshotStoreError,
    normalize_date,
    validate_group_id,
)
from mashboard.utils.results import SourceFailure

from .schemas import MetabaseView, StorytellerView, TreemapView
from .transforms import (
    TREEMAP_LIMIT,
    build_mindshare_nodes,
    build_schedule,
    build_treemap_nodes,
    group_list_blocks,
    split_active_groups,
)

logger = logging.getLogger(__name__)

# スナップショットは 30日ルックバックで保存している
SNAPSHOT_LOOKBACK = 30


def select_group(
    requested: Optional[str],
    group_ids: List[str],
    active_group_ids: List[str],
) -> Optional[str]:
    """
    表示するグループを決める。

    指定があればそれ、無ければ最初の進行中グループ、それも無ければ最初のグループ。
    """
    if requested:
        return requested
    if active_group_ids:
        return active_group_ids[0]
    return group_ids[0] if group_ids else None


class StorytellerViewBuilder:
    """
    /storyteller ページの初期表示データをまとめて作る。
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

    async def _load_snapshot(self, group_id: str, day: str) -> Dict[str, Any]:
        raw = await self._store.read(group_id, day)
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise SnapshotStoreError(f"Snapshot is not valid JSON: {group_id}/{day}") from exc

    async def build(
        self,
        *,
        group_id: Optional[str] = None,
        lookback: Optional[int] = None,
        snapshot_date: Optional[str] = None,
        today: Optional[date] = None,
    ) -> StorytellerView:
        """
        :param group_id: 表示するグループ（省略時は自動選択）
        :param lookback: ツリーマップのルックバック日数（設定値のいずれか）
        :param snapshot_date: 過去日付。今日以外なら選択グループをスナップショットで置き換える
        :raises ValueError: groupId / lookback / 日付の形式が不正な場合
        :raises SnapshotNotFoundError: 指定日のスナップショットが無い場合
        """
        settings = self._leaderboard.settings
        today = today or utc_today()
        today_str = today.isoformat()
        if group_id:
            validate_group_id(group_id)
        day = normalize_date(snapshot_date) if snapshot_date else today_str
        historical = day != today_str

        if historical:
            lookback = SNAPSHOT_LOOKBACK
        elif lookback is None:
            lookback = SNAPSHOT_LOOKBACK
        elif lookback not in settings.lookback_days:
            raise ValueError(f"Unsupported lookback: {lookback}")

        tasks = await self._aggregator.fetch_tasks(self._database_id)
        failures: List[SourceFailure] = list(tasks.failures)

        project_names: Dict[str, str] = {}
        for task in tasks.items:
            project_names.setdefault(task.group_id, task.title)
        group_ids = list(project_names)
        if not group_ids and settings.default_group_id:
            group_ids = [settings.default_group_id]

        active, finished = split_active_groups(group_ids, tasks.items)
        selected = select_group(group_id, group_ids, active)

        data_map: Dict[str, GroupWindows]
        data_map, fetched = await self._leaderboard.fetch_groups(group_ids)
        failures.extend(fetched.failures)

        if historical and selected:
            data_map[selected] = {
                str(SNAPSHOT_LOOKBACK): await self._load_snapshot(selected, day)
            }
        elif selected and selected not in data_map:
            window = await self._leaderboard.fetch_group_windows(selected)
            data_map[selected] = {str(days): payload for days, payload in window.items}
            failures.extend(window.failures)

        treemap = TreemapView()
        if selected:
            payload = data_map.get(selected, {}).get(str(lookback))
            treemap = build_treemap_nodes(parse_channels(payload), limit=TREEMAP_LIMIT)

        if failures:
            logger.warning("Storyteller view built with %d failed sources.", len(failures))

        return StorytellerView(
            today=today_str,
            snapshot_date=day,
            tasks=tasks.items,
            available_group_ids=group_ids,
            active_group_ids=active,
            finished_group_ids=finished,
            project_names=project_names,
            selected_group_id=selected,
            lookback=lookback,
            api_data_map=data_map,
            treemap=treemap,
            schedule=build_schedule(tasks.items, today),
            failures=failures,
        )


async def build_kimchimap_view(client: MindshareClient, params) -> TreemapView:
    """マインドシェア API のレスポンスをツリーマップにする。"""
    payload = await client.fetch(params)
    return build_mindshare_nodes(payload, limit=TREEMAP_LIMIT)


async def build_metabase_view(aggregator: NotionAggregator, page_id: str) -> MetabaseView:
    """メタベースのリンク集ページをブロックツリーとして返す。"""
    blocks = await aggregator.fetch_blocks(page_id)
    return MetabaseView(blocks=group_list_blocks(blocks))
