# backend/mashboard/leaderboard/service.py

"""
リーダーボード API をグループ x ルックバックでファンアウトするサービス層。

1回の呼び出しの失敗はページ全体を落とさない:
失敗分はログに出して PartialResult.failures に記録し、結果からは省く。
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from mashboard.utils.results import PartialResult

from .client import LeaderboardClient, LeaderboardClientError
from .config import LeaderboardSettings

logger = logging.getLogger(__name__)

# {lookback 日数(str): レスポンス JSON}
GroupWindows = Dict[str, Dict[str, Any]]


class LeaderboardService:
    """
    LeaderboardClient を使って、複数ルックバック・複数グループのデータを並列取得する。
    """

    def __init__(self, client: LeaderboardClient, settings: LeaderboardSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def settings(self) -> LeaderboardSettings:
        return self._settings

    async def fetch_one(
        self,
        group_id: str,
        *,
        lookback_days: int,
        limit: int,
    ) -> Dict[str, Any]:
        """
        1グループ・1ルックバック分をそのまま取得する（例外は呼び出し側へ）。
        """
        return await self._client.fetch_timeseries(
            group_id,
            lookback_days=lookback_days,
            limit=limit,
        )

    async def fetch_group_windows(
        self,
        group_id: str,
        lookbacks: Optional[Sequence[int]] = None,
        *,
        limit: Optional[int] = None,
    ) -> PartialResult[Tuple[int, Dict[str, Any]]]:
        """
        1グループについて全ルックバック期間を並列に取得する。

        :return: (lookback, payload) の PartialResult
        """
        lookbacks = list(lookbacks or self._settings.lookback_days)
        limit = limit or self._settings.dashboard_limit

        outcomes = await asyncio.gather(
            *(
                self._client.fetch_timeseries(group_id, lookback_days=days, limit=limit)
                for days in lookbacks
            ),
            return_exceptions=True,
        )

        result: PartialResult[Tuple[int, Dict[str, Any]]] = PartialResult()
        for days, outcome in zip(lookbacks, outcomes):
            if isinstance(outcome, LeaderboardClientError):
                logger.error("Error fetching group %s - %dd: %s", group_id, days, outcome)
                result.add_failure(f"{group_id}:{days}d", outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.items.append((days, outcome))
        return result

    async def fetch_groups(
        self,
        group_ids: Iterable[str],
        lookbacks: Optional[Sequence[int]] = None,
        *,
        limit: Optional[int] = None,
    ) -> Tuple[Dict[str, GroupWindows], PartialResult[str]]:
        """
        複数グループ分をまとめて取得する。

        :return: ({groupId: {"7": payload, "30": payload, ...}}, 取得できた groupId の PartialResult)

        一部のルックバックだけ取れたグループも map には含める。
        """
        group_list: List[str] = list(dict.fromkeys(group_ids))
        windows = await asyncio.gather(
            *(
                self.fetch_group_windows(group_id, lookbacks, limit=limit)
                for group_id in group_list
            )
        )

        data_map: Dict[str, GroupWindows] = {}
        summary: PartialResult[str] = PartialResult()
        for group_id, window in zip(group_list, windows):
            data_map[group_id] = {str(days): payload for days, payload in window.items}
            summary.failures.extend(window.failures)
            if window.items:
                summary.items.append(group_id)

        return data_map, summary
