# backend/mashboard/leaderboard/client.py

from typing import Any, Dict, Optional

import httpx

from .config import LeaderboardSettings


class LeaderboardClientError(Exception):
    """リーダーボードクライアント全般の基底例外。"""


class LeaderboardHTTPError(LeaderboardClientError):
    """HTTP ステータスコードがエラーだった場合の例外。"""

    def __init__(self, status_code: int, body: Optional[Any] = None) -> None:
        super().__init__(f"Leaderboard API error: status_code={status_code}")
        self.status_code = status_code
        self.body = body


class LeaderboardConnectionError(LeaderboardClientError):
    """接続エラー・タイムアウト時の例外。"""


class LeaderboardClient:
    """
    ストーリーテラー・リーダーボード API への HTTP クライアント。

    GET {base_url}/{groupId}/timeseries-group?limit=..&lookbacks=..
    のレスポンス（channels 配列を含む JSON）をそのまま返す。
    """

    def __init__(
        self,
        settings: LeaderboardSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._settings.base_url

    @property
    def timeout(self) -> float:
        return self._settings.timeout_seconds

    def build_url(self, group_id: str) -> str:
        return f"{self.base_url}/{group_id}/timeseries-group"

    async def fetch_timeseries(
        self,
        group_id: str,
        *,
        lookback_days: int,
        limit: int,
    ) -> Dict[str, Any]:
        """
        グループ 1件・ルックバック 1件分のランキングデータを取得する。

        :raises LeaderboardHTTPError: API が 4xx/5xx を返した場合。
        :raises LeaderboardConnectionError: 接続エラーやタイムアウト時。
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    self.build_url(group_id),
                    params={"limit": limit, "lookbacks": lookback_days},
                )
        except httpx.RequestError as exc:  # 接続エラー・タイムアウトなど
            raise LeaderboardConnectionError(str(exc)) from exc

        if response.status_code // 100 != 2:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise LeaderboardHTTPError(status_code=response.status_code, body=body)

        try:
            data = response.json()
        except ValueError as exc:
            raise LeaderboardClientError("Leaderboard API returned a non-JSON response.") from exc

        if not isinstance(data, dict):
            raise LeaderboardClientError("Unexpected leaderboard response format: not an object.")
        return data
