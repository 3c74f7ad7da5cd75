# backend/mashboard/mindshare/client.py

from typing import Any, Optional, Sequence, Tuple

import httpx

from .config import MindshareSettings


class MindshareClientError(Exception):
    """マインドシェアクライアント全般の基底例外。"""


class MindshareHTTPError(MindshareClientError):
    """上流 API がエラーステータスを返した場合の例外（ステータスはそのまま伝播させる）。"""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Mindshare API error: status_code={status_code}")
        self.status_code = status_code


class MindshareConnectionError(MindshareClientError):
    """接続エラー・タイムアウト時の例外。"""


class MindshareClient:
    """
    マインドシェア API へのクエリをそのまま転送するクライアント。

    サーバー間通信にすることで、ブラウザからの CORS 制約を回避する。
    """

    def __init__(
        self,
        settings: MindshareSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def fetch(self, params: Sequence[Tuple[str, str]]) -> Any:
        """
        クエリパラメータ（順序・重複キーを含めてそのまま）を付けて GET する。

        :return: 上流のレスポンス JSON（加工しない）
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    self._settings.api_url,
                    params=list(params),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as exc:
            raise MindshareConnectionError(str(exc)) from exc

        if response.status_code // 100 != 2:
            raise MindshareHTTPError(response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise MindshareClientError("Mindshare API returned a non-JSON response.") from exc
