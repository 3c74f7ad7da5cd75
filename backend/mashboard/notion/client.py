# backend/mashboard/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

from typing import Any, Dict, List, Optional

import httpx

from .config import NotionConfig


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""


class NotionClient:
    """
    Notion API の薄い非同期ラッパークライアント。

    - データベースのメタデータ取得（data source 一覧）
    - data source / データベース（旧方式）の query
    - ブロック子要素の取得

    :param transport: テスト時に httpx.MockTransport を差し込むためのフック
    """

    def __init__(
        self,
        config: NotionConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not config.token:
            raise NotionClientError("Notion token is not configured. Check NOTION_TOKEN.")
        self.config = config
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check NOTION_TOKEN.")
        if response.status_code == 403:
            raise NotionAuthError("Forbidden. Check Notion integration permissions.")
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}"
            )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.config.api_base_url}/{path}"

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._build_headers(),
                    json=json,
                    params=params,
                )
        except httpx.RequestError as exc:
            raise NotionClientError(f"Failed to call Notion API: {exc}") from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise NotionAPIError("Notion API returned a non-JSON response.") from exc

        if not isinstance(data, dict):
            raise NotionAPIError("Unexpected Notion API response format: not an object.")
        return data

    @staticmethod
    def _results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        results = data.get("results", [])
        if not isinstance(results, list):
            raise NotionAPIError("Unexpected Notion API response format: 'results' is not a list.")
        return [item for item in results if isinstance(item, dict)]

    async def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        """
        データベースのメタデータを取得する。

        2025-09-03 以降の API では data_sources に query 対象の一覧が入る。
        """
        return await self._request("GET", f"databases/{database_id}")

    async def query_data_source(self, data_source_id: str) -> List[Dict[str, Any]]:
        """
        data source を 1ページ分（最大 page_size 件）query する。
        ページネーションは行わない。
        """
        data = await self._request(
            "POST",
            f"data_sources/{data_source_id}/query",
            json={"page_size": self.config.page_size},
        )
        return self._results(data)

    async def query_database(self, database_id: str) -> List[Dict[str, Any]]:
        """
        data source を持たないデータベース向けの旧方式 query。
        """
        data = await self._request(
            "POST",
            f"databases/{database_id}/query",
            json={"page_size": self.config.page_size},
        )
        return self._results(data)

    async def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """
        ブロック（ページ）の直下の子ブロックを 1ページ分取得する。
        """
        data = await self._request(
            "GET",
            f"blocks/{block_id}/children",
            params={"page_size": self.config.page_size},
        )
        return self._results(data)
