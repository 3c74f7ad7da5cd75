# backend/mashboard/telegram/client.py

from typing import Any, Dict, Optional

import httpx

from .config import TelegramSettings


class TelegramClientError(Exception):
    """Telegram クライアント全般の基底例外。"""


class TelegramAPIError(TelegramClientError):
    """Bot API が ok=false を返した場合の例外。"""

    def __init__(self, method: str, description: Optional[str] = None) -> None:
        super().__init__(f"Telegram API {method} failed: {description or 'unknown error'}")
        self.method = method
        self.description = description


class TelegramConnectionError(TelegramClientError):
    """接続エラー・タイムアウト時の例外。"""


class TelegramClient:
    """
    Telegram Bot API への最小限の HTTP クライアント。

    Bot API はエラー時も JSON で {"ok": false, "description": ...} を返すので、
    ステータスコードではなく ok フラグで成否を判定する。
    """

    def __init__(
        self,
        settings: TelegramSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not settings.bot_token:
            raise TelegramClientError("TELEGRAM_BOT_TOKEN is not set")
        self._settings = settings
        self._transport = transport

    def _method_url(self, method: str) -> str:
        return f"{self._settings.api_base_url}/bot{self._settings.bot_token}/{method}"

    def file_url(self, file_path: str) -> str:
        """getFile の file_path を実際のダウンロード URL に変換する。"""
        return f"{self._settings.api_base_url}/file/bot{self._settings.bot_token}/{file_path}"

    async def _call(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(self._method_url(method), params=params)
        except httpx.RequestError as exc:
            # URL にトークンが含まれるため、例外メッセージには method 名だけを残す
            raise TelegramConnectionError(f"Failed to call Telegram API {method}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise TelegramAPIError(method, "non-JSON response") from exc

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise TelegramAPIError(method, description)

        result = data.get("result")
        return result if isinstance(result, dict) else {}

    async def get_chat(self, chat_id: str) -> Dict[str, Any]:
        """チャンネルの基本情報（タイトル・写真・購読者数など）を取得する。"""
        return await self._call("getChat", {"chat_id": chat_id})

    async def get_chat_member(self, chat_id: str, user_id: str) -> Dict[str, Any]:
        """指定ユーザーのチャンネル内での権限（status）を取得する。"""
        return await self._call("getChatMember", {"chat_id": chat_id, "user_id": user_id})

    async def get_file(self, file_id: str) -> Dict[str, Any]:
        """file_id から file_path を取得する。"""
        return await self._call("getFile", {"file_id": file_id})
