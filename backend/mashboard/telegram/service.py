# backend/mashboard/telegram/service.py

"""
Telegram チャンネルの所有者検証サービス。

責務:
- ユーザー入力のハンドル正規化（URL / @ の除去）
- getChat → getChatMember → (任意) getFile の順に呼び出す
- creator 権限を持つ場合のみ検証成功とし、チャンネルのメタデータを返す
"""

import logging
from typing import Optional

from .client import TelegramClient, TelegramClientError
from .schemas import VerifiedChannel, VerifyChannelResponse

logger = logging.getLogger(__name__)

# 所有者として認める role
OWNER_ROLES = ("creator",)

CHANNEL_NOT_FOUND_MESSAGE = "채널을 찾을 수 없습니다. 봇이 추가되었는지 확인해주세요."
NOT_OWNER_MESSAGE = "소유주 권한이 확인되지 않았습니다."


class ChannelVerificationError(Exception):
    """検証失敗の基底例外。message はそのままユーザーに表示する。"""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ChannelNotFoundError(ChannelVerificationError):
    """getChat に失敗した（存在しない・Bot が追加されていない）。"""

    status_code = 400


class NotChannelOwnerError(ChannelVerificationError):
    """creator 権限が確認できなかった。"""

    status_code = 403


def normalize_handle(raw: Optional[str]) -> str:
    """
    "https://t.me/my_channel" / "@my_channel" / "my_channel" を "my_channel" にそろえる。
    大文字・小文字はそのまま残す。
    """
    if not raw:
        return ""

    handle = raw.strip()
    if "t.me/" in handle:
        handle = handle.split("t.me/", 1)[1].split("/", 1)[0]
    for prefix in ("https://", "http://"):
        if handle.startswith(prefix):
            handle = handle[len(prefix):]
    handle = handle.split("?", 1)[0]
    return handle.replace("@", "", 1).strip()


class ChannelVerifier:
    """
    TelegramClient を使ってチャンネル所有者を検証するサービス。

    リトライやレート制限の考慮はしない。
    """

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def verify(self, channel_id: str, user_id: str) -> VerifyChannelResponse:
        """
        :raises ValueError: ハンドルが空になった場合
        :raises ChannelNotFoundError: getChat に失敗した場合
        :raises NotChannelOwnerError: creator でない / getChatMember に失敗した場合
        """
        handle = normalize_handle(channel_id)
        if not handle:
            raise ValueError("Missing parameters")
        chat_id = f"@{handle}"

        try:
            chat = await self._client.get_chat(chat_id)
        except TelegramClientError as exc:
            logger.info("getChat failed for %s: %s", chat_id, exc)
            raise ChannelNotFoundError(CHANNEL_NOT_FOUND_MESSAGE) from exc

        try:
            member = await self._client.get_chat_member(chat_id, str(user_id))
        except TelegramClientError as exc:
            logger.info("getChatMember failed for %s / %s: %s", chat_id, user_id, exc)
            raise NotChannelOwnerError(NOT_OWNER_MESSAGE) from exc

        role = member.get("status")
        if role not in OWNER_ROLES:
            logger.info("User %s is %r in %s; ownership rejected.", user_id, role, chat_id)
            raise NotChannelOwnerError(NOT_OWNER_MESSAGE)

        photo_url = await self._fetch_photo_url(chat)

        count = chat.get("count")
        return VerifyChannelResponse(
            success=True,
            role=role,
            channel=VerifiedChannel(
                id=handle,
                title=chat.get("title"),
                subscribers=count if isinstance(count, int) else None,
                photo_url=photo_url,
                url=f"https://t.me/{handle}",
            ),
        )

    async def _fetch_photo_url(self, chat: dict) -> Optional[str]:
        """
        プロフィール写真があればダウンロード URL を返す。失敗しても検証自体は成功扱い。
        """
        photo = chat.get("photo")
        file_id = photo.get("big_file_id") if isinstance(photo, dict) else None
        if not file_id:
            return None

        try:
            file_info = await self._client.get_file(file_id)
        except TelegramClientError as exc:
            logger.warning("getFile failed for channel photo: %s", exc)
            return None

        file_path = file_info.get("file_path")
        return self._client.file_url(file_path) if file_path else None
