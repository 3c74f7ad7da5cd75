# backend/mashboard/telegram/schemas.py

from typing import Optional, Union

from pydantic import Field

from mashboard.utils.schemas import CamelModel


class VerifyChannelRequest(CamelModel):
    """
    /api/verify-channel のリクエストボディ。

    channelId は @handle / handle / https://t.me/handle のどれでもよい。
    """

    channel_id: Optional[str] = Field(None, description="チャンネルのハンドルまたは URL")
    user_id: Optional[Union[int, str]] = Field(None, description="Telegram ユーザー ID")


class VerifiedChannel(CamelModel):
    """
    検証済みチャンネルのメタデータ。

    ブラウザ側でのみ保存される（サーバー側には永続化しない）。
    """

    id: str = Field(..., description="@ を除いたハンドル")
    title: Optional[str] = Field(None, description="チャンネル名")
    subscribers: Optional[int] = Field(None, description="購読者数（Bot の権限次第で取得できない）")
    photo_url: Optional[str] = Field(None, description="プロフィール画像 URL")
    url: str = Field(..., description="https://t.me/{handle}")


class VerifyChannelResponse(CamelModel):
    """
    /api/verify-channel のレスポンスボディ。

    - 成功: success=True, role, channel
    - 失敗: success=False, message（ユーザー向けの理由）
    """

    success: bool
    role: Optional[str] = None
    channel: Optional[VerifiedChannel] = None
    message: Optional[str] = None
