# backend/mashboard/leaderboard/schemas.py

"""
リーダーボード API レスポンスのスキーマ定義。

外部 API の形が多少崩れていても全体を落とさないよう、
channels 配列は 1件ずつ検証し、壊れたエントリだけを捨てる。
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, ValidationError

from mashboard.utils.schemas import CamelModel

logger = logging.getLogger(__name__)


class SeriesPoint(CamelModel):
    """チャンネルスコアの時系列 1点（累積スコア）。"""

    date: str = Field("", description="日付（YYYY-MM-DD）")
    score: float = Field(0.0, description="その日までの累積スコア")
    mention_count: int = Field(0, description="言及数")


class ChannelEntry(CamelModel):
    """
    リーダーボードの 1行（チャンネル 1件）。

    API は score の降順に並べて返す。未知のフィールドはそのまま保持する。
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    channel_id: str = Field(..., description="チャンネル ID")
    channel_username: Optional[str] = Field(None, description="@ を含むこともあるユーザー名")
    channel_title: str = Field("", description="チャンネル名")
    score: float = Field(0.0, description="ルックバック期間のスコア")
    mention_count: int = Field(0, description="言及数")
    profile_image_url: Optional[str] = Field(None, description="プロフィール画像 URL")
    series: List[SeriesPoint] = Field(default_factory=list, description="時系列（古い順）")


def parse_channels(payload: Optional[Dict[str, Any]]) -> List[ChannelEntry]:
    """
    レスポンス JSON から channels を取り出して ChannelEntry のリストにする。

    - channels が無い / 配列でない場合は空リスト
    - 検証に失敗したエントリはログを出してスキップ（順序は維持）
    """
    if not isinstance(payload, dict):
        return []

    raw_channels = payload.get("channels")
    if not isinstance(raw_channels, list):
        return []

    channels: List[ChannelEntry] = []
    for raw in raw_channels:
        try:
            channels.append(ChannelEntry.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed leaderboard channel entry: %s", exc)
    return channels
