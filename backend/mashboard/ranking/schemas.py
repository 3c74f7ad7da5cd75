# backend/mashboard/ranking/schemas.py

from typing import Optional

from pydantic import Field

from mashboard.utils.schemas import CamelModel


class RankRequest(CamelModel):
    """/api/my-rank のリクエストボディ。"""

    handle: Optional[str] = Field(None, description="チャンネルハンドル（@ の有無・大文字小文字は問わない）")


class RankEntry(CamelModel):
    """
    1プロジェクト分の順位情報。
    """

    campaign: str = Field(..., description="プロジェクト（キャンペーン）名")
    rank: int = Field(..., ge=1, description="1始まりの順位")
    score: int = Field(..., description="スコア（切り捨て）")
    change: int = Field(0, description="前日比（直近 2点の差を切り捨て）")
    handle: Optional[str] = Field(None, description="API 上のチャンネルユーザー名")
