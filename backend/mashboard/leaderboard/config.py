# backend/mashboard/leaderboard/config.py

"""
ストーリーテラー・リーダーボード API の設定値。
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from mashboard.utils.config import get_env, get_env_float, get_env_int, get_env_int_list

DEFAULT_LOOKBACK_DAYS: Tuple[int, ...] = (7, 14, 30, 90)


@dataclass(frozen=True)
class LeaderboardSettings:
    """
    リーダーボード API 関連の設定値。

    limit は用途ごとに異なる:
      - dashboard_limit: ダッシュボード表示（グループ x 全ルックバック）
      - rank_limit: マイランク検索（上位に居なくても見つけられるよう多め）
      - snapshot_limit / snapshot_lookback_days: 日次スナップショット
    """

    base_url: str = "https://mashboard-api.despreadlabs.io/storyteller-leaderboard"
    lookback_days: Tuple[int, ...] = field(default=DEFAULT_LOOKBACK_DAYS)
    dashboard_limit: int = 50
    rank_limit: int = 100
    rank_lookback_days: int = 30
    snapshot_limit: int = 20
    snapshot_lookback_days: int = 30
    timeout_seconds: float = 10.0
    default_group_id: Optional[str] = None


def get_leaderboard_settings() -> LeaderboardSettings:
    """
    リーダーボード設定値を環境変数から読み出す（すべて任意）。

      - LEADERBOARD_API_BASE_URL
      - LEADERBOARD_LOOKBACK_DAYS   (例: "7,14,30,90")
      - LEADERBOARD_DASHBOARD_LIMIT (デフォルト 50)
      - LEADERBOARD_RANK_LIMIT      (デフォルト 100)
      - LEADERBOARD_SNAPSHOT_LIMIT  (デフォルト 20)
      - LEADERBOARD_TIMEOUT_SECONDS (デフォルト 10)
      - LEADERBOARD_DEFAULT_GROUP_ID (Notion にグループが無いときの表示用)
    """
    return LeaderboardSettings(
        base_url=get_env(
            "LEADERBOARD_API_BASE_URL",
            default=LeaderboardSettings.base_url,
            required=False,
        ).rstrip("/"),
        lookback_days=tuple(
            get_env_int_list("LEADERBOARD_LOOKBACK_DAYS", list(DEFAULT_LOOKBACK_DAYS))
        ),
        dashboard_limit=get_env_int("LEADERBOARD_DASHBOARD_LIMIT", default=50),
        rank_limit=get_env_int("LEADERBOARD_RANK_LIMIT", default=100),
        snapshot_limit=get_env_int("LEADERBOARD_SNAPSHOT_LIMIT", default=20),
        timeout_seconds=get_env_float("LEADERBOARD_TIMEOUT_SECONDS", default=10.0),
        default_group_id=get_env("LEADERBOARD_DEFAULT_GROUP_ID", required=False),
    )
