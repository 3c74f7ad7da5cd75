# backend/mashboard/mindshare/config.py

from dataclasses import dataclass

from mashboard.utils.config import get_env, get_env_float


@dataclass(frozen=True)
class MindshareSettings:
    """
    マインドシェア API 関連の設定値。
    """

    api_url: str = "https://mashboard-api.despreadlabs.io/telegram/mindshare/community"
    timeout_seconds: float = 10.0


def get_mindshare_settings() -> MindshareSettings:
    """
    任意:
      - MINDSHARE_API_URL
      - MINDSHARE_TIMEOUT_SECONDS（デフォルト 10秒）
    """
    return MindshareSettings(
        api_url=get_env(
            "MINDSHARE_API_URL",
            default=MindshareSettings.api_url,
            required=False,
        ),
        timeout_seconds=get_env_float("MINDSHARE_TIMEOUT_SECONDS", default=10.0),
    )
