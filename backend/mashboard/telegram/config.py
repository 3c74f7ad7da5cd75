# backend/mashboard/telegram/config.py

from dataclasses import dataclass
from typing import Optional

from mashboard.utils.config import get_env, get_env_float


@dataclass(frozen=True)
class TelegramSettings:
    """
    Telegram Bot API 関連の設定値。
    """

    bot_token: Optional[str]
    api_base_url: str = "https://api.telegram.org"
    timeout_seconds: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token)


def get_telegram_settings() -> TelegramSettings:
    """
    シークレット（任意。未設定の場合 /api/verify-channel は 500）:
      - TELEGRAM_BOT_TOKEN

    任意:
      - TELEGRAM_API_BASE_URL（デフォルト https://api.telegram.org）
      - TELEGRAM_TIMEOUT_SECONDS（デフォルト 10秒）
    """
    return TelegramSettings(
        bot_token=get_env("TELEGRAM_BOT_TOKEN", required=False),
        api_base_url=get_env(
            "TELEGRAM_API_BASE_URL",
            default="https://api.telegram.org",
            required=False,
        ).rstrip("/"),
        timeout_seconds=get_env_float("TELEGRAM_TIMEOUT_SECONDS", default=10.0),
    )
