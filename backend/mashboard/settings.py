# backend/mashboard/settings.py

"""
アプリ全体の設定オブジェクト。

環境変数は起動時に load_settings() で 1回だけ読み込み、
create_app() に渡して app.state.settings に保持する。
値の形式が不正な場合（数値でないタイムアウトなど）はここで例外になり、起動しない。
シークレットは機能ごとに任意で、未設定の機能のエンドポイントだけが 500 を返す。
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from mashboard.leaderboard.config import LeaderboardSettings, get_leaderboard_settings
from mashboard.mindshare.config import MindshareSettings, get_mindshare_settings
from mashboard.notion.config import NotionConfig, get_notion_config
from mashboard.snapshots.config import (
    CronSettings,
    SnapshotSettings,
    get_cron_settings,
    get_snapshot_settings,
)
from mashboard.telegram.config import TelegramSettings, get_telegram_settings
from mashboard.utils.config import get_env

logger = logging.getLogger(__name__)

CONFIG_ERROR_DETAIL = "Server configuration error"


@dataclass(frozen=True)
class AppSettings:
    """各連携先の設定値をまとめたコンテナ。"""

    notion: NotionConfig
    leaderboard: LeaderboardSettings
    mindshare: MindshareSettings
    telegram: TelegramSettings
    snapshots: SnapshotSettings
    cron: CronSettings
    log_level: str = "INFO"


def load_settings() -> AppSettings:
    """
    環境変数から AppSettings を構築する。

    :raises RuntimeError: 値の形式が不正な場合
    """
    log_level = (get_env("LOG_LEVEL", default="INFO", required=False) or "INFO").upper()
    if logging.getLevelName(log_level) == f"Level {log_level}":
        raise RuntimeError(f"Invalid LOG_LEVEL: {log_level!r}")

    settings = AppSettings(
        notion=get_notion_config(),
        leaderboard=get_leaderboard_settings(),
        mindshare=get_mindshare_settings(),
        telegram=get_telegram_settings(),
        snapshots=get_snapshot_settings(),
        cron=get_cron_settings(),
        log_level=log_level,
    )

    missing = [
        name
        for name, configured in (
            ("NOTION_TOKEN / NOTION_STORYTELLER_DB_ID", settings.notion.is_configured),
            ("TELEGRAM_BOT_TOKEN", settings.telegram.is_configured),
            ("CRON_SECRET", settings.cron.is_configured),
        )
        if not configured
    ]
    if missing:
        logger.warning("Not configured (related endpoints will return 500): %s", ", ".join(missing))

    return settings


def get_settings(request: Request) -> AppSettings:
    """
    FastAPI の依存関係として、app.state に保持した設定を返す。
    """
    return request.app.state.settings


def config_error() -> HTTPException:
    """設定不足時に返す 500 エラー。詳細はログ側で確認する。"""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=CONFIG_ERROR_DETAIL,
    )
