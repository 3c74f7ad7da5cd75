# backend/mashboard/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。
"""

from dataclasses import dataclass
from typing import Optional

from mashboard.utils.config import get_env, get_env_float, get_env_int


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    token: Optional[str]
    storyteller_database_id: Optional[str]
    metabase_page_id: Optional[str]
    api_base_url: str = "https://api.notion.com/v1"
    # data source API が必要なため 2025-09-03 以降を前提にする
    api_version: str = "2025-09-03"
    timeout_seconds: float = 10.0
    page_size: int = 100

    @property
    def is_configured(self) -> bool:
        """トークンとストーリーテラー DB ID が揃っているかどうか。"""
        return bool(self.token and self.storyteller_database_id)


def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    シークレット（任意。未設定の場合は該当エンドポイントが 500 を返す）:
      - NOTION_TOKEN
      - NOTION_STORYTELLER_DB_ID
      - NOTION_METABASE_PAGE_ID

    任意:
      - NOTION_API_BASE_URL     (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION      (デフォルト: 2025-09-03)
      - NOTION_TIMEOUT_SECONDS  (デフォルト: 10)
      - NOTION_PAGE_SIZE        (デフォルト: 100, Notion API の上限)
    """
    page_size = get_env_int("NOTION_PAGE_SIZE", default=100)
    if not 1 <= page_size <= 100:
        raise RuntimeError(f"NOTION_PAGE_SIZE must be between 1 and 100: {page_size}")

    return NotionConfig(
        token=get_env("NOTION_TOKEN", required=False),
        storyteller_database_id=get_env("NOTION_STORYTELLER_DB_ID", required=False),
        metabase_page_id=get_env("NOTION_METABASE_PAGE_ID", required=False),
        api_base_url=get_env(
            "NOTION_API_BASE_URL",
            default="https://api.notion.com/v1",
            required=False,
        ),
        api_version=get_env(
            "NOTION_API_VERSION",
            default="2025-09-03",
            required=False,
        ),
        timeout_seconds=get_env_float("NOTION_TIMEOUT_SECONDS", default=10.0),
        page_size=page_size,
    )
