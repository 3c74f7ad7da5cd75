# backend/mashboard/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- 環境変数から設定を読み込み、app.state.settings に保持する
- 各機能のルーターを登録する
  - /api/history, /api/cron/storyteller（スナップショット）
  - /api/mindshare（マインドシェア API プロキシ）
  - /api/my-rank（マイランク）
  - /api/verify-channel（Telegram チャンネル検証）
  - /notion/tasks（Notion タスク一覧）
  - /storyteller, /kimchimap, /metabase（ダッシュボード画面用データ）
- ヘルスチェックエンドポイント (/health) を公開する
"""

import logging
from typing import Optional

from fastapi import FastAPI

from mashboard.mindshare.router import router as mindshare_router
from mashboard.notion.router import router as notion_router
from mashboard.presentation.router import router as presentation_router
from mashboard.ranking.router import router as ranking_router
from mashboard.settings import AppSettings, load_settings
from mashboard.snapshots.router import router as snapshots_router
from mashboard.telegram.router import router as telegram_router


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    :param settings: テストなどで差し替える場合に指定（省略時は環境変数から読み込む）
    """
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="Mashboard Backend")
    app.state.settings = settings

    # ルーター登録
    app.include_router(notion_router)
    app.include_router(mindshare_router)
    app.include_router(telegram_router)
    app.include_router(snapshots_router)
    app.include_router(ranking_router)
    app.include_router(presentation_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
