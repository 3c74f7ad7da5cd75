# backend/mashboard/dependencies.py

"""
FastAPI の Dependency provider 群。

- app.state.settings からリクエストごとにサービスを組み立てる
- テスト時は app.dependency_overrides で差し替え可能にする
- 必要なシークレットが未設定なら 500（Server configuration error）
"""

from fastapi import Depends

from mashboard.leaderboard.client import LeaderboardClient
from mashboard.leaderboard.service import LeaderboardService
from mashboard.mindshare.client import MindshareClient
from mashboard.notion.client import NotionClient
from mashboard.notion.service import NotionAggregator
from mashboard.settings import AppSettings, config_error, get_settings
from mashboard.snapshots.service import SnapshotJob
from mashboard.snapshots.store import SnapshotStore, build_snapshot_store
from mashboard.telegram.client import TelegramClient
from mashboard.telegram.service import ChannelVerifier


def get_notion_aggregator(settings: AppSettings = Depends(get_settings)) -> NotionAggregator:
    if not settings.notion.token:
        raise config_error()
    return NotionAggregator(NotionClient(settings.notion))


def get_storyteller_database_id(settings: AppSettings = Depends(get_settings)) -> str:
    if not settings.notion.storyteller_database_id:
        raise config_error()
    return settings.notion.storyteller_database_id


def get_leaderboard_service(settings: AppSettings = Depends(get_settings)) -> LeaderboardService:
    return LeaderboardService(LeaderboardClient(settings.leaderboard), settings.leaderboard)


def get_mindshare_client(settings: AppSettings = Depends(get_settings)) -> MindshareClient:
    return MindshareClient(settings.mindshare)


def get_channel_verifier(settings: AppSettings = Depends(get_settings)) -> ChannelVerifier:
    if not settings.telegram.is_configured:
        raise config_error()
    return ChannelVerifier(TelegramClient(settings.telegram))


def get_snapshot_store(settings: AppSettings = Depends(get_settings)) -> SnapshotStore:
    return build_snapshot_store(settings.snapshots)


def get_snapshot_job(
    aggregator: NotionAggregator = Depends(get_notion_aggregator),
    database_id: str = Depends(get_storyteller_database_id),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service),
    store: SnapshotStore = Depends(get_snapshot_store),
) -> SnapshotJob:
    return SnapshotJob(
        aggregator=aggregator,
        leaderboard=leaderboard,
        store=store,
        database_id=database_id,
    )


def get_metabase_page_id(settings: AppSettings = Depends(get_settings)) -> str:
    if not settings.notion.metabase_page_id:
        raise config_error()
    return settings.notion.metabase_page_id
