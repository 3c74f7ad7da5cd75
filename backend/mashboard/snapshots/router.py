# backend/mashboard/snapshots/router.py

"""
スナップショット関連の FastAPI ルーター定義。

- GET /api/history?groupId=..&date=..   保存済みスナップショットの取得
- GET /api/cron/storyteller             日次スナップショットジョブ（Bearer 認証）
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status

from mashboard.dependencies import get_snapshot_job, get_snapshot_store
from mashboard.settings import AppSettings, config_error, get_settings

from .schemas import SnapshotJobSummary
from .service import SnapshotJob
from .store import SnapshotNotFoundError, SnapshotStore, SnapshotStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["snapshots"])


def require_cron_secret(
    authorization: Optional[str] = Header(None),
    settings: AppSettings = Depends(get_settings),
) -> None:
    """
    Authorization: Bearer <CRON_SECRET> を検証する。

    CRON_SECRET 未設定時は誰でも実行できてしまわないよう 500 にする。
    """
    if not settings.cron.secret:
        logger.error("CRON_SECRET is not set; refusing to run scheduled job.")
        raise config_error()

    expected = f"Bearer {settings.cron.secret}"
    if not authorization or not hmac.compare_digest(
        authorization.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@router.get(
    "/history",
    summary="保存済みスナップショットを取得",
    responses={404: {"description": "Snapshot not found"}},
)
async def get_history(
    group_id: Optional[str] = Query(None, alias="groupId"),
    snapshot_date: Optional[str] = Query(None, alias="date"),
    store: SnapshotStore = Depends(get_snapshot_store),
) -> Response:
    """
    (groupId, date) に完全一致するスナップショットを、保存時のバイト列のまま返す。

    - パラメータ不足・形式不正 → 400
    - 存在しない → 404（ライブデータへのフォールバックはしない）
    - ストアの想定外エラー → 500
    """
    if not group_id or not snapshot_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing parameters")

    try:
        payload = await store.read(group_id, snapshot_date)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except SnapshotNotFoundError as exc:
        logger.info("Snapshot not found: %s", exc.key)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        ) from exc
    except SnapshotStoreError as exc:
        logger.error("History API error: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc

    return Response(content=payload, media_type="application/json")


@router.get(
    "/cron/storyteller",
    response_model=SnapshotJobSummary,
    summary="全プロジェクトのリーダーボードを日次スナップショットとして保存",
)
async def run_storyteller_snapshot(
    _: None = Depends(require_cron_secret),
    job: SnapshotJob = Depends(get_snapshot_job),
) -> SnapshotJobSummary:
    """
    スケジューラ（Vercel Cron など）から呼ばれる日次ジョブ。

    グループ単位の失敗はレスポンスの failures に入り、ステータスは 200 のまま。
    """
    try:
        return await job.run()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Snapshot job crashed.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Snapshot job failed: {exc}",
        ) from exc
