# backend/mashboard/snapshots/config.py

"""
スナップショット保存まわりの設定値読み出しモジュール。
"""

from dataclasses import dataclass
from typing import Optional

from mashboard.utils.config import get_env, get_env_bool, get_env_float

SNAPSHOT_BACKENDS = ("filesystem", "blob")


@dataclass(frozen=True)
class SnapshotSettings:
    """
    スナップショットストアの設定値。

    - backend=filesystem: directory 配下に history/... を書き出す（デフォルト）
    - backend=blob: Vercel Blob に保存する（BLOB_READ_WRITE_TOKEN 必須）
    """

    backend: str = "filesystem"
    directory: str = "./data"
    blob_token: Optional[str] = None
    blob_api_url: str = "https://blob.vercel-storage.com"
    allow_overwrite: bool = True
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class CronSettings:
    """
    スケジュールジョブ（/api/cron/...）用の設定値。
    """

    secret: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.secret)


def get_snapshot_settings() -> SnapshotSettings:
    """
    任意:
      - SNAPSHOT_BACKEND          (filesystem | blob, デフォルト filesystem)
      - SNAPSHOT_DIR              (デフォルト ./data)
      - BLOB_READ_WRITE_TOKEN     (backend=blob の場合は必須)
      - BLOB_API_URL
      - SNAPSHOT_ALLOW_OVERWRITE  (デフォルト true: 同日の再実行は上書き)
    """
    backend = (get_env("SNAPSHOT_BACKEND", required=False) or "filesystem").lower()
    if backend not in SNAPSHOT_BACKENDS:
        raise RuntimeError(
            f"Invalid SNAPSHOT_BACKEND: {backend!r} (expected one of {SNAPSHOT_BACKENDS})"
        )

    blob_token = get_env("BLOB_READ_WRITE_TOKEN", required=False)
    if backend == "blob" and not blob_token:
        raise RuntimeError("SNAPSHOT_BACKEND=blob requires BLOB_READ_WRITE_TOKEN.")

    return SnapshotSettings(
        backend=backend,
        directory=get_env("SNAPSHOT_DIR", default="./data", required=False),
        blob_token=blob_token,
        blob_api_url=get_env(
            "BLOB_API_URL",
            default="https://blob.vercel-storage.com",
            required=False,
        ).rstrip("/"),
        allow_overwrite=get_env_bool("SNAPSHOT_ALLOW_OVERWRITE", default=True),
        timeout_seconds=get_env_float("SNAPSHOT_TIMEOUT_SECONDS", default=10.0),
    )


def get_cron_settings() -> CronSettings:
    """
    シークレット（任意。未設定の場合 cron エンドポイントは 500 を返す）:
      - CRON_SECRET
    """
    return CronSettings(secret=get_env("CRON_SECRET", required=False))
