# backend/mashboard/snapshots/store.py

"""
スナップショットの保存先（キー・バリューストア）。

キーは history/{groupId}/{YYYY-MM-DD}.json 固定。
読み出しはキーの完全一致のみで、見つからなければ SnapshotNotFoundError。
ライブデータへのフォールバック・インデックス・保持期間の管理は行わない。
同一キーへの同時書き込みは後勝ち。
"""

import logging
import os
import re
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

import httpx

from .config import SnapshotSettings

logger = logging.getLogger(__name__)

_GROUP_ID_RE = re.compile(r"[A-Za-z0-9_-]+")
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

SnapshotDate = Union[str, date]


class SnapshotStoreError(Exception):
    """スナップショットストア全般の基底例外。"""


class SnapshotNotFoundError(SnapshotStoreError):
    """指定キーのスナップショットが存在しない。"""

    def __init__(self, key: str) -> None:
        super().__init__(f"Snapshot not found: {key}")
        self.key = key


class SnapshotExistsError(SnapshotStoreError):
    """上書き禁止の設定で、既存キーに書き込もうとした。"""

    def __init__(self, key: str) -> None:
        super().__init__(f"Snapshot already exists: {key}")
        self.key = key


def normalize_date(snapshot_date: SnapshotDate) -> str:
    """
    date / "YYYY-MM-DD" を "YYYY-MM-DD" にそろえる。

    :raises ValueError: 形式が不正な場合
    """
    if isinstance(snapshot_date, datetime):
        return snapshot_date.date().isoformat()
    if isinstance(snapshot_date, date):
        return snapshot_date.isoformat()
    if not isinstance(snapshot_date, str) or not _DATE_RE.fullmatch(snapshot_date):
        raise ValueError(f"Invalid snapshot date: {snapshot_date!r}")
    return date.fromisoformat(snapshot_date).isoformat()


def validate_group_id(group_id: Optional[str]) -> str:
    """
    groupId が英数字・_・- だけで構成されているか確認する。

    :raises ValueError: 空、またはパス区切りなどを含む場合
    """
    if not group_id or not _GROUP_ID_RE.fullmatch(group_id):
        raise ValueError(f"Invalid group id: {group_id!r}")
    return group_id


def snapshot_key(group_id: str, snapshot_date: SnapshotDate) -> str:
    """
    (groupId, 日付) からストアのキーを組み立てる。

    groupId にパス区切りなどが含まれる場合は ValueError。
    """
    return f"history/{validate_group_id(group_id)}/{normalize_date(snapshot_date)}.json"


class SnapshotStore(Protocol):
    """
    スナップショットストアのインターフェース。

    payload は JSON をシリアライズしたバイト列で、read は書き込んだバイト列をそのまま返す。
    """

    async def write(self, group_id: str, snapshot_date: SnapshotDate, payload: bytes) -> str:
        """保存してアクセス用の URL（またはパス）を返す。"""

    async def read(self, group_id: str, snapshot_date: SnapshotDate) -> bytes:
        """保存済みのバイト列を返す。無ければ SnapshotNotFoundError。"""


class FileSystemSnapshotStore:
    """
    ローカルディレクトリに保存するストア（デフォルト）。

    書き込みは一時ファイル → rename で行うので、読み手が書きかけのファイルを見ることはない。
    """

    def __init__(self, root: Union[str, Path], *, allow_overwrite: bool = True) -> None:
        self.root = Path(root)
        self.allow_overwrite = allow_overwrite

    def _path(self, key: str) -> Path:
        return self.root / key

    async def write(self, group_id: str, snapshot_date: SnapshotDate, payload: bytes) -> str:
        key = snapshot_key(group_id, snapshot_date)
        path = self._path(key)

        if not self.allow_overwrite and path.exists():
            raise SnapshotExistsError(key)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except OSError as exc:
            raise SnapshotStoreError(f"Failed to write snapshot {key}: {exc}") from exc

        logger.info("Saved snapshot %s (%d bytes).", key, len(payload))
        return path.resolve().as_uri()

    async def read(self, group_id: str, snapshot_date: SnapshotDate) -> bytes:
        key = snapshot_key(group_id, snapshot_date)
        path = self._path(key)

        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise SnapshotNotFoundError(key) from exc
        except OSError as exc:
            raise SnapshotStoreError(f"Failed to read snapshot {key}: {exc}") from exc


class BlobSnapshotStore:
    """
    Vercel Blob（REST API）に保存するストア。

    - put: ランダムサフィックス無しの固定パス名で保存
    - read: prefix=キーで一覧し、pathname が完全一致したものだけをダウンロード
    """

    API_VERSION = "7"

    def __init__(
        self,
        token: str,
        *,
        api_url: str = "https://blob.vercel-storage.com",
        allow_overwrite: bool = True,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token
        self._api_url = api_url.rstrip("/")
        self.allow_overwrite = allow_overwrite
        self._timeout = timeout
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "x-api-version": self.API_VERSION,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def write(self, group_id: str, snapshot_date: SnapshotDate, payload: bytes) -> str:
        key = snapshot_key(group_id, snapshot_date)
        headers = {
            **self._build_headers(),
            "x-content-type": "application/json",
            "x-add-random-suffix": "0",
            "x-allow-overwrite": "1" if self.allow_overwrite else "0",
        }

        try:
            async with self._client() as client:
                response = await client.put(
                    f"{self._api_url}/",
                    params={"pathname": key},
                    content=payload,
                    headers=headers,
                )
        except httpx.RequestError as exc:
            raise SnapshotStoreError(f"Failed to upload snapshot {key}: {exc}") from exc

        if not self.allow_overwrite and response.status_code in (400, 409) and "exist" in response.text:
            raise SnapshotExistsError(key)
        if response.status_code // 100 != 2:
            raise SnapshotStoreError(
                f"Blob upload failed for {key}: {response.status_code} {response.text}"
            )

        try:
            body = response.json()
        except ValueError:
            body = {}
        url = body.get("url", "") if isinstance(body, dict) else ""
        logger.info("Saved snapshot %s to blob storage.", key)
        return url

    async def read(self, group_id: str, snapshot_date: SnapshotDate) -> bytes:
        key = snapshot_key(group_id, snapshot_date)

        try:
            async with self._client() as client:
                listing = await client.get(
                    self._api_url,
                    params={"prefix": key, "limit": 1},
                    headers=self._build_headers(),
                )
                if listing.status_code // 100 != 2:
                    raise SnapshotStoreError(
                        f"Blob list failed for {key}: {listing.status_code}"
                    )

                try:
                    listed = listing.json()
                except ValueError as exc:
                    raise SnapshotStoreError(f"Blob list returned non-JSON for {key}") from exc
                blobs = listed.get("blobs") or [] if isinstance(listed, dict) else []
                match = next(
                    (b for b in blobs if isinstance(b, dict) and b.get("pathname") == key),
                    None,
                )
                if match is None or not match.get("url"):
                    raise SnapshotNotFoundError(key)

                content = await client.get(match["url"])
        except httpx.RequestError as exc:
            raise SnapshotStoreError(f"Failed to download snapshot {key}: {exc}") from exc

        if content.status_code == 404:
            raise SnapshotNotFoundError(key)
        if content.status_code // 100 != 2:
            raise SnapshotStoreError(
                f"Failed to fetch blob content for {key}: {content.status_code}"
            )
        return content.content


def build_snapshot_store(
    settings: SnapshotSettings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SnapshotStore:
    """
    設定に応じたスナップショットストアを返す。
    """
    if settings.backend == "blob":
        if not settings.blob_token:
            raise SnapshotStoreError("BLOB_READ_WRITE_TOKEN is not set")
        return BlobSnapshotStore(
            settings.blob_token,
            api_url=settings.blob_api_url,
            allow_overwrite=settings.allow_overwrite,
            timeout=settings.timeout_seconds,
            transport=transport,
        )
    return FileSystemSnapshotStore(settings.directory, allow_overwrite=settings.allow_overwrite)
