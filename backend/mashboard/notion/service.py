# backend/mashboard/notion/service.py

"""
Notion クライアントと内部スキーマをつなぐサービス層。

- データベース配下の全 data source を並列に query して 1つにまとめる
- Notion API レスポンス → NotionTask への変換
- ページのブロックツリー取得（メタベースページ用）
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from mashboard.utils.results import PartialResult

from .client import NotionClient, NotionClientError
from .fields import (
    ASSIGNEE_FIELDS,
    CATEGORY_FIELDS,
    DATE_FIELDS,
    GROUP_ID_FIELDS,
    STATUS_FIELDS,
    TITLE_FIELDS,
    extract_date_range,
    extract_name,
    extract_person,
    extract_text,
    find_property,
)
from .schemas import NotionProject, NotionTask

logger = logging.getLogger(__name__)


def page_to_task(page: Dict[str, Any], *, year: Optional[int] = None) -> NotionTask:
    """
    Notion ページ 1件を NotionTask に変換する。

    プロパティが欠けていても例外にはせず、デフォルト値で埋める。
    """
    properties: Dict[str, Any] = page.get("properties") or {}

    title = extract_text(find_property(properties, TITLE_FIELDS))
    group_id = extract_text(find_property(properties, GROUP_ID_FIELDS))
    date_start, date_end = extract_date_range(
        find_property(properties, DATE_FIELDS),
        year=year,
    )
    status = extract_name(find_property(properties, STATUS_FIELDS), "status", "select")
    category = extract_name(
        find_property(properties, CATEGORY_FIELDS), "select", "multi_select"
    )
    manager, manager_img = extract_person(find_property(properties, ASSIGNEE_FIELDS))

    return NotionTask(
        id=str(page.get("id", "")),
        title=title or "Untitled",
        group_id=group_id,
        date_start=date_start,
        date_end=date_end,
        status=status or "Ready",
        category=category or "General",
        manager=manager or "-",
        manager_img=manager_img,
    )


class NotionAggregator:
    """
    NotionClient を利用して、アプリケーション層に対して
    扱いやすいモデルを返すサービス。

    失敗した data source は PartialResult.failures に記録し、
    残りのソースの結果はそのまま返す（リトライは行わない）。
    """

    def __init__(self, client: NotionClient) -> None:
        self.client = client

    async def fetch_pages(self, database_id: str) -> PartialResult[Dict[str, Any]]:
        """
        データベース配下の全ページを取得する。

        - data_sources があれば、それぞれを並列に query
        - data_sources が空なら旧方式の databases/{id}/query を使う
        - データベース自体のメタデータ取得に失敗した場合は空の結果 + failure
        """
        result: PartialResult[Dict[str, Any]] = PartialResult()

        try:
            database = await self.client.retrieve_database(database_id)
        except NotionClientError as exc:
            logger.error("Failed to retrieve Notion database %s: %s", database_id, exc)
            result.add_failure(database_id, exc)
            return result

        data_sources = [
            source
            for source in database.get("data_sources") or []
            if isinstance(source, dict) and source.get("id")
        ]

        if not data_sources:
            try:
                result.items.extend(await self.client.query_database(database_id))
            except NotionClientError as exc:
                logger.error("Legacy query failed for database %s: %s", database_id, exc)
                result.add_failure(database_id, exc)
            return result

        source_ids = [str(source["id"]) for source in data_sources]
        outcomes = await asyncio.gather(
            *(self.client.query_data_source(source_id) for source_id in source_ids),
            return_exceptions=True,
        )

        for source_id, outcome in zip(source_ids, outcomes):
            if isinstance(outcome, NotionClientError):
                logger.warning("Notion data source %s query failed: %s", source_id, outcome)
                result.add_failure(source_id, outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.items.extend(outcome)

        logger.info(
            "Fetched %d Notion pages from %d data sources (%d failed).",
            len(result.items),
            len(source_ids),
            len(result.failures),
        )
        return result

    async def fetch_tasks(
        self,
        database_id: str,
        *,
        year: Optional[int] = None,
    ) -> PartialResult[NotionTask]:
        """
        ページを NotionTask に変換し、groupId を持つものだけを返す。

        groupId はリーダーボード・スナップショットとの結合キーなので、
        解決できないページは以降の集計対象から外す。
        """
        pages = await self.fetch_pages(database_id)
        tasks: PartialResult[NotionTask] = PartialResult(failures=list(pages.failures))

        for page in pages.items:
            task = page_to_task(page, year=year)
            if not task.group_id:
                logger.debug("Skipping Notion page %s without GroupID.", task.id)
                continue
            tasks.items.append(task)

        return tasks

    async def fetch_projects(self, database_id: str) -> PartialResult[NotionProject]:
        """
        groupId ごとに 1件ずつの (title, groupId) リストを返す。
        同じ groupId が複数ある場合は先に出てきたページのタイトルを使う。
        """
        tasks = await self.fetch_tasks(database_id)
        projects: PartialResult[NotionProject] = PartialResult(failures=list(tasks.failures))

        seen = set()
        for task in tasks.items:
            if task.group_id in seen:
                continue
            seen.add(task.group_id)
            projects.items.append(NotionProject(title=task.title, group_id=task.group_id))

        return projects

    async def fetch_blocks(self, block_id: str) -> List[Dict[str, Any]]:
        """
        ブロックの子要素を取得し、has_children のものは再帰的に children を埋める。

        取得に失敗した階層は空リストとして扱う。
        """
        try:
            blocks = await self.client.list_block_children(block_id)
        except NotionClientError as exc:
            logger.error("Failed to fetch Notion blocks for %s: %s", block_id, exc)
            return []

        async def _with_children(block: Dict[str, Any]) -> Dict[str, Any]:
            if block.get("has_children") and block.get("id"):
                children = await self.fetch_blocks(str(block["id"]))
                return {**block, "children": children}
            return block

        return list(await asyncio.gather(*(_with_children(block) for block in blocks)))
