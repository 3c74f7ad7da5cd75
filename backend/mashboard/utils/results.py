# backend/mashboard/utils/results.py

"""
複数ソースからの集約結果を表現する共通の型。

外部 API をファンアウトで呼び出す処理（Notion の data source 群、
グループ別リーダーボードなど）は、一部が失敗しても残りを返す。
失敗したソースは黙って捨てずに failures に記録し、
呼び出し側が「部分的なデータで良いか」を判断できるようにする。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class SourceFailure(BaseModel):
    """
    失敗したソース 1件分の情報。
    """

    source: str = Field(..., description="失敗したソースの識別子（data source ID, groupId など）")
    error: str = Field(..., description="エラーメッセージ")


@dataclass
class PartialResult(Generic[T]):
    """
    成功分の items と、失敗したソースの一覧を併せ持つ結果オブジェクト。
    """

    items: List[T] = field(default_factory=list)
    failures: List[SourceFailure] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """失敗したソースが 1件もないかどうか。"""
        return not self.failures

    @property
    def is_partial(self) -> bool:
        """成功分と失敗分が混在しているかどうか。"""
        return bool(self.items) and bool(self.failures)

    def add_failure(self, source: str, error: object) -> None:
        self.failures.append(SourceFailure(source=source, error=str(error)))
