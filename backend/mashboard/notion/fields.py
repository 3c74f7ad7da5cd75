# backend/mashboard/notion/fields.py

"""
Notion ページのプロパティから値を取り出すヘルパー群。

ワークスペースごとにプロパティ名が揺れる（韓国語 / 英語、スペースの有無など）ため、
論理フィールドごとに「候補名の順序付きリスト」を持ち、先に見つかったものを使う。
型（number / rich_text / title / select など）の違いにもそこそこ寛容にしてあり、
想定外の形は例外にせず None / デフォルト値に倒す。
"""

import re
from datetime import date
from typing import Any, Dict, Optional, Sequence, Tuple

TITLE_FIELDS: Tuple[str, ...] = ("프로젝트", "이름", "Name", "Title", "제목")
GROUP_ID_FIELDS: Tuple[str, ...] = ("GroupID", "Group ID", "그룹ID")
DATE_FIELDS: Tuple[str, ...] = ("날짜", "Date", "Period", "일정")
STATUS_FIELDS: Tuple[str, ...] = ("상태", "Status", "State")
CATEGORY_FIELDS: Tuple[str, ...] = ("분류", "Category")
ASSIGNEE_FIELDS: Tuple[str, ...] = ("담당자", "Person")

# type キーが無いプロパティを判定するときの探索順
_TEXT_SHAPES: Tuple[str, ...] = ("number", "rich_text", "title", "select")

_KOREAN_DATE_RE = re.compile(r"(\d+)\s*월\s*(\d+)\s*일")


def find_property(
    properties: Dict[str, Any],
    candidates: Sequence[str],
) -> Optional[Dict[str, Any]]:
    """
    候補名を順に見て、最初に見つかった（空でない）プロパティを返す。
    """
    if not isinstance(properties, dict):
        return None

    for name in candidates:
        prop = properties.get(name)
        if isinstance(prop, dict) and prop:
            return prop
    return None


def _first_plain_text(items: Any) -> Optional[str]:
    if isinstance(items, list) and items:
        first = items[0]
        if isinstance(first, dict):
            text = first.get("plain_text")
            if isinstance(text, str):
                return text
    return None


def _number_to_text(value: Any) -> Optional[str]:
    # bool は int のサブクラスなので除外する
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _shape_of(prop: Dict[str, Any]) -> Optional[str]:
    prop_type = prop.get("type")
    if isinstance(prop_type, str):
        return prop_type
    for shape in _TEXT_SHAPES:
        if prop.get(shape) is not None:
            return shape
    return None


def extract_text(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    number / rich_text / title / select のいずれの形でも、
    同じ値なら同じ文字列を返す。空文字は None 扱い。
    """
    if not prop:
        return None

    shape = _shape_of(prop)
    text: Optional[str] = None

    if shape == "number":
        text = _number_to_text(prop.get("number"))
    elif shape in ("rich_text", "title"):
        text = _first_plain_text(prop.get(shape))
    elif shape == "select":
        select = prop.get("select")
        if isinstance(select, dict) and isinstance(select.get("name"), str):
            text = select["name"]

    if text is None:
        return None
    text = text.strip()
    return text or None


def extract_name(prop: Optional[Dict[str, Any]], *keys: str) -> Optional[str]:
    """
    status / select / multi_select から name を取り出す。
    keys の順に探し、multi_select は先頭要素を使う。
    """
    if not prop:
        return None

    for key in keys:
        value = prop.get(key)
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, dict):
            name = value.get("name")
            if isinstance(name, str) and name:
                return name
    return None


def extract_person(prop: Optional[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
    """
    people プロパティの先頭ユーザーから (name, avatar_url) を返す。
    """
    if not prop:
        return None, None

    people = prop.get("people")
    if not isinstance(people, list) or not people or not isinstance(people[0], dict):
        return None, None

    person = people[0]
    name = person.get("name") if isinstance(person.get("name"), str) else None
    avatar = person.get("avatar_url") if isinstance(person.get("avatar_url"), str) else None
    return name, avatar


def parse_korean_date(
    text: Optional[str],
    *,
    year: Optional[int] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    "3월 5일 ~ 3월 12일" のようなテキストから (start, end) を ISO 日付で返す。

    - 年は含まれないので year（デフォルト: 今年）を補う
    - 2つ目が無ければ end = start
    - 存在しない日付（2월 30일 など）は None
    """
    if not text:
        return None, None

    matches = _KOREAN_DATE_RE.findall(text)
    if not matches:
        return None, None

    year = year or date.today().year

    def _to_iso(month: str, day: str) -> Optional[str]:
        try:
            return date(year, int(month), int(day)).isoformat()
        except ValueError:
            return None

    start = _to_iso(*matches[0])
    end = _to_iso(*matches[1]) if len(matches) > 1 else start
    return start, end


def extract_date_range(
    prop: Optional[Dict[str, Any]],
    *,
    year: Optional[int] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    date プロパティ、またはテキストで書かれた日付から (start, end) を返す。
    """
    if not prop:
        return None, None

    prop_type = prop.get("type")
    value = prop.get("date")

    if prop_type == "date" or (prop_type is None and isinstance(value, dict)):
        if not isinstance(value, dict):
            return None, None
        start = value.get("start") if isinstance(value.get("start"), str) else None
        end = value.get("end") if isinstance(value.get("end"), str) else None
        return start, end or start

    if prop_type in ("rich_text", "title"):
        text = _first_plain_text(prop.get(prop_type)) or ""
        return parse_korean_date(text, year=year)

    return None, None
