# backend/mashboard/utils/config.py

"""
環境変数読み取り用のユーティリティ。
Notion / リーダーボード / Telegram / スナップショットの各設定で共通利用する。
"""

import os
from typing import List, Optional


class EnvVarMissingError(RuntimeError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> Optional[str]:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value.strip() == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value.strip()


def get_env_int(name: str, default: int) -> int:
    """
    整数値の環境変数を取得するヘルパー。

    不正な値が入っていた場合は起動時に RuntimeError にする。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    try:
        return int(raw)
    except ValueError as exc:  # noqa: TRY003
        raise RuntimeError(
            f"Invalid integer value for env var {name}: {raw!r}"
        ) from exc


def get_env_float(name: str, default: float) -> float:
    """
    小数値の環境変数を取得するヘルパー（タイムアウト秒数など）。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    try:
        value = float(raw)
    except ValueError as exc:  # noqa: TRY003
        raise RuntimeError(
            f"Invalid float value for env var {name}: {raw!r}"
        ) from exc

    if value <= 0:
        raise RuntimeError(f"Env var {name} must be positive: {raw!r}")
    return value


def get_env_bool(name: str, default: bool) -> bool:
    """
    真偽値の環境変数を取得するヘルパー。

    true/1/yes/on と false/0/no/off を受け付ける。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    lowered = raw.lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise RuntimeError(f"Invalid boolean value for env var {name}: {raw!r}")


def get_env_int_list(name: str, default: List[int]) -> List[int]:
    """
    カンマ区切りの整数リスト（例: "7,14,30,90"）を取得するヘルパー。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return list(default)

    values: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            value = int(part)
        except ValueError as exc:  # noqa: TRY003
            raise RuntimeError(
                f"Invalid integer list for env var {name}: {raw!r}"
            ) from exc
        if value <= 0:
            raise RuntimeError(f"Env var {name} must contain positive values: {raw!r}")
        values.append(value)

    if not values:
        raise RuntimeError(f"Env var {name} must not be empty: {raw!r}")
    return values
