# backend/mashboard/utils/schemas.py

"""
フロントエンドとの JSON 契約（camelCase）に合わせるための共通ベースモデル。
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Python 側は snake_case、JSON 側は camelCase で扱うベースモデル。

    - 入力は snake_case / camelCase どちらでも受け付ける
    - FastAPI の response_model では alias（camelCase）で出力される
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
