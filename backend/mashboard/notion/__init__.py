# backend/mashboard/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- データベース配下の data source を並列に query してページを集める
- プロパティ名の揺れを吸収して NotionTask に変換する
- メタベースページのブロックツリーを取得する
"""
