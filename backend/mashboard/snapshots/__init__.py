"""
リーダーボードの日次スナップショット。

- config: 保存先バックエンド・上書きポリシー・cron 用シークレット
- store: history/{groupId}/{YYYY-MM-DD}.json をキーにした保存 / 読み出し
- service: Notion → リーダーボード → ストアの日次ジョブ
- router: /api/history, /api/cron/storyteller
"""
