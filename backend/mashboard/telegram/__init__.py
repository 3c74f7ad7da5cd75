"""
Telegram 連携モジュール。

- config: Bot トークンと API ベース URL
- client: Bot API（getChat / getChatMember / getFile）の HTTP クライアント
- service: チャンネル所有者の検証
- router: /api/verify-channel エンドポイント
"""
