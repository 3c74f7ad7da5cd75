"""
ストーリーテラー・リーダーボード連携モジュール。

- config: API のベース URL, ルックバック期間, limit, タイムアウト
- schemas: channels / series の Pydantic モデル
- client: timeseries-group API への HTTP クライアント
- service: グループ x ルックバックの並列取得
"""

from .config import LeaderboardSettings, get_leaderboard_settings  # noqa: F401
from .service import LeaderboardService  # noqa: F401
from .schemas import ChannelEntry, SeriesPoint, parse_channels  # noqa: F401
