"""
ダッシュボード表示用の派生データ（ツリーマップ・スケジュール・ブロックツリー）。
"""
