"""
マイランク（連携済みチャンネルの全プロジェクト横断順位）モジュール。
"""
