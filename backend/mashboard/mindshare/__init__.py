"""
マインドシェア（キムチマップ）API のプロキシモジュール。
"""
