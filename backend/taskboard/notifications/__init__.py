# backend/taskboard/notifications/__init__.py

"""
通知レイヤ用モジュール群。

コマンド実行中に発生した通知（タイトル＋本文）を、登録済みの Sender に配信する。
デフォルトではログ出力と「実行中タスクへのコメント」の 2 つに配信する。

構成イメージ:
- schemas: 通知メッセージの共通スキーマ
- service: 通知送信インターフェースと実装
- factory: アプリ全体で共有する NotificationService の生成
"""
