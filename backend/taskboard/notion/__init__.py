# backend/taskboard/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- Notion API への HTTP 呼び出し（client）。すべてレートリミッタ経由
- 失敗をログに残し None / CommandResult に変換するサービス層（service）
- ブロック JSON の組み立てヘルパー（blocks）
"""
