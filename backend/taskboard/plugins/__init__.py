# backend/taskboard/plugins/__init__.py

"""
CommandRegistry に登録するプラグイン群。

- notion_pages: 任意の Notion ページを操作する汎用コマンド
- taskboard: タスク作成 / コマンドカタログへの取り込み
"""
