# backend/taskboard/__init__.py

"""
Notion のタスクボードをキューとして使い、チェックリストの各項目を
エージェントのコマンドとして実行するワーカー。
"""

__version__ = "0.1.0"
