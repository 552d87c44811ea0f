# backend/taskboard/notion/schemas.py

"""
タスクボード（Notion データベース）のレコードを内部で扱うためのスキーマ定義。

プロパティ名は Notion 側のデータベース設定と一致させる:
- Name   (title)  : タスク名
- Assign (select) : 担当ワーカー名
- Status (status) : Queued / Running / Done / Issue
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

PROPERTY_TITLE = "Name"
PROPERTY_ASSIGN = "Assign"
PROPERTY_STATUS = "Status"


class TaskStatus(str, Enum):
    """タスクボードの Status 値。"""

    QUEUED = "Queued"
    RUNNING = "Running"
    DONE = "Done"
    ISSUE = "Issue"


class TaskPage(BaseModel):
    """
    タスクボードの 1 レコード。

    作成は人間（またはタスク作成コマンド）が行い、このシステムは削除しない。
    """

    id: str = Field(..., description="Notion ページ ID")
    title: Optional[str] = Field(None, description="Name プロパティ")
    assignee: Optional[str] = Field(None, description="Assign（select 値）")
    status: Optional[str] = Field(None, description="Status（status 値）")
    last_edited_time: Optional[datetime] = Field(
        None,
        description="Notion の last_edited_time。ポーリングは新しい順に取得する。",
    )


class TodoItem(BaseModel):
    """
    タスクページ内のチェックリスト項目（to_do ブロック）。

    text がそのままコマンド文字列になる。このシステムが変更するのは checked のみ。
    """

    id: str
    text: str = ""
    checked: bool = False
