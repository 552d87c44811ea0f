# backend/taskboard/automation/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WorkerStatus(BaseModel):
    """
    /worker/status のレスポンス。WorkerState のスナップショット。
    """

    name: str = Field(..., description="ワーカー名（Assign の値）")
    is_running: bool = Field(..., description="タスクを確認・実行中かどうか")
    current_task_id: Optional[str] = Field(None, description="実行中タスクのページ ID")
    last_edited_time: Optional[datetime] = Field(
        None,
        description="最後に取得したタスクの last_edited_time",
    )
    last_poll_at: Optional[datetime] = Field(None, description="最後にキューを確認した時刻（UTC）")
    last_error: Optional[str] = None
    tasks_completed: int = 0
    tasks_failed: int = 0
