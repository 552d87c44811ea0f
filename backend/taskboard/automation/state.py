# backend/taskboard/automation/state.py

"""
ワーカーのシンプルな状態管理モジュール。

- アプリ全体で共有する WorkerState インスタンスを提供
- テスト時にリセットできるようにする

ポーラー・通知 Sender・ステータス API が同じインスタンスを参照する。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .schemas import WorkerStatus


@dataclass
class WorkerState:
    is_running: bool = False
    current_task_id: Optional[str] = None
    last_edited_time: Optional[datetime] = None
    last_poll_at: Optional[datetime] = None
    last_error: Optional[str] = None
    tasks_completed: int = 0
    tasks_failed: int = 0

    def snapshot(self, name: str) -> WorkerStatus:
        return WorkerStatus(
            name=name,
            is_running=self.is_running,
            current_task_id=self.current_task_id,
            last_edited_time=self.last_edited_time,
            last_poll_at=self.last_poll_at,
            last_error=self.last_error,
            tasks_completed=self.tasks_completed,
            tasks_failed=self.tasks_failed,
        )


_worker_state: Optional[WorkerState] = None


def get_worker_state() -> WorkerState:
    """
    共有の WorkerState インスタンスを返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _worker_state
    if _worker_state is None:
        _worker_state = WorkerState()
    return _worker_state


def reset_state() -> None:
    """
    テスト用に WorkerState のシングルトン状態をリセットする。
    """
    global _worker_state
    _worker_state = None
