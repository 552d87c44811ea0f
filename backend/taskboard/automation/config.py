# backend/taskboard/automation/config.py

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from taskboard.utils.config import get_env, get_env_float


@dataclass(frozen=True)
class WorkerSettings:
    """
    ワーカー関連の設定値。

    name は Assign プロパティの値と一致させる（複数ワーカーの振り分けに使う）。
    """

    name: str = "agent"
    tasks_db: str = ""
    commands_db: str = ""
    poll_interval_seconds: float = 1.0
    startup_delay_seconds: float = 10.0

    def with_overrides(
        self,
        *,
        name: Optional[str] = None,
        tasks_db: Optional[str] = None,
        commands_db: Optional[str] = None,
    ) -> "WorkerSettings":
        """CLI 引数で指定された値を優先した新しい設定を返す。"""
        return replace(
            self,
            name=name or self.name,
            tasks_db=tasks_db or self.tasks_db,
            commands_db=commands_db or self.commands_db,
        )


@lru_cache()
def get_worker_settings() -> WorkerSettings:
    """
    ワーカー設定を環境変数から読み出す。

    任意:
      - TASKBOARD_WORKER_NAME            （デフォルト agent）
      - TASKBOARD_TASKS_DB
      - TASKBOARD_COMMANDS_DB
      - TASKBOARD_POLL_INTERVAL_SECONDS  （デフォルト 1秒）
      - TASKBOARD_STARTUP_DELAY_SECONDS  （デフォルト 10秒）
    """
    return WorkerSettings(
        name=get_env("TASKBOARD_WORKER_NAME", default="agent", required=False),
        tasks_db=get_env("TASKBOARD_TASKS_DB", default="", required=False),
        commands_db=get_env("TASKBOARD_COMMANDS_DB", default="", required=False),
        poll_interval_seconds=get_env_float("TASKBOARD_POLL_INTERVAL_SECONDS", 1.0),
        startup_delay_seconds=get_env_float("TASKBOARD_STARTUP_DELAY_SECONDS", 10.0),
    )
