# backend/taskboard/automation/poller.py

"""
タスクボードのポーラー。

状態遷移: Idle → Checking → (キューなし: Idle) | (タスクあり: Executing) → Idle

- tick は一定間隔で起動する（前回 tick の所要時間には依存しない）
- 確認・実行中（is_running）の tick は何もしない。同時に実行するタスクは常に 1 件
- 担当者 = ワーカー名 かつ Status = Queued のうち、最終更新が最も新しい 1 件を取る
- 実行前に Status=Running にする（途中でプロセスが落ちても外から分かるように）
- 失敗してもリトライはしない。次の tick でまたキューを確認する
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Set

from taskboard.notion.schemas import TaskStatus
from taskboard.notion.service import NotionService

from .config import WorkerSettings
from .runner import TaskRunner
from .state import WorkerState, get_worker_state

logger = logging.getLogger(__name__)


class TaskPoller:
    def __init__(
        self,
        notion: NotionService,
        runner: TaskRunner,
        settings: WorkerSettings,
        *,
        state: Optional[WorkerState] = None,
    ) -> None:
        if not settings.tasks_db:
            raise ValueError("Task board database id is required")

        self._notion = notion
        self._runner = runner
        self._settings = settings
        self._state = state
        self._ticks: Set[asyncio.Task] = set()

    @property
    def state(self) -> WorkerState:
        return self._state or get_worker_state()

    async def tick(self) -> bool:
        """
        キューを 1 回確認し、タスクがあれば実行する。

        :return: タスクを実行した場合 True
        """
        state = self.state
        if state.is_running:
            logger.debug("Previous tick is still running; skipping")
            return False

        # 最初の await より前にフラグを立てるので、tick 同士が重なることはない
        state.is_running = True
        try:
            tasks = await self._notion.query_queued_tasks(
                self._settings.tasks_db,
                self._settings.name,
            )
            state.last_poll_at = datetime.now(timezone.utc)
            if not tasks:
                return False

            task = tasks[0]
            if task.last_edited_time is not None:
                state.last_edited_time = task.last_edited_time

            logger.info("Picked up task %s (%s)", task.id, task.title)
            await self._notion.update_page_status(task.id, TaskStatus.RUNNING)
            await self._runner.run(task)
            return True
        except Exception as exc:  # noqa: BLE001 - ポーリングは次の tick で継続する
            logger.exception("Unexpected error while polling the task board")
            state.last_error = str(exc) or exc.__class__.__name__
            return False
        finally:
            state.is_running = False

    def _spawn_tick(self) -> None:
        if self.state.is_running:
            return
        task = asyncio.create_task(self.tick())
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)

    async def run_forever(self, *, startup_delay: Optional[float] = None) -> None:
        """
        ポーリングループ。停止するにはこのコルーチンをキャンセルする。

        キャンセル時は実行中のタスクが終わるまで待つ。
        """
        delay = self._settings.startup_delay_seconds if startup_delay is None else startup_delay
        interval = max(0.05, float(self._settings.poll_interval_seconds))

        logger.info(
            "Polling task board %s as %r every %.2fs (first poll in %.1fs)",
            self._settings.tasks_db,
            self._settings.name,
            interval,
            delay,
        )
        try:
            if delay > 0:
                await asyncio.sleep(delay)
            while True:
                self._spawn_tick()
                await asyncio.sleep(interval)
        finally:
            if self._ticks:
                logger.info("Waiting for the running task to finish")
                await asyncio.gather(*self._ticks, return_exceptions=True)
