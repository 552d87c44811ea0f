# backend/taskboard/automation/runner.py

"""
タスク 1 件分の実行ロジック。

- チェックリスト（to_do ブロック）をページ上の順番で読み出す
- 完了済みの項目はスキップ
- 未完了の項目をコマンドとして実行し、成功したらチェックを付ける
- 失敗したら Status=Issue にしてコメントを残し、残りの項目は実行しない
  （完了済み項目のロールバックは行わない）
- すべて成功したら Status=Done にして完了コメントを残す
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from taskboard.agent.schemas import CommandResult
from taskboard.notion.blocks import normalize_quotes
from taskboard.notion.schemas import TaskPage, TaskStatus
from taskboard.notion.service import NotionService

from .state import WorkerState, get_worker_state

logger = logging.getLogger(__name__)

COMPLETED_COMMENT = "Task completed successfully"


class CommandRunner(Protocol):
    """コマンド文字列を実行して CommandResult を返すもの（CommandRegistry など）。"""

    async def run_commands(self, commands: List[str]) -> CommandResult:  # pragma: no cover - Protocol
        ...


def build_failure_comment(command: str, message: Optional[str]) -> str:
    return f"Failed to complete the following command:\n{command}\n\n{message or ''}".rstrip()


class TaskRunner:
    """
    タスクページのチェックリストを順に実行するランナー。
    """

    def __init__(
        self,
        notion: NotionService,
        commands: CommandRunner,
        *,
        state: Optional[WorkerState] = None,
    ) -> None:
        self._notion = notion
        self._commands = commands
        self._state = state

    @property
    def state(self) -> WorkerState:
        return self._state or get_worker_state()

    async def run(self, task: TaskPage) -> CommandResult:
        """
        タスクを実行し、最終的な CommandResult を返す。

        実行中は WorkerState.current_task_id にタスク ID を入れておく
        （通知をこのタスクへのコメントとして転送するため）。
        """
        state = self.state
        state.current_task_id = task.id
        try:
            return await self._run(task)
        finally:
            state.current_task_id = None

    async def _run(self, task: TaskPage) -> CommandResult:
        todos = await self._notion.list_todos(task.id)
        if todos is None:
            message = "Failed to read the task list from Notion"
            await self._notion.update_page_status(task.id, TaskStatus.ISSUE)
            await self._notion.comment_on_page(task.id, message)
            self.state.tasks_failed += 1
            return CommandResult.fail(message)

        final_result = CommandResult.ok()

        for todo in todos:
            if todo.checked:
                continue

            command = normalize_quotes(todo.text)
            final_result = await self._dispatch(command)

            if final_result.success:
                logger.info('Command "%s" resolved successfully', command)
                await self._notion.check_todo(todo.id)
                continue

            logger.warning('Command "%s" failed: %s', command, final_result.message)
            await self._notion.update_page_status(task.id, TaskStatus.ISSUE)
            await self._notion.comment_on_page(
                task.id,
                build_failure_comment(command, final_result.message),
            )
            self.state.tasks_failed += 1
            return final_result

        await self._notion.update_page_status(task.id, TaskStatus.DONE)
        if final_result.message:
            await self._notion.comment_on_page(task.id, final_result.message)
        await self._notion.comment_on_page(task.id, COMPLETED_COMMENT)
        self.state.tasks_completed += 1
        logger.info("Task %s completed", task.id)
        return final_result

    async def _dispatch(self, command: str) -> CommandResult:
        try:
            return await self._commands.run_commands([command])
        except Exception as exc:  # noqa: BLE001 - 実行系の失敗もタスクの Issue として扱う
            logger.exception('Command runner raised for "%s"', command)
            return CommandResult.fail(str(exc) or exc.__class__.__name__)
