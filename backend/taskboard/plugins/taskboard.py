# backend/taskboard/plugins/taskboard.py

"""
タスクボード用コマンド群。

- taskboard:create task to ${prompt}
    自然文からタイトル・アイコン・説明文を生成してタスクページを作る
- taskboard:create task with ${title} ${description} ${tasks}
    指定されたタイトル・説明・コマンド一覧からタスクページを作る
- taskboard:import command ${command}
    登録済みコマンドの定義をコマンドカタログにページとして取り込む
- taskboard:import all commands
    登録済みコマンドをすべて取り込む（最初の失敗で中断）
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from taskboard.agent.registry import CommandNotFoundError, CommandRegistry
from taskboard.agent.schemas import CommandDefinition, CommandResult, CommandType
from taskboard.ai.client import TextCompletionError, TextGenerator
from taskboard.automation.config import WorkerSettings
from taskboard.notifications.service import CompositeNotificationService
from taskboard.notion import blocks
from taskboard.notion.client import NotionClientError
from taskboard.notion.service import NotionService

logger = logging.getLogger(__name__)

NO_DESCRIPTION_TEXT = "No description provided for this command"
NO_REQUIREMENTS_TEXT = "No requirements to run this command"
BUILT_IN_COMMAND_TEXT = "This is an in-built command"
UNSURE_TASKS_COMMENT = "Wasn't sure what tasks to list for this one!"

# テキスト生成のプロンプトと (max_tokens, temperature)
TITLE_PROMPT = "Provide a very short title for the task: {prompt}"
ICON_PROMPT = "Provide a single emoji for the task: {title}"
DESCRIPTION_PROMPT = "Provide a 1-2 sentence description for the task: {prompt}"
TITLE_PARAMS = (20, 0.2)
ICON_PARAMS = (10, 0.5)
DESCRIPTION_PARAMS = (40, 0.4)


class TaskboardPlugin:
    name = "taskboard"
    description = "Schedule and monitor agent tasks on a Notion task board"
    version = "0.1.0"

    def __init__(
        self,
        notion: NotionService,
        registry: CommandRegistry,
        text_generator: TextGenerator,
        settings: WorkerSettings,
        *,
        notification_service: Optional[CompositeNotificationService] = None,
    ) -> None:
        self._notion = notion
        self._registry = registry
        self._text_generator = text_generator
        self._settings = settings
        self._notifications = notification_service

        self._commands: List[CommandDefinition] = [
            CommandDefinition(
                format="taskboard:create task to ${prompt}",
                type=CommandType.FUNCTION,
                function=self.create_task_from_prompt,
            ),
            CommandDefinition(
                format="taskboard:create task with ${title} ${description} ${tasks}",
                type=CommandType.FUNCTION,
                function=self.create_task,
            ),
            CommandDefinition(
                format="taskboard:import command ${command}",
                type=CommandType.FUNCTION,
                function=self.import_command,
            ),
            CommandDefinition(
                format="taskboard:import all commands",
                type=CommandType.FUNCTION,
                function=self.import_all_commands,
            ),
        ]

    def get_commands(self) -> List[CommandDefinition]:
        return self._commands

    def get_is_enabled(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # タスク作成
    # ------------------------------------------------------------------
    async def create_task_from_prompt(self, args: Dict[str, str]) -> CommandResult:
        prompt = args.get("prompt")
        if not prompt:
            return CommandResult.fail("No prompt provided")

        try:
            title = (
                await self._text_generator.generate_text(
                    TITLE_PROMPT.format(prompt=prompt), *TITLE_PARAMS
                )
            ).strip()
            icon_response = await self._text_generator.generate_text(
                ICON_PROMPT.format(title=title), *ICON_PARAMS
            )
            description = (
                await self._text_generator.generate_text(
                    DESCRIPTION_PROMPT.format(prompt=prompt), *DESCRIPTION_PARAMS
                )
            ).strip()
        except TextCompletionError as exc:
            logger.warning("Failed to generate task details: %s", exc)
            return CommandResult.fail(f"Failed to generate task details: {exc}")

        return await self.create_task(
            {
                "title": title,
                "icon": blocks.first_glyph(icon_response),
                "description": description,
                "tasks": prompt,
            }
        )

    async def create_task(self, args: Dict[str, str]) -> CommandResult:
        if not args.get("title"):
            return CommandResult.fail("No title provided")
        if not args.get("description"):
            return CommandResult.fail("No description provided")
        if not args.get("tasks"):
            return CommandResult.fail("No tasks provided")

        title = args["title"]
        icon = args.get("icon") or blocks.DEFAULT_PAGE_ICON
        description = args["description"].replace("\\n", "\n")

        children = [
            blocks.heading("Description"),
            blocks.paragraph(description),
            blocks.heading("Task List"),
        ]

        try:
            executables = self._registry.parse_command_input(args["tasks"])
        except CommandNotFoundError as exc:
            logger.info("Could not derive a checklist for %r: %s", title, exc)
            return await self._create_task_without_checklist(title, icon, children)

        todos: List[blocks.Block] = []
        try:
            for executable in executables:
                url = await self._catalog_url(executable.command.format)
                todos.append(
                    blocks.to_do(self._registry.get_command_input_string(executable), url)
                )
        except NotionClientError as exc:
            logger.info("Could not look up catalog pages for %r: %s", title, exc)
            return await self._create_task_without_checklist(title, icon, children)
        children.extend(todos)

        page_id = await self._notion.create_page(
            self._settings.tasks_db,
            title,
            icon,
            children,
            self._settings.name,
        )
        if page_id is None:
            return CommandResult.fail("Failed to create task")
        return CommandResult.ok(f"Task created: {blocks.notion_url(page_id)}")

    async def _create_task_without_checklist(
        self,
        title: str,
        icon: str,
        children: List[blocks.Block],
    ) -> CommandResult:
        children.append(blocks.to_do(""))
        page_id = await self._notion.create_page(
            self._settings.tasks_db,
            title,
            icon,
            children,
            self._settings.name,
        )
        if page_id is None:
            return CommandResult.fail("Failed to create task")

        await self._notion.comment_on_page(page_id, UNSURE_TASKS_COMMENT)
        return CommandResult.ok(f"Task created: {blocks.notion_url(page_id)}")

    async def _catalog_url(self, command_format: str) -> Optional[str]:
        if not self._settings.commands_db:
            return None
        page_id = await self._notion.find_page_by_title(
            self._settings.commands_db,
            command_format,
            raise_errors=True,
        )
        return blocks.notion_url(page_id) if page_id else None

    # ------------------------------------------------------------------
    # コマンドカタログへの取り込み
    # ------------------------------------------------------------------
    async def import_command(self, args: Dict[str, str]) -> CommandResult:
        """
        コマンド定義を 1 件、カタログにページとして作成する。

        重複チェックはしない（再実行すると同じページがもう 1 つできる）。
        """
        if not args.get("command"):
            return CommandResult.fail("No command provided")
        if not self._settings.commands_db:
            return CommandResult.fail("Command catalog database id is not configured")

        command = self._registry.get_command_from_format(args["command"])
        if command is None:
            return CommandResult.fail(f"Command not found: {args['command']}")

        children = [
            blocks.heading("Description"),
            blocks.paragraph(command.description or NO_DESCRIPTION_TEXT),
            blocks.heading("Requirements"),
            blocks.bulleted_list_item(command.requires_application or NO_REQUIREMENTS_TEXT),
            blocks.heading("Actions"),
        ]
        if not command.sequence:
            children.append(blocks.bulleted_list_item(BUILT_IN_COMMAND_TEXT))

        # まずアクション一覧なしでページを作る
        page_id = await self._notion.create_page(
            self._settings.commands_db,
            command.format,
            blocks.COMMAND_PAGE_ICON,
            children,
        )
        if page_id is None:
            return CommandResult.fail(f"Failed to create page for command: {command.format}")

        # 入れ子のアクションは 1 ブロックずつ追加する
        for action in blocks.steps_to_bulleted_list(command.sequence or []):
            if not await self._append_block(page_id, action):
                return CommandResult.fail(f"Failed to add actions for command: {command.format}")

        return CommandResult.ok()

    async def _append_block(self, parent_id: str, block: blocks.Block) -> bool:
        """
        親を children なしで作ってから、子を新しい親の下に順番どおり追加する。
        """
        parent, children = blocks.split_children(block)
        new_block_id = await self._notion.append_to_block(parent_id, [parent])
        if not new_block_id:
            return False

        for child in children:
            if not await self._append_block(new_block_id, child):
                return False
        return True

    async def import_all_commands(self, args: Dict[str, str]) -> CommandResult:
        formats = self._registry.get_all_command_formats()
        for command_format in formats:
            result = await self.import_command({"command": command_format})
            if not result.success:
                return CommandResult.fail(f"Failed to import command: {command_format}")

        message = f"Imported {len(formats)} commands"
        if self._notifications is not None:
            await self._notifications.notify("Import", message)
        return CommandResult.ok(message)
