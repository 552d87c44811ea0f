# backend/taskboard/plugins/notion_pages.py

"""
Notion ページを操作する汎用コマンド群。

NOTION_DATABASE_ID が設定されている場合のみ有効。
各コマンドは必須引数を先に検証し、足りなければ API を呼ばずに失敗を返す。
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from taskboard.agent.schemas import CommandDefinition, CommandResult, CommandType
from taskboard.notion.blocks import DEFAULT_PAGE_ICON, first_glyph, notion_url
from taskboard.notion.service import NotionService

logger = logging.getLogger(__name__)


class NotionPagePlugin:
    name = "notion"
    description = "Update Notion pages and comments from the agent"
    version = "0.1.0"

    def __init__(self, notion: NotionService, database_id: Optional[str]) -> None:
        self._notion = notion
        self._database_id = database_id or ""

        if not self._database_id:
            logger.info("NOTION_DATABASE_ID is not set; notion page commands are disabled")
            self._commands: List[CommandDefinition] = []
            return

        self._commands = [
            CommandDefinition(
                format="notion:add page called ${title}",
                type=CommandType.FUNCTION,
                function=self.add_page,
            ),
            CommandDefinition(
                format="notion:rename page ${id} to ${title}",
                type=CommandType.FUNCTION,
                function=self.rename_page,
            ),
            CommandDefinition(
                format="notion:update status of page ${id} to ${status}",
                type=CommandType.FUNCTION,
                function=self.update_page_status,
            ),
            CommandDefinition(
                format="notion:comment ${comment} on page ${id}",
                type=CommandType.FUNCTION,
                function=self.comment_on_page,
            ),
            CommandDefinition(
                format="notion:delete page with id ${id}",
                type=CommandType.FUNCTION,
                function=self.delete_page,
                # 誤削除防止
                requires_exact_match=True,
            ),
        ]

    def get_commands(self) -> List[CommandDefinition]:
        return self._commands

    def get_is_enabled(self) -> bool:
        return bool(self._database_id)

    async def add_page(self, args: Dict[str, str]) -> CommandResult:
        if not args.get("title"):
            return CommandResult.fail("Page title not provided")

        icon = first_glyph(args.get("icon") or "") or DEFAULT_PAGE_ICON
        page_id = await self._notion.create_page(self._database_id, args["title"], icon)
        if page_id is None:
            return CommandResult.fail("Failed to create page")

        return CommandResult.ok(f"Page created: {notion_url(page_id)}")

    async def rename_page(self, args: Dict[str, str]) -> CommandResult:
        if not args.get("id"):
            return CommandResult.fail("id not provided")
        if not args.get("title"):
            return CommandResult.fail("title not provided")

        return await self._notion.rename_page(args["id"], args["title"])

    async def update_page_status(self, args: Dict[str, str]) -> CommandResult:
        if not args.get("id"):
            return CommandResult.fail("id not provided")
        if not args.get("status"):
            return CommandResult.fail("status not provided")

        return await self._notion.update_page_status(args["id"], args["status"])

    async def comment_on_page(self, args: Dict[str, str]) -> CommandResult:
        if not args.get("id"):
            return CommandResult.fail("id not provided")
        if not args.get("comment"):
            return CommandResult.fail("comment not provided")

        return await self._notion.comment_on_page(args["id"], args["comment"])

    async def delete_page(self, args: Dict[str, str]) -> CommandResult:
        if not args.get("id"):
            return CommandResult.fail("id not provided")

        return await self._notion.archive_page(args["id"])
