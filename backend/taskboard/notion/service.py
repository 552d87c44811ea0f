# backend/taskboard/notion/service.py

"""
NotionClient と内部スキーマをつなぐサービス層。

- すべての呼び出しはクライアント経由でレートリミッタを通る
- NotionClientError はここで捕捉してログに残し、
  作成・検索系は None、更新系は CommandResult(success=False) に変換する
  （呼び出し元に例外を伝播させない）
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from taskboard.agent.schemas import CommandResult

from .blocks import Block, first_glyph, plain_text
from .client import NotionClient, NotionClientError
from .schemas import (
    PROPERTY_ASSIGN,
    PROPERTY_STATUS,
    PROPERTY_TITLE,
    TaskPage,
    TaskStatus,
    TodoItem,
)

logger = logging.getLogger(__name__)


def _normalize_id(value: Optional[str]) -> str:
    return (value or "").replace("-", "").lower()


def _title_property(title: str) -> Dict[str, Any]:
    return {"title": [{"text": {"content": title}}]}


def _extract_title(prop: Dict[str, Any]) -> Optional[str]:
    """
    Notion の title プロパティからプレーンテキストを抽出する。
    """
    items = prop.get("title")
    if isinstance(items, list) and items:
        return plain_text(items)
    return None


def _extract_option_name(prop: Dict[str, Any], key: str) -> Optional[str]:
    """
    select / status プロパティから name を抽出する。
    """
    option = prop.get(key)
    if isinstance(option, dict):
        name = option.get("name")
        if isinstance(name, str):
            return name
    return None


def _extract_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_task_page(page: Dict[str, Any]) -> TaskPage:
    properties: Dict[str, Any] = page.get("properties", {}) or {}
    return TaskPage(
        id=page.get("id", ""),
        title=_extract_title(properties.get(PROPERTY_TITLE, {}) or {}),
        assignee=_extract_option_name(properties.get(PROPERTY_ASSIGN, {}) or {}, "select"),
        status=_extract_option_name(properties.get(PROPERTY_STATUS, {}) or {}, "status"),
        last_edited_time=_extract_timestamp(page.get("last_edited_time")),
    )


class NotionService:
    """
    NotionClient を利用して、アプリケーション層に対して
    失敗しない（例外を投げない）操作を提供するサービス。
    """

    def __init__(self, client: Optional[NotionClient] = None) -> None:
        self.client = client or NotionClient()

    async def create_page(
        self,
        database_id: str,
        title: str,
        icon: str = "",
        children: Optional[List[Block]] = None,
        assign_name: str = "",
    ) -> Optional[str]:
        """
        データベースにページを作成し、ページ ID を返す。失敗時は None。

        icon は先頭の 1 文字（書記素）だけを使う。
        """
        properties: Dict[str, Any] = {"title": _title_property(title)}
        if assign_name:
            properties[PROPERTY_ASSIGN] = {"select": {"name": assign_name}}

        body: Dict[str, Any] = {
            "parent": {"database_id": database_id},
            "properties": properties,
            "children": children or [],
        }
        glyph = first_glyph(icon)
        if glyph:
            body["icon"] = {"type": "emoji", "emoji": glyph}

        try:
            page = await self.client.create_page(body)
        except NotionClientError as exc:
            logger.warning("Failed to create page %r: %s", title, exc)
            return None

        page_id = page.get("id")
        logger.info("Page created with ID: %s", page_id)
        return page_id

    async def append_to_block(self, block_id: str, children: List[Block]) -> Optional[str]:
        """
        ブロックに子ブロックを追加し、最初に作成されたブロックの ID を返す。
        """
        try:
            results = await self.client.append_block_children(block_id, children)
        except NotionClientError as exc:
            logger.warning("Failed to append to block %s: %s", block_id, exc)
            return None

        if not results:
            logger.warning("Unexpected empty result when appending to block %s", block_id)
            return None
        return results[0].get("id")

    async def _update_page(self, page_id: str, body: Dict[str, Any], action: str) -> CommandResult:
        try:
            await self.client.update_page(page_id, body)
        except NotionClientError as exc:
            logger.warning("Failed to %s for page %s: %s", action, page_id, exc)
            return CommandResult.fail(str(exc))
        return CommandResult.ok()

    async def rename_page(self, page_id: str, title: str) -> CommandResult:
        return await self._update_page(
            page_id,
            {"properties": {"title": _title_property(title)}},
            "rename",
        )

    async def update_page_status(self, page_id: str, status: str | TaskStatus) -> CommandResult:
        name = status.value if isinstance(status, TaskStatus) else status
        return await self._update_page(
            page_id,
            {"properties": {PROPERTY_STATUS: {"status": {"name": name}}}},
            f"set status {name!r}",
        )

    async def archive_page(self, page_id: str) -> CommandResult:
        return await self._update_page(page_id, {"archived": True}, "archive")

    async def comment_on_page(self, page_id: str, comment: str) -> CommandResult:
        try:
            await self.client.create_comment(page_id, comment)
        except NotionClientError as exc:
            logger.warning("Failed to comment on page %s: %s", page_id, exc)
            return CommandResult.fail(str(exc))
        return CommandResult.ok()

    async def find_page_by_title(
        self,
        database_id: str,
        title: str,
        *,
        raise_errors: bool = False,
    ) -> Optional[str]:
        """
        タイトル完全一致でページを探し、最初の ID を返す。

        別データベースの同名ページを拾わないよう、親データベース ID も照合する。
        raise_errors=True の場合、API エラーは None にせず NotionClientError のまま投げる
        （「見つからない」と「検索に失敗した」を呼び出し元で区別するため）。
        """
        try:
            pages = await self.client.query_database(
                database_id,
                filter={"property": PROPERTY_TITLE, "title": {"equals": title}},
                page_size=10,
            )
        except NotionClientError as exc:
            logger.warning("Failed to look up page %r: %s", title, exc)
            if raise_errors:
                raise
            return None

        expected = _normalize_id(database_id)
        for page in pages:
            parent = page.get("parent") or {}
            if parent.get("type") != "database_id":
                continue
            if _normalize_id(parent.get("database_id")) == expected:
                return page.get("id")
        return None

    async def query_queued_tasks(
        self,
        database_id: str,
        assignee: str,
        *,
        limit: int = 10,
    ) -> List[TaskPage]:
        """
        担当者 = assignee かつ Status = Queued のタスクを、最終更新が新しい順に返す。
        """
        try:
            pages = await self.client.query_database(
                database_id,
                filter={
                    "and": [
                        {"property": PROPERTY_ASSIGN, "select": {"equals": assignee}},
                        {"property": PROPERTY_STATUS, "status": {"equals": TaskStatus.QUEUED.value}},
                    ]
                },
                sorts=[{"timestamp": "last_edited_time", "direction": "descending"}],
                page_size=limit,
            )
        except NotionClientError as exc:
            logger.warning("Failed to query queued tasks: %s", exc)
            return []

        return [_to_task_page(page) for page in pages]

    async def list_todos(self, page_id: str) -> Optional[List[TodoItem]]:
        """
        ページ直下の to_do ブロックを、ページ上の並び順で返す。失敗時は None。
        """
        try:
            blocks = await self.client.list_block_children(page_id, page_size=100)
        except NotionClientError as exc:
            logger.warning("Failed to list checklist of page %s: %s", page_id, exc)
            return None

        todos: List[TodoItem] = []
        for block in blocks:
            if block.get("type") != "to_do":
                continue
            body = block.get("to_do") or {}
            todos.append(
                TodoItem(
                    id=block.get("id", ""),
                    text=plain_text(body.get("rich_text")),
                    checked=bool(body.get("checked")),
                )
            )
        return todos

    async def check_todo(self, block_id: str) -> CommandResult:
        try:
            await self.client.update_block(block_id, {"to_do": {"checked": True}})
        except NotionClientError as exc:
            logger.warning("Failed to check to-do %s: %s", block_id, exc)
            return CommandResult.fail(str(exc))
        return CommandResult.ok()
