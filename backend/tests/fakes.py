# backend/tests/fakes.py

from __future__ import annotations

import asyncio
import itertools
from typing import Dict, List, Optional, Tuple

from taskboard.agent.schemas import CommandResult
from taskboard.notion.blocks import split_children
from taskboard.notion.client import NotionAPIError
from taskboard.notion.schemas import TaskPage, TaskStatus, TodoItem


class FakeNotionService:
    """
    In-memory stand-in for NotionService.

    Every mutating call is appended to `calls` so tests can assert ordering.
    """

    def __init__(
        self,
        *,
        queued: Optional[List[TaskPage]] = None,
        todos: Optional[Dict[str, List[TodoItem]]] = None,
        catalog: Optional[Dict[str, str]] = None,
    ) -> None:
        self.queued = list(queued or [])
        self.todos = {k: list(v) for k, v in (todos or {}).items()}
        self.catalog = dict(catalog or {})
        self.calls: List[Tuple] = []
        self.statuses: Dict[str, str] = {}
        self.comments: Dict[str, List[str]] = {}
        self.created_pages: List[Dict] = []
        self.appended: List[Tuple[str, Dict]] = []
        self.query_count = 0
        self.fail_create = False
        self.fail_find = False
        self.fail_append_after: Optional[int] = None
        self._ids = itertools.count(1)

    async def query_queued_tasks(self, database_id: str, assignee: str, *, limit: int = 10):
        self.query_count += 1
        self.calls.append(("query", database_id, assignee))
        await asyncio.sleep(0)
        return [t for t in self.queued if self.statuses.get(t.id, t.status) == TaskStatus.QUEUED.value]

    async def update_page_status(self, page_id: str, status) -> CommandResult:
        name = status.value if isinstance(status, TaskStatus) else status
        self.calls.append(("status", page_id, name))
        self.statuses[page_id] = name
        return CommandResult.ok()

    async def comment_on_page(self, page_id: str, comment: str) -> CommandResult:
        self.calls.append(("comment", page_id, comment))
        self.comments.setdefault(page_id, []).append(comment)
        return CommandResult.ok()

    async def list_todos(self, page_id: str):
        self.calls.append(("list", page_id))
        if page_id not in self.todos:
            return None
        return [t.model_copy() for t in self.todos[page_id]]

    async def check_todo(self, block_id: str) -> CommandResult:
        self.calls.append(("check", block_id))
        for items in self.todos.values():
            for index, item in enumerate(items):
                if item.id == block_id:
                    items[index] = item.model_copy(update={"checked": True})
        return CommandResult.ok()

    async def create_page(self, database_id, title, icon="", children=None, assign_name=""):
        self.calls.append(("create", database_id, title))
        if self.fail_create:
            return None
        page_id = f"page-{next(self._ids)}"
        self.created_pages.append(
            {
                "id": page_id,
                "database_id": database_id,
                "title": title,
                "icon": icon,
                "children": list(children or []),
                "assign": assign_name,
            }
        )
        return page_id

    async def append_to_block(self, block_id: str, children: List[Dict]):
        if self.fail_append_after is not None and len(self.appended) >= self.fail_append_after:
            return None
        block = children[0]
        _, nested = split_children(block)
        assert not nested, "children must be appended one level at a time"
        new_id = f"block-{next(self._ids)}"
        self.appended.append((block_id, block))
        self.calls.append(("append", block_id, new_id))
        return new_id

    async def find_page_by_title(self, database_id: str, title: str, *, raise_errors: bool = False):
        self.calls.append(("find", database_id, title))
        if self.fail_find:
            if raise_errors:
                raise NotionAPIError("Notion API error: 500", status_code=500)
            return None
        return self.catalog.get(title)

    async def rename_page(self, page_id: str, title: str) -> CommandResult:
        self.calls.append(("rename", page_id, title))
        return CommandResult.ok()

    async def archive_page(self, page_id: str) -> CommandResult:
        self.calls.append(("archive", page_id))
        return CommandResult.ok()


class FakeCommandRunner:
    """
    Records dispatched commands and answers from a scripted table.

    Unknown commands succeed with no message.
    """

    def __init__(self, results: Optional[Dict[str, CommandResult]] = None) -> None:
        self.results = dict(results or {})
        self.commands: List[str] = []
        self.gate: Optional[asyncio.Event] = None
        self.started = asyncio.Event()

    async def run_commands(self, commands: List[str]) -> CommandResult:
        self.commands.extend(commands)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        return self.results.get(commands[-1], CommandResult.ok())


class FakeTextGenerator:
    def __init__(self, responses: List[str]) -> None:
        self.responses = list(responses)
        self.calls: List[Tuple[str, int, float]] = []

    async def generate_text(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.calls.append((prompt, max_tokens, temperature))
        return self.responses.pop(0)
