# backend/taskboard/agent/plugin.py

from __future__ import annotations

from typing import List, Protocol

from .schemas import CommandDefinition


class AgentPlugin(Protocol):
    """
    プラグインの最小インターフェース。

    実装例:
    - NotionPagePlugin: 任意の Notion ページ操作
    - TaskboardPlugin: タスク作成 / コマンドのカタログ取り込み
    """

    name: str
    description: str
    version: str

    def get_commands(self) -> List[CommandDefinition]:  # pragma: no cover - Protocol
        ...

    def get_is_enabled(self) -> bool:  # pragma: no cover - Protocol
        ...
