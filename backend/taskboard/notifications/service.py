# backend/taskboard/notifications/service.py

"""
通知送信インターフェースと実装。

- NotificationMessage を受け取る非同期 send() インターフェース
- ログ出力のみ行う LoggingNotificationSender
- 実行中タスクにコメントとして転送する TaskCommentNotificationSender
- 名前付きで複数 Sender にファンアウトする CompositeNotificationService
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Protocol, Tuple

from taskboard.automation.state import WorkerState, get_worker_state

from .schemas import NotificationMessage, NotificationSeverity

if TYPE_CHECKING:
    from taskboard.notion.service import NotionService

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    """
    通知送信の最小インターフェース。
    """

    async def send(self, message: NotificationMessage) -> None:  # pragma: no cover - Protocol
        ...


class LoggingNotificationSender:
    """
    NotificationMessage を Python の logger に記録するだけの Sender。
    """

    def __init__(self, logger_: logging.Logger | None = None) -> None:
        self._logger = logger_ or logger

    async def send(self, message: NotificationMessage) -> None:
        """
        通知メッセージを重要度に応じたログレベルで出力する。
        """
        text = f"[{message.severity.value}] {message.title}: {message.body}"

        if message.severity == NotificationSeverity.ERROR:
            self._logger.error(text)
        elif message.severity == NotificationSeverity.WARNING:
            self._logger.warning(text)
        else:
            self._logger.info(text)


class TaskCommentNotificationSender:
    """
    通知を「現在実行中のタスク」にコメントとして転送する Sender。

    実行中のタスクがなければ何もしない。
    """

    def __init__(
        self,
        notion: "NotionService",
        state: Optional[WorkerState] = None,
    ) -> None:
        self._notion = notion
        self._state = state

    async def send(self, message: NotificationMessage) -> None:
        state = self._state or get_worker_state()
        task_id = state.current_task_id
        if not task_id:
            return

        result = await self._notion.comment_on_page(task_id, f"{message.title}: {message.body}")
        if not result.success:
            logger.warning("Failed to relay notification to task %s: %s", task_id, result.message)


class CompositeNotificationService:
    """
    複数の NotificationSender に通知をファンアウトするサービス。

    Sender は名前付きで登録し、同名の登録は置き換える。
    """

    def __init__(self, senders: Iterable[Tuple[str, NotificationSender]] = ()) -> None:
        self._senders: Dict[str, NotificationSender] = dict(senders)

    @property
    def sender_names(self) -> list[str]:
        return list(self._senders)

    def register(self, name: str, sender: NotificationSender) -> None:
        self._senders[name] = sender

    def unregister(self, name: str) -> None:
        self._senders.pop(name, None)

    async def send(self, message: NotificationMessage) -> None:
        """
        受け取った NotificationMessage を全 Sender に送信する。
        """
        for name, sender in list(self._senders.items()):
            try:
                await sender.send(message)
            except Exception:  # noqa: BLE001 - 通知は本処理を止めない
                logger.exception("Notification sender %s failed. Continuing with others.", name)

    async def notify(
        self,
        title: str,
        body: str,
        severity: NotificationSeverity = NotificationSeverity.INFO,
    ) -> None:
        await self.send(NotificationMessage(title=title, body=body, severity=severity))
