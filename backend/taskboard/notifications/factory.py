# backend/taskboard/notifications/factory.py

"""
通知サービスの簡易ファクトリ。

- 初期状態では LoggingNotificationSender のみを登録した CompositeNotificationService を返す。
- タスクへのコメント転送（TaskCommentNotificationSender）は CLI 起動時に登録する。
"""

from __future__ import annotations

from typing import Optional

from .schemas import NotificationMessage, NotificationSeverity
from .service import CompositeNotificationService, LoggingNotificationSender

LOGGING_SENDER_NAME = "logging"
TASK_COMMENT_SENDER_NAME = "taskboard-comment"

_notification_service: Optional[CompositeNotificationService] = None


def get_notification_service() -> CompositeNotificationService:
    """
    アプリ全体で共有する CompositeNotificationService を返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _notification_service
    if _notification_service is None:
        _notification_service = CompositeNotificationService(
            [(LOGGING_SENDER_NAME, LoggingNotificationSender())]
        )
    return _notification_service


def reset_notification_service() -> None:
    """テスト用にシングルトン状態をリセットする。"""
    global _notification_service
    _notification_service = None


__all__ = [
    "NotificationSeverity",
    "NotificationMessage",
    "CompositeNotificationService",
    "LoggingNotificationSender",
    "get_notification_service",
    "reset_notification_service",
    "LOGGING_SENDER_NAME",
    "TASK_COMMENT_SENDER_NAME",
]
