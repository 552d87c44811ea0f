# backend/taskboard/notifications/schemas.py

"""
通知メッセージの共通スキーマ定義。
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class NotificationSeverity(str, Enum):
    """
    通知の重要度。ログ出力時のレベルに対応する。
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class NotificationMessage(BaseModel):
    """
    通知 1件分の情報。

    body はプレーンテキスト想定。
    """

    title: str = Field(..., description="短いタイトル。")
    body: str = Field(..., description="本文。プレーンテキスト想定。")
    severity: NotificationSeverity = Field(
        NotificationSeverity.INFO,
        description="通知の重要度。",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="通知生成時刻（UTC）。",
    )
