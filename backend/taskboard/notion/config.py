# backend/taskboard/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from taskboard.utils.config import get_env, get_env_float


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_key: str
    api_base_url: str
    api_version: str
    timeout_seconds: float = 10.0
    min_request_interval_seconds: float = 0.5


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    必須:
      - NOTION_API_KEY

    任意:
      - NOTION_API_BASE_URL                  (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION                   (デフォルト: 2022-06-28)
      - NOTION_TIMEOUT_SECONDS               (デフォルト: 10)
      - NOTION_MIN_REQUEST_INTERVAL_SECONDS  (デフォルト: 0.5)
    """
    api_key = get_env("NOTION_API_KEY")

    api_base_url = get_env(
        "NOTION_API_BASE_URL",
        default="https://api.notion.com/v1",
        required=False,
    )
    api_version = get_env(
        "NOTION_API_VERSION",
        default="2022-06-28",
        required=False,
    )

    return NotionConfig(
        api_key=api_key,
        api_base_url=api_base_url.rstrip("/"),
        api_version=api_version,
        timeout_seconds=get_env_float("NOTION_TIMEOUT_SECONDS", 10.0),
        min_request_interval_seconds=get_env_float("NOTION_MIN_REQUEST_INTERVAL_SECONDS", 0.5),
    )


def get_page_database_id() -> Optional[str]:
    """
    汎用ページ操作コマンド（notion:add page ...）の作成先データベース ID。

    NOTION_DATABASE_ID が未設定の場合は None（プラグインは無効になる）。
    """
    return get_env("NOTION_DATABASE_ID", required=False)
