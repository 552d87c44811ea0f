# backend/taskboard/ai/config.py

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from taskboard.utils.config import get_env, get_env_float


@dataclass(frozen=True)
class TextCompletionSettings:
    """
    OpenAI 互換の chat/completions API 用の設定値。
    """

    api_key: Optional[str]
    base_url: str
    model: str
    timeout_seconds: float = 30.0


@lru_cache()
def get_text_completion_settings() -> TextCompletionSettings:
    """
    テキスト生成の設定値を環境変数から読み出す。

    任意:
      - TEXT_COMPLETION_API_KEY          （未設定時はタスク自動生成が失敗扱いになる）
      - TEXT_COMPLETION_BASE_URL         （デフォルト https://api.openai.com/v1）
      - TEXT_COMPLETION_MODEL            （デフォルト gpt-4o-mini）
      - TEXT_COMPLETION_TIMEOUT_SECONDS  （デフォルト 30秒）
    """
    base_url = get_env(
        "TEXT_COMPLETION_BASE_URL",
        default="https://api.openai.com/v1",
        required=False,
    )
    return TextCompletionSettings(
        api_key=get_env("TEXT_COMPLETION_API_KEY", required=False),
        base_url=base_url.rstrip("/"),
        model=get_env("TEXT_COMPLETION_MODEL", default="gpt-4o-mini", required=False),
        timeout_seconds=get_env_float("TEXT_COMPLETION_TIMEOUT_SECONDS", 30.0),
    )
