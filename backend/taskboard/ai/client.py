# backend/taskboard/ai/client.py

"""
テキスト生成クライアント。

OpenAI 互換の /chat/completions を httpx で呼び出す。
テストや別実装に差し替えられるよう、利用側は TextGenerator プロトコルに依存する。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from .config import TextCompletionSettings, get_text_completion_settings

logger = logging.getLogger(__name__)


class TextCompletionError(RuntimeError):
    """テキスト生成 API 呼び出しの失敗。"""


class TextGenerator(Protocol):
    async def generate_text(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:  # pragma: no cover - Protocol
        ...


class TextCompletionClient:
    """
    OpenAI 互換 API へのテキスト生成クライアント。
    """

    def __init__(
        self,
        settings: Optional[TextCompletionSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or get_text_completion_settings()
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        if not self._settings.api_key:
            raise TextCompletionError("TEXT_COMPLETION_API_KEY is not set.")
        return {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Content-Type": "application/json",
        }

    async def generate_text(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """
        プロンプトに対する生成テキストを返す。

        :raises TextCompletionError: 接続エラー / 4xx・5xx / 想定外のレスポンス形式
        """
        payload: Dict[str, Any] = {
            "model": self._settings.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{self._settings.base_url}/chat/completions",
                    json=payload,
                    headers=self._build_headers(),
                )
        except httpx.RequestError as exc:
            raise TextCompletionError(f"Failed to call text completion API: {exc}") from exc

        if response.status_code // 100 != 2:
            raise TextCompletionError(
                f"Text completion API error: {response.status_code} {response.text}"
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise TextCompletionError("Unexpected text completion response format.") from exc

        if not isinstance(content, str):
            raise TextCompletionError("Unexpected text completion response format.")
        logger.debug("Generated %d chars for prompt %r", len(content), prompt[:40])
        return content
