# backend/taskboard/notion/rate_limiter.py

"""
Notion API 呼び出し用のレートリミッタ。

- 同時実行数 1（常に 1 リクエストだけが実行中）
- 連続するリクエストの開始時刻は min_interval 秒以上あける
- 待ち行列は FIFO（asyncio.Lock の待機順）
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestRateLimiter:
    """外部 API 呼び出しを 1 本の待ち行列に直列化する。"""

    def __init__(
        self,
        min_interval: float = 0.5,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval = max(0.0, float(min_interval))
        self._clock = clock
        self._lock: Optional[asyncio.Lock] = None
        self._last_dispatch: Optional[float] = None
        self._pending = 0

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def pending(self) -> int:
        """実行中 + 待機中のリクエスト数。"""
        return self._pending

    def _get_lock(self) -> asyncio.Lock:
        # イベントループ開始前に生成されても良いよう遅延生成する
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def schedule(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        func を待ち行列に積み、順番が来たら実行して結果を返す。

        func の例外はそのまま呼び出し元に伝播する。
        """
        self._pending += 1
        try:
            async with self._get_lock():
                if self._last_dispatch is not None:
                    wait = self._last_dispatch + self._min_interval - self._clock()
                    if wait > 0:
                        await asyncio.sleep(wait)
                self._last_dispatch = self._clock()
                return await func()
        finally:
            self._pending -= 1


_limiter: Optional[RequestRateLimiter] = None


def get_rate_limiter(min_interval: float = 0.5) -> RequestRateLimiter:
    """
    プロセス全体で共有するレートリミッタを返す。

    初回呼び出し時の min_interval で生成し、それ以降は同じインスタンスを返す。
    """
    global _limiter
    if _limiter is None:
        _limiter = RequestRateLimiter(min_interval)
    return _limiter


def reset_rate_limiter() -> None:
    """テスト用に共有インスタンスを破棄する。"""
    global _limiter
    _limiter = None
