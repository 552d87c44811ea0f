# backend/taskboard/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。

すべてのリクエストは RequestRateLimiter を経由して直列化される。
エラーは例外として投げ、握りつぶしは上位レイヤー（service.py）で行う。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import NotionConfig, get_notion_config
from .rate_limiter import RequestRateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotionClient:
    """
    Notion API の薄い非同期ラッパークライアント。

    - データベースの query
    - ページの作成・更新（プロパティ / アーカイブ）
    - ブロック子要素の取得・追加、ブロック更新
    - コメント作成
    """

    def __init__(
        self,
        config: Optional[NotionConfig] = None,
        *,
        limiter: Optional[RequestRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or get_notion_config()
        self.limiter = limiter or get_rate_limiter(self.config.min_request_interval_seconds)
        self._http = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            headers=self._build_headers(),
            timeout=self.config.timeout_seconds,
            transport=transport,
        )

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check NOTION_API_KEY.")
        if response.status_code == 403:
            raise NotionAuthError("Forbidden. Check Notion integration permissions.")
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        async def send() -> httpx.Response:
            return await self._http.request(method, path, json=json, params=params)

        try:
            response = await self.limiter.schedule(send)
        except httpx.RequestError as exc:
            raise NotionClientError(f"Failed to call Notion API: {exc}") from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise NotionAPIError("Unexpected Notion API response: body is not JSON.") from exc

        if not isinstance(data, dict):
            raise NotionAPIError("Unexpected Notion API response: body is not an object.")
        return data

    @staticmethod
    def _results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        results = data.get("results", [])
        if not isinstance(results, list):
            raise NotionAPIError("Unexpected Notion API response format: 'results' is not a list.")
        return results

    async def query_database(
        self,
        database_id: str,
        *,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        データベースを query し、生のページオブジェクトのリストを返す。
        """
        payload: Dict[str, Any] = {}
        if filter is not None:
            payload["filter"] = filter
        if sorts is not None:
            payload["sorts"] = sorts
        if page_size is not None:
            payload["page_size"] = page_size

        data = await self._request("POST", f"/databases/{database_id}/query", json=payload)
        return self._results(data)

    async def create_page(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/pages", json=body)

    async def update_page(self, page_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        ページのプロパティ・アーカイブ状態などを更新する。
        """
        return await self._request("PATCH", f"/pages/{page_id}", json=body)

    async def list_block_children(
        self,
        block_id: str,
        *,
        page_size: int = 100,
    ) -> List[Dict[str, Any]]:
        data = await self._request(
            "GET",
            f"/blocks/{block_id}/children",
            params={"page_size": page_size},
        )
        return self._results(data)

    async def append_block_children(
        self,
        block_id: str,
        children: List[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        data = await self._request(
            "PATCH",
            f"/blocks/{block_id}/children",
            json={"children": children},
        )
        return self._results(data)

    async def update_block(self, block_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/blocks/{block_id}", json=body)

    async def create_comment(self, page_id: str, text: str) -> Dict[str, Any]:
        body = {
            "parent": {"page_id": page_id},
            "rich_text": [{"text": {"content": text}}],
        }
        return await self._request("POST", "/comments", json=body)

    async def aclose(self) -> None:
        await self._http.aclose()
