"""ユーザーサービス HTTP クライアント実装"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from ..retry import AttemptOutcome, RetryableFailure, Success, TerminalFailure
from .client import UsersClient
from .models import UsersClientConfig


class HttpUsersClient(UsersClient):
    """httpx を使った存在確認クライアント。

    ``GET {base_url}/{id}`` の結果を次のように分類する。

    - 2xx: Success（応答 JSON を値として保持）
    - 5xx、タイムアウト、接続エラー: RetryableFailure
    - それ以外（404 など）: TerminalFailure
    """

    def __init__(
        self, config: UsersClientConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self._config = config
        self._transport = transport

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url.rstrip("/"),
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )

    async def check_exists(self, user_id: str) -> AttemptOutcome:
        if not user_id:
            # 空 ID の GET はコレクションのパスになる
            return TerminalFailure(reason="empty id")
        try:
            async with self._make_client() as client:
                resp = await client.get(f"/{quote(user_id, safe='')}")
        except httpx.TransportError as e:
            # TimeoutException は TransportError のサブクラス
            return RetryableFailure(cause=e)

        if resp.is_success:
            return Success(value=_json_or_empty(resp))
        if resp.status_code >= 500:
            return RetryableFailure(
                cause=httpx.HTTPStatusError(
                    f"users service unavailable (HTTP {resp.status_code})",
                    request=resp.request,
                    response=resp,
                )
            )
        return TerminalFailure(
            reason=f"HTTP {resp.status_code}",
            status_code=resp.status_code,
        )


def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
