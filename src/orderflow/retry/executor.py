"""リトライ実行エンジン"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from ..telemetry.metrics import retry_attempts_total
from .models import RetryPolicy

T = TypeVar("T")

logger = structlog.stdlib.get_logger(__name__)


async def execute(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    operation_name: str = "operation",
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """非同期関数をポリシーに従って最大 max_attempts 回実行する。

    retry_on に含まれない例外は即座に送出する。最終試行の例外は
    ラップせずにそのまま送出する。

    Args:
        fn: 実行する非同期関数（複数回呼ばれうる）
        policy: リトライポリシー
        operation_name: ログ用の操作名
        retry_on: 再試行対象の例外型
        sleep: 待機関数（テストで差し替え可能）
    """
    attempt = 1
    while True:
        logger.debug(
            "attempt started",
            operation=operation_name,
            attempt=attempt,
            max_attempts=policy.max_attempts,
        )
        try:
            result = await fn()
        except retry_on as e:
            retry_attempts_total.add(1, {"operation": operation_name, "result": "failure"})
            logger.warning(
                "attempt failed",
                operation=operation_name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                error=str(e),
            )
            if attempt >= policy.max_attempts:
                logger.error(
                    "all attempts failed",
                    operation=operation_name,
                    max_attempts=policy.max_attempts,
                )
                raise
            delay = policy.compute_delay(attempt)
            logger.info(
                "retry scheduled",
                operation=operation_name,
                next_attempt=attempt + 1,
                delay_seconds=round(delay, 3),
            )
            await sleep(delay)
            attempt += 1
            continue
        retry_attempts_total.add(1, {"operation": operation_name, "result": "success"})
        logger.debug("attempt succeeded", operation=operation_name, attempt=attempt)
        return result
