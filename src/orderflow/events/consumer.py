"""ライフサイクルイベントをキャッシュへ反映するコンシューマー"""

from __future__ import annotations

import asyncio
import contextlib
import json
from collections.abc import Iterable
from enum import StrEnum

import structlog

from ..cache import EntitySnapshot, SnapshotCache, SnapshotError
from ..messaging import ConsumedMessage, EventConsumer, MessagingError
from ..telemetry.metrics import consumed_messages_total

logger = structlog.stdlib.get_logger(__name__)


class ConsumeResult(StrEnum):
    """メッセージ処理の終端状態。"""

    ACKED = "acked"
    REJECTED = "rejected"


class SnapshotEventConsumer:
    """購読キューからメッセージを取り出し、スナップショットキャッシュを更新する。

    受信 → JSON 解析 → ルーティングキー判定 → キャッシュ上書き → ack の順に処理する。
    解析できないメッセージは再キューせず reject し、未知のルーティングキーは
    何もせず ack する。キャッシュへの書き込みは無条件上書きなので、同じイベントの
    重複や順序の入れ替わりがあってもエントリが壊れることはない。
    """

    def __init__(
        self,
        consumer: EventConsumer,
        cache: SnapshotCache,
        routing_keys: Iterable[str],
        poll_timeout_seconds: float = 1.0,
    ) -> None:
        self._consumer = consumer
        self._cache = cache
        self._routing_keys = frozenset(routing_keys)
        self._poll_timeout = poll_timeout_seconds
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def handle(self, message: ConsumedMessage) -> ConsumeResult:
        """1 件のメッセージを処理して ack か reject する。"""
        try:
            data = json.loads(message.payload.decode("utf-8"))
        except (ValueError, RecursionError) as e:
            # JSONDecodeError と UnicodeDecodeError は ValueError のサブクラス
            return await self._reject(message, f"unparsable payload: {e}")

        if message.routing_key not in self._routing_keys:
            logger.info(
                "ignored event with unknown routing key",
                routing_key=message.routing_key,
                delivery_tag=message.delivery_tag,
            )
            return await self._ack(message, "ignored")

        try:
            snapshot = EntitySnapshot.from_payload(data)
        except SnapshotError as e:
            return await self._reject(message, str(e))

        await self._cache.set(snapshot.id, snapshot)
        logger.info(
            "cache updated from event",
            routing_key=message.routing_key,
            entity_id=snapshot.id,
        )
        return await self._ack(message, "applied")

    async def _ack(self, message: ConsumedMessage, reason: str) -> ConsumeResult:
        await self._consumer.ack_async(message)
        consumed_messages_total.add(1, {"result": reason})
        return ConsumeResult.ACKED

    async def _reject(self, message: ConsumedMessage, reason: str) -> ConsumeResult:
        logger.error(
            "malformed event dropped",
            routing_key=message.routing_key,
            delivery_tag=message.delivery_tag,
            reason=reason,
        )
        await self._consumer.reject_async(message)
        consumed_messages_total.add(1, {"result": "rejected"})
        return ConsumeResult.REJECTED

    async def run(self) -> None:
        """停止されるまでメッセージを受信して処理し続ける。"""
        self._running = True
        while self._running:
            try:
                message = await self._consumer.receive_async(self._poll_timeout)
            except MessagingError as e:
                logger.error("receive failed", error=str(e))
                await asyncio.sleep(self._poll_timeout)
                continue
            if message is None:
                continue
            try:
                await self.handle(message)
            except MessagingError as e:
                logger.error(
                    "acknowledgement failed",
                    routing_key=message.routing_key,
                    delivery_tag=message.delivery_tag,
                    error=str(e),
                )
            except Exception as e:
                logger.error(
                    "event handling failed",
                    routing_key=message.routing_key,
                    delivery_tag=message.delivery_tag,
                    error=str(e),
                )

    def start(self) -> None:
        """受信ループをバックグラウンドタスクとして開始する。"""
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """受信ループを停止してコンシューマーを閉じる。"""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self._consumer.close()
