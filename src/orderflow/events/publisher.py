"""ベストエフォートのイベント発行"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from ..messaging import EventEnvelope, EventProducer
from ..telemetry.metrics import publish_failures_total

logger = structlog.stdlib.get_logger(__name__)


class EventPublisher:
    """ローカルコミット後にドメインイベントを発行する。

    発行の失敗はログに残すだけで呼び出し元には伝えず、再送もしない。
    リクエスト処理からは schedule を使い、ブローカーの遅延を応答に持ち込まない。
    """

    def __init__(self, producer: EventProducer | None = None, source: str = "") -> None:
        self._producer = producer
        self._source = source
        self._pending: set[asyncio.Task[bool]] = set()

    def attach(self, producer: EventProducer | None) -> None:
        """ブローカー接続確立後にプロデューサーを差し込む。"""
        self._producer = producer

    @property
    def pending(self) -> int:
        """完了していない発行タスク数。"""
        return len(self._pending)

    def schedule(self, routing_key: str, payload: dict[str, Any] | bytes) -> None:
        """発行をバックグラウンドタスクとして開始し、完了を待たずに戻る。"""
        task = asyncio.create_task(self.publish(routing_key, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """開始済みの発行タスクがすべて終わるまで待つ。"""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def publish(self, routing_key: str, payload: dict[str, Any] | bytes) -> bool:
        """イベントを発行する。発行できたら True。例外は送出しない。"""
        if self._producer is None:
            logger.warning("publish skipped, broker not connected", routing_key=routing_key)
            return False
        try:
            if isinstance(payload, bytes):
                envelope = EventEnvelope(routing_key=routing_key, payload=payload)
            else:
                envelope = EventEnvelope.from_json(routing_key, payload, source=self._source)
            await self._producer.publish_async(envelope)
        except Exception as e:
            publish_failures_total.add(1, {"routing_key": routing_key})
            logger.error("publish failed", routing_key=routing_key, error=str(e))
            return False
        logger.info(
            "event published",
            routing_key=routing_key,
            event_id=envelope.metadata.event_id,
        )
        return True
