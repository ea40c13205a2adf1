"""イベントプロデューサー"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import structlog

from .exceptions import MessagingError, MessagingErrorCodes
from .models import EventEnvelope

logger = structlog.stdlib.get_logger(__name__)


class EventProducer(ABC):
    """イベントプロデューサー抽象基底クラス。"""

    @abstractmethod
    def publish(self, envelope: EventEnvelope) -> None:
        """イベントを発行する（同期）。"""
        ...

    @abstractmethod
    async def publish_async(self, envelope: EventEnvelope) -> None:
        """イベントを発行する（非同期）。"""
        ...

    @abstractmethod
    def close(self) -> None:
        """プロデューサーを閉じる。"""
        ...

    def __enter__(self) -> EventProducer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class KafkaEventProducer(EventProducer):
    """confluent-kafka を使ったイベントプロデューサー。

    ルーティングキーをそのまま Kafka トピック名として使う。
    """

    def __init__(self, brokers: list[str], timeout_seconds: float = 10.0) -> None:
        self._brokers = brokers
        self._timeout_seconds = timeout_seconds
        self._producer: Any = None

    def _get_producer(self) -> Any:  # noqa: ANN401
        if self._producer is None:
            from confluent_kafka import Producer

            self._producer = Producer(
                {
                    "bootstrap.servers": ",".join(self._brokers),
                    "acks": "all",
                }
            )
        return self._producer

    def publish(self, envelope: EventEnvelope) -> None:
        """Kafka にイベントを発行する。"""
        try:
            producer = self._get_producer()
            headers = {
                "event-id": envelope.metadata.event_id,
                "content-type": "application/json",
                **envelope.headers,
            }
            producer.produce(
                topic=envelope.routing_key,
                value=envelope.payload,
                headers=[(k, v.encode()) for k, v in headers.items()],
            )
            if envelope.persistent:
                remaining = producer.flush(timeout=self._timeout_seconds)
                if remaining:
                    raise RuntimeError(f"{remaining} message(s) not delivered before timeout")
        except Exception as e:
            raise MessagingError(
                code=MessagingErrorCodes.PUBLISH_FAILED,
                message=f"Failed to publish event to {envelope.routing_key}: {e}",
                cause=e,
            ) from e

    async def publish_async(self, envelope: EventEnvelope) -> None:
        """非同期でイベントを発行する（実装は同期をスレッドで実行）。"""
        import asyncio

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self.publish, envelope)

    def close(self) -> None:
        """プロデューサーをフラッシュして閉じる。未送信分はタイムアウト後に破棄する。"""
        if self._producer is not None:
            remaining = self._producer.flush(timeout=self._timeout_seconds)
            if remaining:
                logger.warning("producer closed with undelivered messages", count=remaining)
            self._producer = None
