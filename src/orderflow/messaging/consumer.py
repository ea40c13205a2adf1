"""イベントコンシューマー"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import structlog

from .exceptions import MessagingError, MessagingErrorCodes
from .models import BrokerTopology, ConsumedMessage, ConsumerConfig

logger = structlog.stdlib.get_logger(__name__)


class EventConsumer(ABC):
    """永続キューからメッセージを受け取るコンシューマー抽象基底クラス。

    メッセージごとに ack か reject のどちらかを必ず一度呼ぶ。
    reject は再キューしない。
    """

    @abstractmethod
    def bind(self, topology: BrokerTopology) -> None:
        """キューを宣言し、ルーティングキーに束縛する。"""
        ...

    @abstractmethod
    async def receive_async(self, timeout_seconds: float = 1.0) -> ConsumedMessage | None:
        """メッセージを受信する。タイムアウト時は None を返す。"""
        ...

    @abstractmethod
    def ack(self, message: ConsumedMessage) -> None:
        """処理完了を通知する。"""
        ...

    @abstractmethod
    def reject(self, message: ConsumedMessage) -> None:
        """メッセージを再キューせずに破棄する。"""
        ...

    @abstractmethod
    def close(self) -> None:
        """コンシューマーを閉じる。"""
        ...

    async def bind_async(self, topology: BrokerTopology) -> None:
        """非同期で bind する。"""
        self.bind(topology)

    async def ack_async(self, message: ConsumedMessage) -> None:
        """非同期で ack する。"""
        self.ack(message)

    async def reject_async(self, message: ConsumedMessage) -> None:
        """非同期で reject する。"""
        self.reject(message)


class KafkaEventConsumer(EventConsumer):
    """confluent-kafka を使ったコンシューマー。

    永続キューはコンシューマーグループ、ルーティングキーはトピックに対応する。
    Kafka には再キューしない reject がないため、ack と同じくオフセットを
    コミットしてメッセージを読み飛ばす。
    """

    def __init__(self, config: ConsumerConfig) -> None:
        self._config = config
        self._consumer: Any = None
        self._queue = ""

    def _get_consumer(self) -> Any:  # noqa: ANN401
        if self._consumer is None:
            if not self._queue:
                raise MessagingError(
                    code=MessagingErrorCodes.CONNECTION_FAILED,
                    message="Consumer is not bound to a queue",
                )
            from confluent_kafka import Consumer

            self._consumer = Consumer(
                {
                    "bootstrap.servers": ",".join(self._config.brokers),
                    "group.id": self._queue,
                    "auto.offset.reset": self._config.auto_offset_reset,
                    "enable.auto.commit": False,
                }
            )
        return self._consumer

    def bind(self, topology: BrokerTopology) -> None:
        """グループ ID をキュー名として全バインディングを購読する。"""
        self._queue = topology.queue
        try:
            consumer = self._get_consumer()
            # 接続確認。ブローカー不達ならここで失敗させて起動時リトライに乗せる
            consumer.list_topics(timeout=self._config.poll_timeout_seconds)
            consumer.subscribe(list(topology.bindings))
        except MessagingError:
            raise
        except Exception as e:
            self.close()
            raise MessagingError(
                code=MessagingErrorCodes.CONNECTION_FAILED,
                message=f"Failed to bind queue {topology.queue}: {e}",
                cause=e,
            ) from e

    def receive(self, timeout_seconds: float = 1.0) -> ConsumedMessage | None:
        """Kafka からメッセージを受信する。"""
        try:
            msg = self._get_consumer().poll(timeout=timeout_seconds)
            if msg is None:
                return None
            if msg.error():
                raise MessagingError(
                    code=MessagingErrorCodes.RECEIVE_FAILED,
                    message=f"Kafka error: {msg.error()}",
                )
            headers: dict[str, str] = {}
            if msg.headers():
                headers = {k: v.decode() for k, v in msg.headers()}
            return ConsumedMessage(
                routing_key=msg.topic(),
                payload=msg.value() or b"",
                delivery_tag=msg.offset(),
                queue=self._queue,
                headers=headers,
                partition=msg.partition(),
                offset=msg.offset(),
            )
        except MessagingError:
            raise
        except Exception as e:
            raise MessagingError(
                code=MessagingErrorCodes.RECEIVE_FAILED,
                message=f"Failed to receive message: {e}",
                cause=e,
            ) from e

    async def bind_async(self, topology: BrokerTopology) -> None:
        """接続確認を含む bind をスレッドで実行する。"""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self.bind, topology)

    async def receive_async(self, timeout_seconds: float = 1.0) -> ConsumedMessage | None:
        """非同期でメッセージを受信する。"""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.receive, timeout_seconds)

    def _commit(self, message: ConsumedMessage) -> None:
        from confluent_kafka import TopicPartition

        tp = TopicPartition(message.routing_key, message.partition or 0, (message.offset or 0) + 1)
        try:
            self._get_consumer().commit(offsets=[tp], asynchronous=False)
        except MessagingError:
            raise
        except Exception as e:
            raise MessagingError(
                code=MessagingErrorCodes.COMMIT_FAILED,
                message=f"Failed to commit offset for {message.routing_key}: {e}",
                cause=e,
            ) from e

    def ack(self, message: ConsumedMessage) -> None:
        """オフセットをコミットする。"""
        self._commit(message)

    def reject(self, message: ConsumedMessage) -> None:
        """オフセットをコミットしてメッセージを破棄する。"""
        logger.warning(
            "message dropped",
            queue=self._queue,
            routing_key=message.routing_key,
            offset=message.offset,
        )
        self._commit(message)

    def close(self) -> None:
        """コンシューマーを閉じる。"""
        if self._consumer is not None:
            self._consumer.close()
            self._consumer = None

    async def ack_async(self, message: ConsumedMessage) -> None:
        """同期コミットをスレッドで実行する。"""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self.ack, message)

    async def reject_async(self, message: ConsumedMessage) -> None:
        """同期コミットをスレッドで実行する。"""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self.reject, message)
