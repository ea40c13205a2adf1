"""インメモリブローカー実装（テスト・ローカル実行用）"""

from __future__ import annotations

import asyncio
import itertools

from .consumer import EventConsumer
from .exceptions import MessagingError, MessagingErrorCodes
from .models import BrokerTopology, ConsumedMessage, EventEnvelope
from .producer import EventProducer


def topic_matches(pattern: str, routing_key: str) -> bool:
    """トピック型エクスチェンジのバインディングパターン照合。

    ``*`` はちょうど 1 語、``#`` は 0 語以上に一致する。
    """
    return _match(pattern.split("."), routing_key.split("."))


def _match(pattern: list[str], words: list[str]) -> bool:
    if not pattern:
        return not words
    head, rest = pattern[0], pattern[1:]
    if head == "#":
        return any(_match(rest, words[i:]) for i in range(len(words) + 1))
    if not words:
        return False
    if head == "*" or head == words[0]:
        return _match(rest, words[1:])
    return False


class InMemoryBroker:
    """トピック型エクスチェンジ 1 つと永続キューを持つインメモリブローカー。"""

    def __init__(self) -> None:
        self.available = True
        self._queues: dict[str, asyncio.Queue[ConsumedMessage]] = {}
        self._bindings: dict[str, set[str]] = {}
        self._tags = itertools.count(1)
        self.acked: list[ConsumedMessage] = []
        self.rejected: list[ConsumedMessage] = []

    def _ensure_available(self) -> None:
        if not self.available:
            raise MessagingError(
                code=MessagingErrorCodes.CONNECTION_FAILED,
                message="Broker is unavailable",
            )

    def declare(self, topology: BrokerTopology) -> None:
        """キューを宣言（既存なら再利用）し、バインディングを追加する。"""
        self._ensure_available()
        self._queues.setdefault(topology.queue, asyncio.Queue())
        self._bindings.setdefault(topology.queue, set()).update(topology.bindings)

    def route(self, envelope: EventEnvelope) -> int:
        """一致するバインディングを持つ全キューに配送し、配送先数を返す。"""
        self._ensure_available()
        delivered = 0
        for queue_name, patterns in self._bindings.items():
            if any(topic_matches(p, envelope.routing_key) for p in patterns):
                self._queues[queue_name].put_nowait(
                    ConsumedMessage(
                        routing_key=envelope.routing_key,
                        payload=envelope.payload,
                        delivery_tag=next(self._tags),
                        queue=queue_name,
                        headers=dict(envelope.headers),
                    )
                )
                delivered += 1
        return delivered

    def queue(self, name: str) -> asyncio.Queue[ConsumedMessage]:
        return self._queues[name]

    def pending(self, name: str) -> int:
        """未受信メッセージ数。"""
        queue = self._queues.get(name)
        return queue.qsize() if queue is not None else 0


class InMemoryEventProducer(EventProducer):
    """InMemoryBroker に発行するプロデューサー。発行したエンベロープを記録する。"""

    def __init__(self, broker: InMemoryBroker) -> None:
        self._broker = broker
        self.published: list[EventEnvelope] = []
        self.closed = False

    def publish(self, envelope: EventEnvelope) -> None:
        self._broker.route(envelope)
        self.published.append(envelope)

    async def publish_async(self, envelope: EventEnvelope) -> None:
        self.publish(envelope)

    def close(self) -> None:
        self.closed = True


class InMemoryEventConsumer(EventConsumer):
    """InMemoryBroker のキューから受信するコンシューマー。"""

    def __init__(self, broker: InMemoryBroker) -> None:
        self._broker = broker
        self._queue_name: str | None = None
        self.closed = False

    def bind(self, topology: BrokerTopology) -> None:
        self._broker.declare(topology)
        self._queue_name = topology.queue

    async def receive_async(self, timeout_seconds: float = 1.0) -> ConsumedMessage | None:
        if self._queue_name is None:
            raise MessagingError(
                code=MessagingErrorCodes.RECEIVE_FAILED,
                message="Consumer is not bound to a queue",
            )
        try:
            return await asyncio.wait_for(
                self._broker.queue(self._queue_name).get(), timeout=timeout_seconds
            )
        except asyncio.TimeoutError:
            return None

    def ack(self, message: ConsumedMessage) -> None:
        self._broker.acked.append(message)

    def reject(self, message: ConsumedMessage) -> None:
        self._broker.rejected.append(message)

    def close(self) -> None:
        self.closed = True
