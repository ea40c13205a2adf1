"""InMemoryBroker のユニットテスト"""

import pytest
from orderflow.messaging import (
    BrokerTopology,
    EventEnvelope,
    InMemoryBroker,
    InMemoryEventConsumer,
    InMemoryEventProducer,
    MessagingError,
)
from orderflow.messaging.memory import topic_matches

TOPOLOGY = BrokerTopology(
    exchange="app.topic", queue="orders.q", bindings=["user.created", "user.updated"]
)


@pytest.mark.parametrize(
    ("pattern", "key", "expected"),
    [
        ("user.created", "user.created", True),
        ("user.created", "user.updated", False),
        ("user.*", "user.updated", True),
        ("user.*", "user.profile.updated", False),
        ("user.#", "user.profile.updated", True),
        ("#", "order.cancelled", True),
        ("*.created", "order.created", True),
    ],
)
def test_topic_matches(pattern: str, key: str, expected: bool) -> None:
    """トピックパターン照合。"""
    assert topic_matches(pattern, key) is expected


async def test_one_queue_receives_multiple_routing_keys() -> None:
    """1 つの永続キューが複数のルーティングキーを受け取ること。"""
    broker = InMemoryBroker()
    consumer = InMemoryEventConsumer(broker)
    consumer.bind(TOPOLOGY)
    producer = InMemoryEventProducer(broker)

    await producer.publish_async(EventEnvelope(routing_key="user.created", payload=b"1"))
    await producer.publish_async(EventEnvelope(routing_key="user.updated", payload=b"2"))
    await producer.publish_async(EventEnvelope(routing_key="order.created", payload=b"3"))

    first = await consumer.receive_async(timeout_seconds=0.1)
    second = await consumer.receive_async(timeout_seconds=0.1)
    assert first is not None and first.routing_key == "user.created"
    assert second is not None and second.routing_key == "user.updated"
    assert await consumer.receive_async(timeout_seconds=0.01) is None
    assert len(producer.published) == 3


async def test_queue_survives_consumer_restart() -> None:
    """コンシューマーを作り直してもキューのメッセージは残ること。"""
    broker = InMemoryBroker()
    InMemoryEventConsumer(broker).bind(TOPOLOGY)
    broker.route(EventEnvelope(routing_key="user.created", payload=b"kept"))

    consumer = InMemoryEventConsumer(broker)
    consumer.bind(TOPOLOGY)
    message = await consumer.receive_async(timeout_seconds=0.1)
    assert message is not None
    assert message.payload == b"kept"


async def test_ack_and_reject_are_recorded() -> None:
    """ack / reject がブローカーに記録されること。"""
    broker = InMemoryBroker()
    consumer = InMemoryEventConsumer(broker)
    consumer.bind(TOPOLOGY)
    broker.route(EventEnvelope(routing_key="user.created", payload=b"a"))
    broker.route(EventEnvelope(routing_key="user.created", payload=b"b"))

    a = await consumer.receive_async(0.1)
    b = await consumer.receive_async(0.1)
    assert a is not None and b is not None
    consumer.ack(a)
    consumer.reject(b)
    assert broker.acked == [a]
    assert broker.rejected == [b]
    assert broker.pending("orders.q") == 0


def test_unavailable_broker_raises() -> None:
    """ブローカー停止中は bind と publish が失敗すること。"""
    broker = InMemoryBroker()
    broker.available = False
    with pytest.raises(MessagingError):
        InMemoryEventConsumer(broker).bind(TOPOLOGY)
    with pytest.raises(MessagingError):
        InMemoryEventProducer(broker).publish(
            EventEnvelope(routing_key="user.created", payload=b"x")
        )


async def test_receive_before_bind_raises() -> None:
    """bind 前の受信は MessagingError。"""
    with pytest.raises(MessagingError):
        await InMemoryEventConsumer(InMemoryBroker()).receive_async(0.01)
